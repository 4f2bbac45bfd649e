"""
Data store collaborators.

The engine only needs to read the catalog and the term's jadwal, and to insert new
jadwal/meeting records. MongoStore talks to MongoDB, MemoryStore keeps everything in
Python lists (tests, dry runs).
"""
import copy

from bson import ObjectId
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .config import MONGO_DB, MONGO_URI
from .errors import StoreError
from .logger import setup_logger
from .models import Assignment, Course, Lecturer, Meeting, Room, Shift, Student

logger = setup_logger(__name__)


class Store:
    """Interface expected by SchedulingService."""

    def courses(self):
        raise NotImplementedError

    def rooms(self, active_only=True):
        raise NotImplementedError

    def shifts(self, active_only=True):
        raise NotImplementedError

    def lecturers(self):
        raise NotImplementedError

    def students(self, active_only=True):
        raise NotImplementedError

    def assignments(self, term):
        raise NotImplementedError

    def meetings(self, jadwal_id):
        raise NotImplementedError

    def insert_assignment(self, assignment):
        raise NotImplementedError

    def insert_meetings(self, meetings):
        raise NotImplementedError


class MemoryStore(Store):

    def __init__(self, courses=(), rooms=(), shifts=(), lecturers=(), students=(), assignments=()):
        self._courses = list(courses)
        self._rooms = list(rooms)
        self._shifts = list(shifts)
        self._lecturers = list(lecturers)
        self._students = list(students)
        self._assignments = []
        self._meetings = []
        for assignment in assignments:
            self.insert_assignment(assignment)

    def courses(self):
        return list(self._courses)

    def rooms(self, active_only=True):
        return [r for r in self._rooms if r.is_active or not active_only]

    def shifts(self, active_only=True):
        return [s for s in self._shifts if s.is_active or not active_only]

    def lecturers(self):
        return list(self._lecturers)

    def students(self, active_only=True):
        return [s for s in self._students if s.is_active or not active_only]

    def assignments(self, term):
        return [copy.deepcopy(a) for a in self._assignments if a.term == term]

    def meetings(self, jadwal_id):
        return sorted((m for m in self._meetings if m.jadwal_id == jadwal_id), key=lambda m: m.pertemuan)

    def insert_assignment(self, assignment):
        stored = copy.deepcopy(assignment)
        stored.id = stored.id or str(ObjectId())
        stored.fitness = 0.0
        self._assignments.append(stored)
        return copy.deepcopy(stored)

    def insert_meetings(self, meetings):
        saved = []
        for meeting in meetings:
            stored = copy.deepcopy(meeting)
            stored.id = stored.id or str(ObjectId())
            self._meetings.append(stored)
            saved.append(stored)
        return saved


def _oid(value):
    return ObjectId(value) if ObjectId.is_valid(value) else value


class MongoStore(Store):
    """
    Collections: matakuliah, ruangan, shift, dosen,
    mahasiswa, jadwal, meeting. Every pymongo failure surfaces as StoreError.
    """

    def __init__(self, db):
        self.db = db

    @classmethod
    def connect(cls, uri=MONGO_URI, db_name=MONGO_DB, timeout_ms=10000):
        try:
            client = MongoClient(
                uri,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
                socketTimeoutMS=timeout_ms,
            )
            client.server_info()  # Test connection immediately
        except PyMongoError as e:
            logger.error("MongoDB connection: FAILED (%s)", e, exc_info=True)
            raise StoreError(f"Cannot connect to MongoDB: {e}") from e
        logger.info("MongoDB connection: SUCCESS (%s)", db_name)
        return cls(client[db_name])

    def _find(self, collection, query, factory):
        try:
            return [factory(doc) for doc in self.db[collection].find(query)]
        except PyMongoError as e:
            logger.error("Read from %s failed: %s", collection, e, exc_info=True)
            raise StoreError(f"Read from {collection} failed: {e}") from e

    def courses(self):
        return self._find("matakuliah", {}, Course.from_document)

    def rooms(self, active_only=True):
        query = {"isActive": {"$ne": False}} if active_only else {}
        return self._find("ruangan", query, Room.from_document)

    def shifts(self, active_only=True):
        query = {"isActive": {"$ne": False}} if active_only else {}
        return self._find("shift", query, Shift.from_document)

    def lecturers(self):
        return self._find("dosen", {}, Lecturer.from_document)

    def students(self, active_only=True):
        query = {"isActive": {"$ne": False}} if active_only else {}
        return self._find("mahasiswa", query, Student.from_document)

    def assignments(self, term):
        query = {"semester": term.semester.value, "tahun": term.tahun, "deletedAt": None}
        return self._find("jadwal", query, Assignment.from_document)

    def meetings(self, jadwal_id):
        meetings = self._find("meeting", {"jadwalId": jadwal_id}, Meeting.from_document)
        return sorted(meetings, key=lambda m: m.pertemuan)

    def insert_assignment(self, assignment):
        doc = assignment.to_document()
        if assignment.id:
            doc["_id"] = _oid(assignment.id)
        try:
            result = self.db["jadwal"].insert_one(doc)
        except PyMongoError as e:
            logger.error("Insert jadwal failed: %s", e, exc_info=True)
            raise StoreError(f"Insert jadwal failed: {e}") from e
        saved = copy.deepcopy(assignment)
        saved.id = str(result.inserted_id)
        saved.fitness = 0.0
        return saved

    def insert_meetings(self, meetings):
        if not meetings:
            return []
        docs = [m.to_document() for m in meetings]
        try:
            result = self.db["meeting"].insert_many(docs)
        except PyMongoError as e:
            logger.error("Insert meeting failed: %s", e, exc_info=True)
            raise StoreError(f"Insert meeting failed: {e}") from e
        saved = []
        for meeting, inserted_id in zip(meetings, result.inserted_ids):
            stored = copy.deepcopy(meeting)
            stored.id = str(inserted_id)
            saved.append(stored)
        return saved
