"""
Domain types used by the scheduling engine.

Documents coming from the store are converted with the ``from_document`` helpers;
everything inside the engine works on these dataclasses and on plain string ids.
"""
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import List, Optional

from .config import CLASSROOM_KEYWORDS, HARI_LIST
from .errors import InvalidArgument

# SENIN=0 ... SABTU=5, sama dengan date.weekday()
HARI_WEEKDAY = {hari: idx for idx, hari in enumerate(HARI_LIST)}

_TAHUN_RE = re.compile(r"^(\d{4})/(\d{4})$")


def parse_day(value):
    """Normalize a day name ('senin', 'Senin ', 'SENIN') to HARI form. Raises InvalidArgument."""
    if not isinstance(value, str):
        raise InvalidArgument(f"Invalid hari value: {value!r}")
    hari = value.strip().upper()
    if hari not in HARI_WEEKDAY:
        raise InvalidArgument(f"Invalid hari value: {value!r}")
    return hari


def parse_time(value):
    """Accept datetime.time or 'HH:MM' / 'HH:MM:SS' strings."""
    if isinstance(value, time):
        return value
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(str(value).strip(), fmt).time()
        except ValueError:
            continue
    raise InvalidArgument(f"Invalid time value: {value!r}")


class Semester(str, Enum):
    GANJIL = "GANJIL"   # odd, first half of the academic year
    GENAP = "GENAP"     # even, second half

    @property
    def parity(self):
        return 1 if self is Semester.GANJIL else 0


@dataclass(frozen=True)
class Term:
    semester: Semester
    tahun: str

    def __post_init__(self):
        try:
            semester = Semester(self.semester)
        except ValueError:
            raise InvalidArgument(f"Invalid semester: {self.semester!r}")
        object.__setattr__(self, "semester", semester)
        match = _TAHUN_RE.match(str(self.tahun))
        if not match or int(match.group(2)) != int(match.group(1)) + 1:
            raise InvalidArgument(f"Invalid academic year {self.tahun!r}, expected 'YYYY/YYYY+1'")

    @property
    def start_year(self):
        return int(self.tahun.split("/")[0])

    def accepts_course_semester(self, course_semester):
        """GANJIL terms run odd-semester courses, GENAP terms even ones."""
        return course_semester % 2 == self.semester.parity

    @classmethod
    def current(cls, today=None):
        """July-December is GANJIL Y/Y+1, January-June is GENAP Y-1/Y."""
        today = today or date.today()
        if today.month >= 7:
            return cls(Semester.GANJIL, f"{today.year}/{today.year + 1}")
        return cls(Semester.GENAP, f"{today.year - 1}/{today.year}")

    def __str__(self):
        return f"{self.semester.value} {self.tahun}"


@dataclass
class Course:
    id: str
    name: str
    sks: int
    semester: int
    bidang_minat: str = "UMUM"
    is_teori: bool = True
    code: str = ""
    lecturer_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(doc["_id"]),
            name=doc.get("nama", ""),
            code=doc.get("kode", ""),
            sks=int(doc.get("sks", 0)),
            semester=int(doc.get("semester", 0)),
            bidang_minat=doc.get("bidangMinat") or "UMUM",
            is_teori=bool(doc.get("isTeori", True)),
            lecturer_ids=[str(i) for i in doc.get("dosenPengampu", [])],
        )


@dataclass
class Room:
    id: str
    name: str
    capacity: int = 0
    is_active: bool = True
    is_classroom: Optional[bool] = None

    def __post_init__(self):
        if self.is_classroom is None:
            lowered = self.name.lower()
            self.is_classroom = any(keyword in lowered for keyword in CLASSROOM_KEYWORDS)

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(doc["_id"]),
            name=doc.get("nama", ""),
            capacity=int(doc.get("kapasitas", 0)),
            is_active=bool(doc.get("isActive", True)),
            is_classroom=doc.get("isClassroom"),
        )


@dataclass
class Shift:
    id: str
    start_time: time
    end_time: time
    is_active: bool = True

    def __post_init__(self):
        self.start_time = parse_time(self.start_time)
        self.end_time = parse_time(self.end_time)
        if self.end_time <= self.start_time:
            raise InvalidArgument(f"Shift {self.id} ends before it starts")

    @property
    def label(self):
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(doc["_id"]),
            start_time=doc.get("startTime"),
            end_time=doc.get("endTime"),
            is_active=bool(doc.get("isActive", True)),
        )


@dataclass
class Lecturer:
    id: str
    name: str
    bidang_minat: str
    course_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(doc["_id"]),
            name=doc.get("nama", ""),
            bidang_minat=doc.get("bidangMinat", ""),
            course_ids=[str(i) for i in doc.get("matakuliahIds", [])],
        )


@dataclass
class Student:
    id: str
    name: str
    semester: int
    is_active: bool = True
    credit_load: int = 0

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(doc["_id"]),
            name=doc.get("nama", ""),
            semester=int(doc.get("semester", 0)),
            is_active=bool(doc.get("isActive", True)),
            credit_load=int(doc.get("totalSks", 0)),
        )


@dataclass
class Assignment:
    """A jadwal: one section of a course in a (room, shift, day) slot for a term."""
    course_id: str
    room_id: str
    shift_id: str
    hari: str
    term: Term
    lecturer_ids: List[str] = field(default_factory=list)
    student_ids: List[str] = field(default_factory=list)
    assistant_ids: List[str] = field(default_factory=list)
    kelas: str = "A"
    is_override: bool = False
    id: Optional[str] = None
    # search-time score, never persisted
    fitness: float = 0.0

    def slot(self):
        return self.shift_id, self.hari

    def to_document(self):
        return {
            "matakuliahId": self.course_id,
            "ruanganId": self.room_id,
            "shiftId": self.shift_id,
            "hari": self.hari,
            "kelas": self.kelas,
            "semester": self.term.semester.value,
            "tahun": self.term.tahun,
            "dosenIds": list(self.lecturer_ids),
            "mahasiswaIds": list(self.student_ids),
            "asistenLabIds": list(self.assistant_ids),
            "isOverride": self.is_override,
        }

    @classmethod
    def from_document(cls, doc):
        return cls(
            id=str(doc["_id"]) if doc.get("_id") is not None else None,
            course_id=str(doc["matakuliahId"]),
            room_id=str(doc["ruanganId"]),
            shift_id=str(doc["shiftId"]),
            hari=doc["hari"],
            kelas=doc.get("kelas", "A"),
            term=Term(doc["semester"], doc["tahun"]),
            lecturer_ids=[str(i) for i in doc.get("dosenIds", [])],
            student_ids=[str(i) for i in doc.get("mahasiswaIds", [])],
            assistant_ids=[str(i) for i in doc.get("asistenLabIds", [])],
            is_override=bool(doc.get("isOverride", False)),
        )


@dataclass
class Meeting:
    jadwal_id: str
    pertemuan: int
    tanggal: date
    id: Optional[str] = None

    def to_document(self):
        return {
            "jadwalId": self.jadwal_id,
            "pertemuan": self.pertemuan,
            "tanggal": self.tanggal.isoformat(),
        }

    @classmethod
    def from_document(cls, doc):
        tanggal = doc["tanggal"]
        if isinstance(tanggal, str):
            tanggal = date.fromisoformat(tanggal)
        elif isinstance(tanggal, datetime):
            tanggal = tanggal.date()
        return cls(
            id=str(doc["_id"]) if doc.get("_id") is not None else None,
            jadwal_id=str(doc["jadwalId"]),
            pertemuan=int(doc["pertemuan"]),
            tanggal=tanggal,
        )
