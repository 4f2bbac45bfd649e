from dataclasses import dataclass
from typing import Any

from .config import SchedulingConfig
from .eligibility import lecturer_is_eligible, student_can_take_course
from .logger import setup_logger

logger = setup_logger(__name__)

ROOM = "room"
COURSE = "course"
LECTURER = "lecturer"
STUDENT = "student"
LECTURER_FIELD = "lecturer_field"
STUDENT_SEMESTER = "student_semester"
STUDENT_SKS = "student_sks"
ASSISTANT = "assistant"

REPORT_SAMPLE_SIZE = 50


@dataclass
class Conflict:
    field: str
    message: str
    # the existing jadwal we collide with, or the offending catalog entity for eligibility checks
    existing: Any = None


class ConflictDetector:
    """
    Checks a candidate jadwal against the jadwal already committed for the same term.
    Every conflict is reported, not only the first one.
    """

    def __init__(self, courses=(), lecturers=(), students=(), config=None):
        self.courses = {c.id: c for c in courses}
        self.lecturers = {l.id: l for l in lecturers}
        self.students = {s.id: s for s in students}
        self.config = config or SchedulingConfig()

    def _term_sks(self, student_ids, jadwal):
        """SKS already taken this term by each of `student_ids` (courses missing from the catalog count 0)."""
        loads = dict.fromkeys(student_ids, 0)
        for j in jadwal:
            course = self.courses.get(j.course_id)
            if course is None:
                continue
            for student_id in j.student_ids:
                if student_id in loads:
                    loads[student_id] += course.sks
        return loads

    def check(self, candidate, existing):
        conflicts = []
        others = [j for j in existing if candidate.id is None or j.id != candidate.id]
        same_slot = [j for j in others if j.slot() == candidate.slot()]

        # 1. Ruangan-Shift-Hari
        room_hit = next((j for j in same_slot if j.room_id == candidate.room_id), None)
        if room_hit:
            conflicts.append(Conflict(ROOM, "Ruangan sudah terpakai pada shift dan hari yang sama.", room_hit))

        # 2. Matakuliah sudah dijadwalkan (per kelas)
        course_hit = next((j for j in others
                           if j.course_id == candidate.course_id and j.kelas == candidate.kelas), None)
        if course_hit:
            conflicts.append(Conflict(COURSE, f"Matakuliah kelas {candidate.kelas} sudah dijadwalkan.", course_hit))
        else:
            sections = [j for j in others if j.course_id == candidate.course_id]
            if len(sections) >= self.config.max_sections:
                conflicts.append(Conflict(
                    COURSE,
                    f"Matakuliah sudah memiliki {len(sections)} kelas (maksimal {self.config.max_sections}).",
                    sections[0],
                ))

        # 3. Dosen-Shift-Hari
        for lecturer_id in candidate.lecturer_ids:
            hit = next((j for j in same_slot if lecturer_id in j.lecturer_ids), None)
            if hit:
                conflicts.append(Conflict(LECTURER, f"Dosen {lecturer_id} sudah mengajar pada shift dan hari yang sama.", hit))

        # 4. Mahasiswa-Shift-Hari
        for student_id in candidate.student_ids:
            hit = next((j for j in same_slot if student_id in j.student_ids), None)
            if hit:
                conflicts.append(Conflict(STUDENT, f"Mahasiswa {student_id} sudah memiliki jadwal pada shift dan hari yang sama.", hit))

        course = self.courses.get(candidate.course_id)
        if course is not None:
            # 5. Bidang minat dosen
            for lecturer_id in candidate.lecturer_ids:
                lecturer = self.lecturers.get(lecturer_id)
                if lecturer is not None and not lecturer_is_eligible(lecturer, course):
                    conflicts.append(Conflict(
                        LECTURER_FIELD,
                        f"Dosen {lecturer.name or lecturer.id} ({lecturer.bidang_minat}) tidak sesuai bidang minat "
                        f"matakuliah {course.name} ({course.bidang_minat}).",
                        lecturer,
                    ))

            # 6. Semester mahasiswa
            for student_id in candidate.student_ids:
                student = self.students.get(student_id)
                if student is not None and not student_can_take_course(student.semester, course.semester):
                    conflicts.append(Conflict(
                        STUDENT_SEMESTER,
                        f"Mahasiswa {student.name or student.id} (semester {student.semester}) tidak dapat "
                        f"mengambil matakuliah semester {course.semester}.",
                        student,
                    ))

            # 7. Batas SKS mahasiswa per semester
            ceiling = self.config.max_sks_per_student
            for student_id, load in self._term_sks(candidate.student_ids, others).items():
                if load + course.sks > ceiling:
                    conflicts.append(Conflict(
                        STUDENT_SKS,
                        f"Mahasiswa {student_id} sudah mengambil {load} SKS, "
                        f"tambahan {course.sks} SKS melebihi batas {ceiling} SKS.",
                        self.students.get(student_id),
                    ))

        # 8. Asisten lab-Shift-Hari
        for assistant_id in candidate.assistant_ids:
            hit = next((j for j in same_slot if assistant_id in j.assistant_ids), None)
            if hit:
                conflicts.append(Conflict(ASSISTANT, f"Asisten lab {assistant_id} sudah bertugas pada shift dan hari yang sama.", hit))

        if conflicts:
            logger.debug("Candidate %s/%s has %d conflict(s): %s", candidate.course_id, candidate.kelas,
                         len(conflicts), [c.field for c in conflicts])
        return conflicts

    def is_free(self, candidate, existing):
        return not self.check(candidate, existing)


def _describe(jadwal):
    return {
        "id": jadwal.id,
        "course": jadwal.course_id,
        "section": jadwal.kelas,
        "room": jadwal.room_id,
        "shift": jadwal.shift_id,
        "day": jadwal.hari,
        "is_override": jadwal.is_override,
    }


def build_conflict_report(assignments):
    """
    Scan a whole term for double bookings.
    Returns a dict with counts per kind and up to 50 sample items each.
    """
    occupancy = {ROOM: {}, LECTURER: {}, STUDENT: {}, ASSISTANT: {}}
    found = {ROOM: [], LECTURER: [], STUDENT: [], ASSISTANT: []}

    for jadwal in assignments:
        keys = [(ROOM, jadwal.room_id)]
        keys += [(LECTURER, i) for i in jadwal.lecturer_ids]
        keys += [(STUDENT, i) for i in jadwal.student_ids]
        keys += [(ASSISTANT, i) for i in jadwal.assistant_ids]
        for kind, resource in keys:
            key = (jadwal.hari, jadwal.shift_id, resource)
            if key in occupancy[kind]:
                found[kind].append({
                    "type": kind,
                    "day": jadwal.hari,
                    "shift": jadwal.shift_id,
                    "resource": resource,
                    "slot": _describe(jadwal),
                    "existing": occupancy[kind][key],
                })
            else:
                occupancy[kind][key] = _describe(jadwal)

    report = {}
    for kind, items in found.items():
        report[f"{kind}_conflict_count"] = len(items)
        report[f"{kind}_conflicts_sample"] = items[:REPORT_SAMPLE_SIZE]
    report["total_conflicts"] = sum(len(items) for items in found.values())
    return report
