import random

import pytest

from penjadwalan.config import SchedulingConfig
from penjadwalan.models import Assignment, Course, Lecturer, Room, Semester, Shift, Student, Term
from penjadwalan.store import MemoryStore


@pytest.fixture
def term():
    return Term(Semester.GANJIL, "2024/2025")


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def config():
    return SchedulingConfig(generations=10, elite_size=2)


@pytest.fixture
def rooms():
    return [
        Room("R1", "Ruang Kuliah 1", 50),
        Room("R2", "Ruang Kuliah 2", 50),
        Room("R3", "Ruang Kuliah 3", 50),
        Room("LAB1", "Laboratorium Jaringan", 30),
    ]


@pytest.fixture
def shifts():
    return [
        Shift("SH1", "08:00", "09:40"),
        Shift("SH2", "09:40", "11:20"),
        Shift("SH3", "13:00", "14:40"),
        Shift("SH4", "14:40", "16:20"),
    ]


@pytest.fixture
def courses():
    return [
        Course("C1", "Algoritma", 3, 1, "UMUM", code="IF101"),
        Course("C2", "Basis Data", 3, 1, "DATA_MINING", code="IF102"),
        Course("C3", "Jaringan Komputer", 3, 1, "JARINGAN", code="IF103"),
        Course("C4", "Kalkulus", 3, 1, "UMUM", code="IF104"),
    ]


@pytest.fixture
def lecturers():
    return [
        Lecturer("L1", "Dosen Data 1", "DATA_MINING"),
        Lecturer("L2", "Dosen Data 2", "DATA_MINING"),
        Lecturer("L3", "Dosen Jaringan 1", "JARINGAN"),
        Lecturer("L4", "Dosen Jaringan 2", "JARINGAN"),
    ]


@pytest.fixture
def students():
    return [Student(f"M{i:03d}", f"Mahasiswa {i}", 1) for i in range(60)]


@pytest.fixture
def store(courses, rooms, shifts, lecturers, students):
    return MemoryStore(courses, rooms, shifts, lecturers, students)


@pytest.fixture
def make_jadwal(term):
    def _make(course_id="C1", room_id="R1", shift_id="SH1", hari="SENIN", lecturer_ids=("L1",),
              student_ids=(), assistant_ids=(), kelas="A", jadwal_id=None, is_override=False):
        return Assignment(
            course_id=course_id,
            room_id=room_id,
            shift_id=shift_id,
            hari=hari,
            term=term,
            lecturer_ids=list(lecturer_ids),
            student_ids=list(student_ids),
            assistant_ids=list(assistant_ids),
            kelas=kelas,
            id=jadwal_id,
            is_override=is_override,
        )
    return _make
