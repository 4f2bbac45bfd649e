"""
Who may teach / take what.

Aturan:
1. Mata kuliah UMUM boleh diajar semua dosen, selain itu bidang minat harus sama.
2. Mahasiswa semester 1 hanya boleh mengambil mata kuliah semester 1.
3. Mahasiswa semester 2 boleh mengambil semester 1 dan 2.
4. Mahasiswa semester ganjil >= 3: semester 1, semester sendiri, dan semester+4 (jika <= 8).
   Mahasiswa semester genap >= 4: semester 2, semester sendiri, dan semester+4 (jika <= 8).
"""
from .config import UMUM

MAX_SEMESTER = 8


def lecturer_can_teach(lecturer_field, course_field):
    if course_field == UMUM:
        return True
    return lecturer_field == course_field


def lecturer_is_eligible(lecturer, course):
    """Pre-assignment (on either side) wins over field-of-interest matching."""
    if course.id in lecturer.course_ids or lecturer.id in course.lecturer_ids:
        return True
    return lecturer_can_teach(lecturer.bidang_minat, course.bidang_minat)


def student_can_take_course(student_semester, course_semester):
    if student_semester == 1:
        return course_semester == 1
    if student_semester == 2:
        return course_semester in (1, 2)
    if student_semester >= 3:
        base = 1 if student_semester % 2 == 1 else 2
        if course_semester in (base, student_semester):
            return True
        plus_four = student_semester + 4
        return course_semester == plus_four and plus_four <= MAX_SEMESTER
    return False


def eligible_semesters(student_semester):
    return {s for s in range(1, MAX_SEMESTER + 1) if student_can_take_course(student_semester, s)}
