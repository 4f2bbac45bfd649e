import pytest

from penjadwalan.eligibility import (eligible_semesters, lecturer_can_teach, lecturer_is_eligible,
                                     student_can_take_course)
from penjadwalan.models import Course, Lecturer


def test_umum_course_can_be_taught_by_anyone():
    assert lecturer_can_teach("JARINGAN", "UMUM")
    assert lecturer_can_teach("DATA_MINING", "UMUM")


def test_field_must_match():
    assert lecturer_can_teach("DATA_MINING", "DATA_MINING")
    assert not lecturer_can_teach("JARINGAN", "DATA_MINING")


def test_pre_assignment_overrides_field():
    course = Course("C2", "Basis Data", 3, 1, "DATA_MINING")
    lecturer = Lecturer("L3", "Dosen Jaringan", "JARINGAN", course_ids=["C2"])
    assert lecturer_is_eligible(lecturer, course)

    course.lecturer_ids = ["L9"]
    assert not lecturer_is_eligible(Lecturer("L9x", "Other", "JARINGAN"), course)
    assert lecturer_is_eligible(Lecturer("L9", "Listed", "JARINGAN"), course)


@pytest.mark.parametrize("semester, expected", [
    (1, {1}),
    (2, {1, 2}),
    (3, {1, 3, 7}),
    (4, {2, 4, 8}),
    (5, {1, 5}),
    (6, {2, 6}),
    (7, {1, 7}),
    (8, {2, 8}),
])
def test_eligible_semesters(semester, expected):
    assert eligible_semesters(semester) == expected


@pytest.mark.parametrize("student_semester", range(3, 9))
def test_senior_students_only_take_base_own_and_plus_four(student_semester):
    base = 1 if student_semester % 2 else 2
    allowed = {base, student_semester}
    if student_semester + 4 <= 8:
        allowed.add(student_semester + 4)
    for course_semester in range(1, 9):
        assert student_can_take_course(student_semester, course_semester) == (course_semester in allowed)


def test_semester_one_only_takes_semester_one():
    assert student_can_take_course(1, 1)
    assert not student_can_take_course(1, 2)
    assert not student_can_take_course(1, 5)
