import pytest

from penjadwalan.config import SchedulingConfig
from penjadwalan.distribution import FairDistributionPlanner, divide_into_sections
from penjadwalan.models import Course, Semester, Student, Term


def ids(n, prefix="M"):
    return [f"{prefix}{i}" for i in range(n)]


@pytest.mark.parametrize("size, expected", [
    (0, []),
    (30, [30]),
    (50, [50]),
    (51, [26, 25]),
    (77, [39, 38]),
    (100, [50, 50]),
    (130, [50, 50]),
])
def test_divide_into_sections_sizes(size, expected):
    sections = divide_into_sections(ids(size))
    assert [len(s) for s in sections] == expected
    assert [s.label for s in sections] == ["A", "B"][:len(expected)]


def test_divide_truncates_to_first_hundred():
    roster = ids(130)
    sections = divide_into_sections(roster)
    assert sections[0].student_ids == roster[:50]
    assert sections[1].student_ids == roster[50:100]


def test_divide_respects_custom_caps():
    sections = divide_into_sections(ids(70), class_size=25, max_sections=3)
    assert [len(s) for s in sections] == [24, 23, 23]
    assert [s.label for s in sections] == ["A", "B", "C"]


def test_scarcity_single_section():
    course = Course("C1", "Algoritma", 3, 1)
    students = [Student(f"M{i}", f"Mahasiswa {i}", 1) for i in range(30)]
    plan = FairDistributionPlanner().plan([course], students)
    assert len(plan.sections["C1"]) == 1
    section = plan.sections["C1"][0]
    assert section.label == "A"
    assert sorted(section.student_ids) == sorted(s.id for s in students)
    assert plan.total_students_assigned == 30
    assert plan.total_sks_distributed == 90


def test_credit_ceiling_is_respected():
    courses = [Course(f"C{i}", f"MK {i}", 4, 1) for i in range(10)]
    students = [Student(f"M{i}", f"Mahasiswa {i}", 1, credit_load=i % 5) for i in range(20)]
    plan = FairDistributionPlanner().plan(courses, students)

    sks = {c.id: c.sks for c in courses}
    totals = {s.id: s.credit_load for s in students}
    for course_id, sections in plan.sections.items():
        assert len(sections) <= 2
        for section in sections:
            assert len(section) <= 50
            for sid in section.student_ids:
                totals[sid] += sks[course_id]

    assert all(total <= 24 for total in totals.values())
    assert totals == plan.workloads
    # starting loads are never mutated
    assert [s.credit_load for s in students] == [i % 5 for i in range(20)]


def test_scarce_courses_pick_first():
    config = SchedulingConfig(max_sks_per_student=3)
    big = Course("BIG", "Pengantar", 3, 1)       # semester 1, 3, 5, 7 students
    small = Course("SMALL", "Lanjutan", 3, 3)    # only semester 3 students
    students = [
        Student("S3a", "A", 3), Student("S3b", "B", 3),
        Student("S1a", "C", 1), Student("S1b", "D", 1),
    ]
    plan = FairDistributionPlanner(config).plan([big, small], students)
    assert plan.roster("SMALL") == ["S3a", "S3b"]
    assert plan.roster("BIG") == ["S1a", "S1b"]


def test_lightest_students_are_preferred():
    config = SchedulingConfig(class_size=2, max_sections=1)
    course = Course("C1", "Algoritma", 3, 1)
    students = [
        Student("heavy", "A", 1, credit_load=20),
        Student("light", "B", 1, credit_load=0),
        Student("medium", "C", 1, credit_load=10),
    ]
    plan = FairDistributionPlanner(config).plan([course], students)
    assert plan.roster("C1") == ["light", "medium"]


def test_students_over_the_ceiling_are_not_eligible():
    course = Course("C1", "Algoritma", 3, 1)
    plan = FairDistributionPlanner().plan([course], [Student("M1", "A", 1, credit_load=22)])
    assert plan.sections["C1"] == []
    assert plan.skipped == ["C1"]


def test_term_filters_parity_and_theory():
    courses = [
        Course("ODD", "Ganjil", 3, 1),
        Course("EVEN", "Genap", 3, 2),
        Course("LAB", "Praktikum", 1, 1, is_teori=False),
    ]
    students = [Student("M1", "A", 2), Student("M2", "B", 2, is_active=False)]
    plan = FairDistributionPlanner().plan(courses, students, Term(Semester.GENAP, "2024/2025"))
    assert list(plan.sections) == ["EVEN"]
    assert plan.roster("EVEN") == ["M1"]
    assert "M2" not in plan.workloads


def test_empty_inputs_are_a_skip_not_an_error():
    plan = FairDistributionPlanner().plan([Course("C1", "Algoritma", 3, 1)], [])
    assert plan.sections == {}
    assert plan.skipped == ["C1"]
