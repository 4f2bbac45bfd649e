"""
Fair distribution of students over theory courses.

Mata kuliah dengan peminat paling sedikit diproses lebih dulu, sehingga mata kuliah
besar tidak "menghabiskan" mahasiswa sebelum mata kuliah kecil mendapat giliran.
Di dalam satu mata kuliah, mahasiswa dengan beban SKS paling ringan diprioritaskan.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from .config import SchedulingConfig
from .eligibility import student_can_take_course
from .logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class Section:
    label: str
    student_ids: List[str] = field(default_factory=list)

    def __len__(self):
        return len(self.student_ids)


@dataclass
class DistributionPlan:
    sections: Dict[str, List[Section]] = field(default_factory=dict)
    workloads: Dict[str, int] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
    total_students_assigned: int = 0
    total_sks_distributed: int = 0

    def roster(self, course_id):
        return [sid for section in self.sections.get(course_id, []) for sid in section.student_ids]


def section_label(index):
    return chr(65 + index)


def divide_into_sections(roster, class_size=50, max_sections=2):
    """
    Split a roster into at most `max_sections` classes of at most `class_size`.
    Students beyond max_sections * class_size are dropped for this term.
    Sizes are as even as possible, larger classes first (51 -> 26 + 25).
    """
    roster = list(roster)[:class_size * max_sections]
    if not roster:
        return []
    count = min(max_sections, -(-len(roster) // class_size))
    base, extra = divmod(len(roster), count)

    sections = []
    start = 0
    for idx in range(count):
        size = base + (1 if idx < extra else 0)
        sections.append(Section(section_label(idx), roster[start:start + size]))
        start += size
    return sections


class FairDistributionPlanner:

    def __init__(self, config=None):
        self.config = config or SchedulingConfig()

    def _fits(self, workloads, student_id, sks):
        return workloads[student_id] + sks <= self.config.max_sks_per_student

    def plan(self, courses, students, term=None):
        courses = [c for c in courses if c.is_teori]
        if term is not None:
            courses = [c for c in courses if term.accepts_course_semester(c.semester)]
        students = [s for s in students if s.is_active]

        plan = DistributionPlan(workloads={s.id: s.credit_load for s in students})
        if not courses or not students:
            logger.warning("Nothing to distribute: %d courses, %d students", len(courses), len(students))
            plan.skipped = [c.id for c in courses]
            return plan

        workloads = plan.workloads
        order = {s.id: idx for idx, s in enumerate(students)}

        # Step 1: eligible pool per course
        pools = {}
        for course in courses:
            pools[course.id] = [
                s.id for s in students
                if student_can_take_course(s.semester, course.semester)
                and self._fits(workloads, s.id, course.sks)
            ]

        # Step 2: scarce-demand courses first
        ordered = sorted(courses, key=lambda c: len(pools[c.id]))

        # Step 3: pick the lightest-loaded students
        limit = self.config.max_students_per_course
        for course in ordered:
            candidates = [sid for sid in pools[course.id] if self._fits(workloads, sid, course.sks)]
            candidates.sort(key=lambda sid: (workloads[sid], order[sid]))
            selected = candidates[:limit]

            if not selected:
                logger.warning("%s (S%d): no eligible students left, skipping", course.name, course.semester)
                plan.skipped.append(course.id)
                plan.sections[course.id] = []
                continue

            for sid in selected:
                workloads[sid] += course.sks

            # Step 4: bagi ke kelas A/B
            plan.sections[course.id] = divide_into_sections(
                selected, self.config.class_size, self.config.max_sections)
            plan.total_students_assigned += len(selected)
            plan.total_sks_distributed += len(selected) * course.sks
            logger.info("%s (S%d): %d eligible -> %d assigned in %d section(s)", course.name, course.semester,
                        len(pools[course.id]), len(selected), len(plan.sections[course.id]))

        return plan
