"""
Entry point used by the outer layers (HTTP, seeders, CLI scripts).

SchedulingService validates single jadwal requests, runs full-catalog generation
(fair distribution -> genetic search -> bounded slot search), and materializes the
meeting calendar of every committed jadwal.
"""
import random
from dataclasses import dataclass, field, replace
from datetime import date
from typing import List, Optional

import numpy

from .config import SchedulingConfig
from .conflicts import ConflictDetector
from .distribution import FairDistributionPlanner, section_label
from .eligibility import lecturer_can_teach
from .errors import InvalidArgument, StoreError
from .genetic import LECTURER, ROOM, SHIFT, ScheduleGenerator, best_per_course, fitness_of
from .logger import setup_logger
from .meetings import build_meetings, generate_meeting_dates
from .models import HARI_WEEKDAY, Assignment, Term, parse_day

logger = setup_logger(__name__)


@dataclass
class AssignmentResult:
    accepted: bool
    assignment: Optional[Assignment] = None
    meetings: list = field(default_factory=list)
    # on rejection: the reasons; on override: the conflicts that were ignored
    conflicts: list = field(default_factory=list)


@dataclass
class GenerationSummary:
    term: Term
    preferred_day: Optional[str] = None
    succeeded: List[dict] = field(default_factory=list)
    failed: List[dict] = field(default_factory=list)
    skipped: List[dict] = field(default_factory=list)
    statistics: dict = field(default_factory=dict)
    nothing_to_do: bool = False


class GenerationSession:
    """
    Occupancy state owned by a single generate_all_schedules call.
    Each committed jadwal is added here before the next section is placed.
    """

    def __init__(self, term, existing, detector, config, rng):
        self.term = term
        self.assignments = list(existing)
        self.detector = detector
        self.config = config
        self.rng = rng

    def place(self, course, section, lecturer_ids, rooms, shifts, hint=None, preferred_day=None):
        """
        Search at most `max_attempts` (room, shift, day) slots for one section.
        Returns (candidate, attempts, last_conflicts); candidate is None when exhausted.
        """
        room_ids = [r.id for r in rooms]
        shift_ids = [s.id for s in shifts]
        last_conflicts = []

        for attempt in range(self.config.max_attempts):
            if attempt == 0 and hint is not None and hint[ROOM] in room_ids and hint[SHIFT] in shift_ids:
                room_id, shift_id = hint[ROOM], hint[SHIFT]
            else:
                room_id, shift_id = self.rng.choice(room_ids), self.rng.choice(shift_ids)
            hari = preferred_day or self.rng.choice(self.config.days)

            candidate = Assignment(
                course_id=course.id,
                room_id=room_id,
                shift_id=shift_id,
                hari=hari,
                term=self.term,
                lecturer_ids=list(lecturer_ids),
                student_ids=list(section.student_ids),
                kelas=section.label,
                fitness=fitness_of(hint) if hint is not None else 0.0,
            )
            last_conflicts = self.detector.check(candidate, self.assignments)
            if not last_conflicts:
                return candidate, attempt + 1, []

        return None, self.config.max_attempts, last_conflicts

    def commit(self, assignment):
        self.assignments.append(assignment)


class SchedulingService:

    def __init__(self, store, config=None, rng=None, today=None):
        self.store = store
        self.config = config or SchedulingConfig()
        self.rng = rng or random.Random()
        self.today = today

    def current_term(self):
        return Term.current(self.today or date.today())

    # ------------------------------
    # SINGLE JADWAL
    # ------------------------------

    def _validate(self, candidate, courses):
        """Normalize the day and check the candidate references known catalog entries."""
        hari = parse_day(candidate.hari)
        if not any(c.id == candidate.course_id for c in courses):
            raise InvalidArgument(f"Matakuliah {candidate.course_id} tidak ditemukan")
        if not any(r.id == candidate.room_id for r in self.store.rooms(active_only=False)):
            raise InvalidArgument(f"Ruangan {candidate.room_id} tidak ditemukan")
        if not any(s.id == candidate.shift_id for s in self.store.shifts(active_only=False)):
            raise InvalidArgument(f"Shift {candidate.shift_id} tidak ditemukan")
        if not 1 <= len(candidate.lecturer_ids) <= self.config.lecturers_per_section:
            raise InvalidArgument(
                f"Jadwal membutuhkan 1-{self.config.lecturers_per_section} dosen, got {len(candidate.lecturer_ids)}")
        if len(candidate.student_ids) > self.config.class_size:
            raise InvalidArgument(f"Kelas maksimal {self.config.class_size} mahasiswa")
        labels = [section_label(i) for i in range(self.config.max_sections)]
        if candidate.kelas not in labels:
            raise InvalidArgument(f"Kelas {candidate.kelas!r} tidak valid, pilih salah satu dari {labels}")
        return replace(candidate, hari=hari)

    def _detector(self, courses):
        return ConflictDetector(courses, self.store.lecturers(), self.store.students(active_only=False), self.config)

    def check_conflicts(self, candidate):
        """Read-only diagnostic: every conflict the candidate would cause."""
        courses = self.store.courses()
        candidate = self._validate(candidate, courses)
        existing = self.store.assignments(candidate.term)
        return self._detector(courses).check(candidate, existing)

    def create_assignment(self, candidate, override=False):
        courses = self.store.courses()
        candidate = self._validate(candidate, courses)
        override = override or candidate.is_override

        try:
            existing = self.store.assignments(candidate.term)
            conflicts = self._detector(courses).check(candidate, existing)
            if conflicts and not override:
                logger.info("Jadwal %s/%s rejected with %d conflict(s)", candidate.course_id, candidate.kelas,
                            len(conflicts))
                return AssignmentResult(accepted=False, conflicts=conflicts)
            if conflicts:
                logger.warning("Jadwal %s/%s committed with override despite %d conflict(s)",
                               candidate.course_id, candidate.kelas, len(conflicts))

            saved, meetings = self._commit(replace(candidate, is_override=override))
        except StoreError as e:
            logger.error(f"Error creating jadwal for {candidate.course_id}: {e}", exc_info=True)
            raise
        return AssignmentResult(accepted=True, assignment=saved, meetings=meetings, conflicts=conflicts)

    propose_single_assignment = create_assignment

    def _commit(self, assignment):
        saved = self.store.insert_assignment(assignment)
        try:
            meetings = self.store.insert_meetings(build_meetings(saved, self.config.meetings_per_term))
        except StoreError:
            # jadwal sudah tersimpan tanpa pertemuan, perlu diperbaiki dari luar
            logger.error("Jadwal %s (%s kelas %s) saved without meetings", saved.id, saved.course_id, saved.kelas)
            raise
        return saved, meetings

    def generate_meeting_dates(self, hari, term, count=None):
        return generate_meeting_dates(hari, term, self.config.meetings_per_term if count is None else count)

    # ------------------------------
    # FULL CATALOG GENERATION
    # ------------------------------

    def plan_fair_distribution(self, term=None):
        term = term or self.current_term()
        return FairDistributionPlanner(self.config).plan(self.store.courses(), self.store.students(), term)

    def _select_lecturers(self, course, lecturers, hint=None):
        limit = self.config.lecturers_per_section
        assigned = [l.id for l in lecturers if l.id in course.lecturer_ids or course.id in l.course_ids]
        if assigned:
            return assigned[:limit]

        eligible = [l.id for l in lecturers if lecturer_can_teach(l.bidang_minat, course.bidang_minat)]
        self.rng.shuffle(eligible)
        if hint is not None and hint[LECTURER] in eligible:
            eligible.remove(hint[LECTURER])
            eligible.insert(0, hint[LECTURER])
        return eligible[:limit]

    def generate_all_schedules(self, preferred_day=None, term=None):
        term = term or self.current_term()
        preferred = parse_day(preferred_day) if preferred_day else None
        summary = GenerationSummary(term=term, preferred_day=preferred)

        try:
            courses = self.store.courses()
            rooms = self.store.rooms()
            shifts = self.store.shifts()
            lecturers = self.store.lecturers()
            students = self.store.students()
            existing = self.store.assignments(term)
        except StoreError as e:
            logger.error(f"Error loading catalog for {term}: {e}", exc_info=True)
            raise

        scheduled = {a.course_id for a in existing}
        pending = [c for c in courses
                   if c.is_teori and term.accepts_course_semester(c.semester) and c.id not in scheduled]
        if not (pending and rooms and shifts and lecturers and students):
            logger.warning("Nothing to schedule for %s: %d pending courses, %d rooms, %d shifts, %d dosen, "
                           "%d mahasiswa", term, len(pending), len(rooms), len(shifts), len(lecturers), len(students))
            summary.nothing_to_do = True
            summary.statistics = self._statistics(summary, [], sections_attempted=0)
            return summary

        logger.info("Generating jadwal for %s: %d courses pending", term, len(pending))
        # SKS dari jadwal yang sudah ada di semester ini ikut dihitung
        sks = {c.id: c.sks for c in courses}
        term_load = {}
        for jadwal in existing:
            for sid in jadwal.student_ids:
                term_load[sid] = term_load.get(sid, 0) + sks.get(jadwal.course_id, 0)
        loaded = [replace(s, credit_load=s.credit_load + term_load[s.id]) if s.id in term_load else s
                  for s in students]
        plan = FairDistributionPlanner(self.config).plan(pending, loaded, term)
        course_by_id = {c.id: c for c in pending}
        for course_id in plan.skipped:
            summary.skipped.append({
                "course_id": course_id,
                "course": course_by_id[course_id].name,
                "reason": "Tidak ada mahasiswa yang memenuhi syarat",
            })

        to_schedule = [c for c in pending if plan.sections.get(c.id)]
        if not to_schedule:
            summary.statistics = self._statistics(summary, [], sections_attempted=0)
            return summary

        population = ScheduleGenerator(to_schedule, rooms, shifts, lecturers, self.config, self.rng).run()
        hints = best_per_course(population)

        # Prioritaskan ruang kuliah untuk mata kuliah teori
        classrooms = [r for r in rooms if r.is_classroom] or rooms
        room_names = {r.id: r.name for r in rooms}
        shift_labels = {s.id: s.label for s in shifts}
        lecturer_names = {l.id: l.name for l in lecturers}

        session = GenerationSession(term, existing, ConflictDetector(courses, lecturers, students, self.config),
                                    self.config, self.rng)
        sections_attempted = 0

        for course in to_schedule:
            hint = hints.get(course.id)
            lecturer_ids = self._select_lecturers(course, lecturers, hint)
            for section in plan.sections[course.id]:
                sections_attempted += 1
                if not lecturer_ids:
                    logger.warning("No valid dosen found for %s (bidang minat: %s)", course.name, course.bidang_minat)
                    summary.failed.append({
                        "course_id": course.id,
                        "course": course.name,
                        "kelas": section.label,
                        "reason": f"Tidak ada dosen yang sesuai (bidang minat: {course.bidang_minat})",
                    })
                    continue

                candidate, attempts, last_conflicts = session.place(
                    course, section, lecturer_ids, classrooms, shifts, hint, preferred)
                if candidate is None:
                    logger.warning("Could not find available time slot for %s kelas %s after %d attempts",
                                   course.name, section.label, attempts)
                    summary.failed.append({
                        "course_id": course.id,
                        "course": course.name,
                        "kelas": section.label,
                        "reason": f"Tidak ada slot tersedia setelah {attempts} percobaan",
                        "last_conflicts": sorted({c.field for c in last_conflicts}),
                    })
                    continue

                try:
                    saved, meetings = self._commit(candidate)
                except StoreError as e:
                    logger.error(f"Error saving jadwal for {course.name} kelas {section.label}: {e}", exc_info=True)
                    raise
                session.commit(saved)
                summary.succeeded.append({
                    "jadwal": saved,
                    "course": course.name,
                    "kelas": section.label,
                    "sks": course.sks,
                    "room": room_names.get(saved.room_id, saved.room_id),
                    "shift": shift_labels.get(saved.shift_id, saved.shift_id),
                    "hari": saved.hari,
                    "dosen": ", ".join(lecturer_names.get(i, i) for i in saved.lecturer_ids),
                    "students": len(saved.student_ids),
                    "meetings": len(meetings),
                    "attempts": attempts,
                    "fitness": candidate.fitness,
                })
                logger.info("%s kelas %s: %d students on %s %s in %s", course.name, section.label,
                            len(saved.student_ids), saved.hari, shift_labels.get(saved.shift_id), saved.room_id)

        summary.statistics = self._statistics(summary, population, sections_attempted)
        logger.info("Jadwal generation finished for %s: %d succeeded, %d failed, %d skipped", term,
                    len(summary.succeeded), len(summary.failed), len(summary.skipped))
        return summary

    def _statistics(self, summary, population, sections_attempted):
        scores = [fitness_of(ind) for ind in population]
        succeeded = len(summary.succeeded)
        return {
            "sections_attempted": sections_attempted,
            "sections_succeeded": succeeded,
            "sections_failed": len(summary.failed),
            "courses_skipped": len(summary.skipped),
            "success_rate": round(succeeded / sections_attempted * 100) if sections_attempted else 0,
            "total_students_scheduled": sum(item["students"] for item in summary.succeeded),
            "total_sks_distributed": sum(item["students"] * item["sks"] for item in summary.succeeded),
            "best_fitness": max(scores) if scores else None,
            "average_fitness": round(float(numpy.mean(scores)), 2) if scores else None,
            "worst_fitness": min(scores) if scores else None,
        }

    # ------------------------------
    # FREE SLOTS
    # ------------------------------

    def available_slots(self, term=None, day=None):
        """List every free (day, shift, room) combination of a term, with occupancy statistics."""
        term = term or self.current_term()
        days = [parse_day(day)] if day else sorted(self.config.days, key=HARI_WEEKDAY.get)
        shifts = sorted(self.store.shifts(), key=lambda s: s.start_time)
        rooms = sorted(self.store.rooms(), key=lambda r: r.name)
        existing = [a for a in self.store.assignments(term) if a.hari in days]
        occupied = {(a.hari, a.shift_id, a.room_id) for a in existing}

        def _stats(jadwal, possible, free):
            return {
                "total_possible_slots": possible,
                "occupied_slot_count": len(jadwal),
                "free_slot_count": free,
                "occupancy_rate": f"{round(len(jadwal) / possible * 100) if possible else 0}%",
                "override_count": sum(1 for j in jadwal if j.is_override),
                "with_assistant_count": sum(1 for j in jadwal if j.assistant_ids),
                "with_student_count": sum(1 for j in jadwal if j.student_ids),
            }

        free_slots = []
        day_stats = {}
        for hari in days:
            day_free = [
                {
                    "day": hari,
                    "shift": {"id": s.id, "start_time": s.start_time, "end_time": s.end_time},
                    "room": {"id": r.id, "name": r.name},
                }
                for s in shifts for r in rooms if (hari, s.id, r.id) not in occupied
            ]
            free_slots.extend(day_free)
            day_stats[hari] = _stats([a for a in existing if a.hari == hari], len(shifts) * len(rooms), len(day_free))

        stats = _stats(existing, len(shifts) * len(rooms) * len(days), len(free_slots))
        stats.update(total_days=len(days), total_shifts=len(shifts), total_rooms=len(rooms), day_stats=day_stats)
        return {"available": free_slots, "stats": stats, "days": days, "term": term}
