from datetime import date, timedelta

from .config import MEETINGS_PER_TERM
from .errors import InvalidArgument
from .models import HARI_WEEKDAY, Meeting, Semester, parse_day


def term_anchor(term):
    """GANJIL starts 1 September of the start year, GENAP 1 February of the following year."""
    if term.semester is Semester.GANJIL:
        return date(term.start_year, 9, 1)
    return date(term.start_year + 1, 2, 1)


def generate_meeting_dates(hari, term, count=MEETINGS_PER_TERM):
    """
    Return `count` dates, one per week, starting at the first `hari` on/after the term anchor.
    """
    target = HARI_WEEKDAY[parse_day(hari)]
    if not isinstance(count, int) or count < 1:
        raise InvalidArgument(f"Meeting count must be a positive integer, got {count!r}")

    current = term_anchor(term)
    while current.weekday() != target:
        current += timedelta(days=1)

    return [current + timedelta(weeks=i) for i in range(count)]


def build_meetings(assignment, count=MEETINGS_PER_TERM):
    if assignment.id is None:
        raise InvalidArgument("Cannot build meetings for an uncommitted jadwal")
    dates = generate_meeting_dates(assignment.hari, assignment.term, count)
    return [Meeting(jadwal_id=assignment.id, pertemuan=idx + 1, tanggal=tanggal)
            for idx, tanggal in enumerate(dates)]


def meeting_update_eligibility(tanggal, today=None):
    """
    A meeting may only be moved at least one day before it happens.
    Returns (can_update, reason, days_until_meeting).
    """
    today = today or date.today()
    days_until = (tanggal - today).days
    if days_until < 0:
        return False, f"Tanggal pertemuan ({tanggal.isoformat()}) sudah lewat.", days_until
    if days_until == 0:
        return False, (f"Pertemuan dijadwalkan hari ini ({tanggal.isoformat()}). "
                       "Perubahan minimal 1 hari sebelum pertemuan."), days_until
    return True, None, days_until
