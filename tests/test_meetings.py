from datetime import date, timedelta

import pytest

from penjadwalan.errors import InvalidArgument
from penjadwalan.meetings import build_meetings, generate_meeting_dates, meeting_update_eligibility, term_anchor
from penjadwalan.models import HARI_LIST, Semester, Term


def test_term_anchor():
    assert term_anchor(Term(Semester.GANJIL, "2024/2025")) == date(2024, 9, 1)
    assert term_anchor(Term(Semester.GENAP, "2024/2025")) == date(2025, 2, 1)


def test_first_monday_of_ganjil_term(term):
    dates = generate_meeting_dates("SENIN", term)
    assert len(dates) == 12
    # 1 September 2024 is a Sunday
    assert dates[0] == date(2024, 9, 2)
    assert dates[-1] == date(2024, 11, 18)


def test_genap_term_starts_in_february_of_following_year():
    dates = generate_meeting_dates("SENIN", Term(Semester.GENAP, "2024/2025"), 3)
    assert dates == [date(2025, 2, 3), date(2025, 2, 10), date(2025, 2, 17)]


@pytest.mark.parametrize("hari", HARI_LIST)
def test_dates_are_weekly_and_on_requested_day(hari, term):
    dates = generate_meeting_dates(hari, term, 14)
    assert dates[0] >= term_anchor(term)
    assert dates[0] - term_anchor(term) < timedelta(days=7)
    assert all(d.weekday() == HARI_LIST.index(hari) for d in dates)
    assert all(b - a == timedelta(days=7) for a, b in zip(dates, dates[1:]))


def test_generation_is_pure(term):
    assert generate_meeting_dates("RABU", term, 12) == generate_meeting_dates("rabu", term, 12)


def test_anchor_day_itself_is_used():
    # 1 September 2025 is a Monday
    dates = generate_meeting_dates("SENIN", Term(Semester.GANJIL, "2025/2026"), 1)
    assert dates == [date(2025, 9, 1)]


@pytest.mark.parametrize("hari", ["MINGGU", "monday", "", None])
def test_invalid_day(hari, term):
    with pytest.raises(InvalidArgument):
        generate_meeting_dates(hari, term)


def test_invalid_count(term):
    with pytest.raises(InvalidArgument):
        generate_meeting_dates("SENIN", term, 0)


def test_build_meetings_numbers_from_one(make_jadwal):
    jadwal = make_jadwal(hari="KAMIS", jadwal_id="J1")
    meetings = build_meetings(jadwal, 12)
    assert [m.pertemuan for m in meetings] == list(range(1, 13))
    assert {m.jadwal_id for m in meetings} == {"J1"}
    assert meetings[0].tanggal == date(2024, 9, 5)


def test_build_meetings_needs_committed_jadwal(make_jadwal):
    with pytest.raises(InvalidArgument):
        build_meetings(make_jadwal())


def test_meeting_update_eligibility():
    today = date(2024, 9, 10)
    assert meeting_update_eligibility(date(2024, 9, 11), today) == (True, None, 1)

    allowed, reason, days = meeting_update_eligibility(date(2024, 9, 10), today)
    assert not allowed and days == 0 and "hari ini" in reason

    allowed, reason, days = meeting_update_eligibility(date(2024, 9, 2), today)
    assert not allowed and days == -8 and "sudah lewat" in reason


def test_update_predicate_is_exported_for_callers():
    import penjadwalan
    assert penjadwalan.meeting_update_eligibility is meeting_update_eligibility
