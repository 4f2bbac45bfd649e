import io

import pandas as pd

from .logger import setup_logger
from .models import HARI_WEEKDAY

logger = setup_logger(__name__)

JADWAL_COLUMNS = ["Hari", "Shift", "Ruangan", "Kode", "Mata Kuliah", "Kelas", "SKS", "Dosen",
                  "Jumlah Mahasiswa", "Override"]
MEETING_COLUMNS = ["Jadwal", "Mata Kuliah", "Kelas", "Pertemuan", "Tanggal", "Hari"]


def _catalog_maps(courses=(), rooms=(), shifts=(), lecturers=()):
    return (
        {c.id: c for c in courses},
        {r.id: r.name for r in rooms},
        {s.id: s for s in shifts},
        {l.id: l.name for l in lecturers},
    )


def schedule_frame(assignments, courses=(), rooms=(), shifts=(), lecturers=()):
    """One row per jadwal, ordered by day, shift start and room."""
    course_map, room_map, shift_map, lecturer_map = _catalog_maps(courses, rooms, shifts, lecturers)

    rows = []
    for jadwal in assignments:
        course = course_map.get(jadwal.course_id)
        shift = shift_map.get(jadwal.shift_id)
        rows.append({
            "Hari": jadwal.hari,
            "Shift": shift.label if shift else jadwal.shift_id,
            "Ruangan": room_map.get(jadwal.room_id, jadwal.room_id),
            "Kode": course.code if course else "",
            "Mata Kuliah": course.name if course else jadwal.course_id,
            "Kelas": jadwal.kelas,
            "SKS": course.sks if course else 0,
            "Dosen": ", ".join(lecturer_map.get(i, i) for i in jadwal.lecturer_ids),
            "Jumlah Mahasiswa": len(jadwal.student_ids),
            "Override": jadwal.is_override,
            "_day_order": HARI_WEEKDAY.get(jadwal.hari, 99),
        })

    df = pd.DataFrame(rows, columns=JADWAL_COLUMNS + ["_day_order"])
    df = df.sort_values(["_day_order", "Shift", "Ruangan"], kind="stable").drop(columns="_day_order")
    return df.reset_index(drop=True)


def meetings_frame(meetings, assignments=(), courses=()):
    jadwal_map = {a.id: a for a in assignments}
    course_map = {c.id: c for c in courses}

    rows = []
    for meeting in meetings:
        jadwal = jadwal_map.get(meeting.jadwal_id)
        course = course_map.get(jadwal.course_id) if jadwal else None
        rows.append({
            "Jadwal": meeting.jadwal_id,
            "Mata Kuliah": course.name if course else "",
            "Kelas": jadwal.kelas if jadwal else "",
            "Pertemuan": meeting.pertemuan,
            "Tanggal": meeting.tanggal,
            "Hari": jadwal.hari if jadwal else "",
        })
    df = pd.DataFrame(rows, columns=MEETING_COLUMNS)
    return df.sort_values(["Jadwal", "Pertemuan"], kind="stable").reset_index(drop=True)


def export_schedule(target, assignments, meetings=(), courses=(), rooms=(), shifts=(), lecturers=()):
    """
    Write the jadwal and their meetings to an Excel workbook (sheets "Jadwal" and "Pertemuan").
    `target` is a path or a writable binary buffer; when None a BytesIO is created and returned.
    """
    output = io.BytesIO() if target is None else target
    jadwal_df = schedule_frame(assignments, courses, rooms, shifts, lecturers)
    meeting_df = meetings_frame(meetings, assignments, courses)

    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        jadwal_df.to_excel(writer, sheet_name='Jadwal', index=False)
        meeting_df.to_excel(writer, sheet_name='Pertemuan', index=False)

    logger.info("Exported %d jadwal and %d meetings", len(jadwal_df), len(meeting_df))
    if isinstance(output, io.BytesIO):
        output.seek(0)
    return output
