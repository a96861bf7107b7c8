from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta
import logging

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from lectro.core.exceptions import ResourceNotFoundError, ValidationFailedError
from lectro.models.hall import LectureHall
from lectro.models.subject import Enrollment, Subject
from lectro.models.timetable import TimetableEntry
from lectro.models.user import User, UserRole
from lectro.schemas.timetable import RecurringScheduleCreate, TimetableEntryCreate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RescheduleSlot:
    """Replacement slot written over an existing timetable entry."""

    date: date
    start_time: time
    end_time: time
    hall_id: str
    lecturer_id: str


def apply_reschedule(db: Session, timetable_id: str, slot: RescheduleSlot) -> TimetableEntry:
    entry = db.get(TimetableEntry, timetable_id)
    if entry is None:
        raise ResourceNotFoundError("Timetable entry", timetable_id)

    entry.date = slot.date
    entry.start_time = slot.start_time
    entry.end_time = slot.end_time
    entry.hall_id = slot.hall_id
    entry.lecturer_id = slot.lecturer_id
    db.flush()
    logger.info(
        "Timetable entry %s moved to %s %s-%s (hall %s, lecturer %s)",
        entry.id,
        slot.date.isoformat(),
        slot.start_time.strftime("%H:%M"),
        slot.end_time.strftime("%H:%M"),
        slot.hall_id,
        slot.lecturer_id,
    )
    return entry


def _schedule_query() -> Select:
    return (
        select(TimetableEntry, Subject, LectureHall, User)
        .join(Subject, Subject.id == TimetableEntry.subject_id)
        .join(LectureHall, LectureHall.id == TimetableEntry.hall_id)
        .join(User, User.id == TimetableEntry.lecturer_id)
        .order_by(TimetableEntry.date.asc(), TimetableEntry.start_time.asc())
    )


def _schedule_rows(db: Session, query: Select) -> list[dict]:
    rows: list[dict] = []
    for entry, subject, hall, lecturer in db.execute(query).all():
        rows.append(
            {
                "timetable_id": entry.id,
                "date": entry.date,
                "start_time": entry.start_time,
                "end_time": entry.end_time,
                "subject_id": subject.id,
                "subject_code": subject.code,
                "subject_name": subject.name,
                "hall_id": hall.id,
                "hall_name": hall.name,
                "lecturer_id": lecturer.id,
                "lecturer_name": lecturer.name,
            }
        )
    return rows


def list_for_student(db: Session, student_id: str) -> list[dict]:
    enrolled_subjects = select(Enrollment.subject_id).where(Enrollment.student_id == student_id)
    return _schedule_rows(db, _schedule_query().where(TimetableEntry.subject_id.in_(enrolled_subjects)))


def list_for_lecturer(db: Session, lecturer_id: str) -> list[dict]:
    return _schedule_rows(db, _schedule_query().where(TimetableEntry.lecturer_id == lecturer_id))


def list_all(db: Session) -> list[dict]:
    return _schedule_rows(db, _schedule_query())


def _require_schedule_references(db: Session, *, subject_id: str, hall_id: str, lecturer_id: str) -> None:
    if db.get(Subject, subject_id) is None:
        raise ResourceNotFoundError("Subject", subject_id)
    if db.get(LectureHall, hall_id) is None:
        raise ResourceNotFoundError("Lecture hall", hall_id)
    lecturer = db.get(User, lecturer_id)
    if lecturer is None or lecturer.role != UserRole.lecturer:
        raise ResourceNotFoundError("Lecturer", lecturer_id)


def create_entry(db: Session, payload: TimetableEntryCreate) -> TimetableEntry:
    _require_schedule_references(
        db,
        subject_id=payload.subject_id,
        hall_id=payload.hall_id,
        lecturer_id=payload.lecturer_id,
    )
    entry = TimetableEntry(**payload.model_dump())
    db.add(entry)
    db.flush()
    return entry


def delete_entry(db: Session, timetable_id: str) -> None:
    entry = db.get(TimetableEntry, timetable_id)
    if entry is None:
        raise ResourceNotFoundError("Timetable entry", timetable_id)
    db.delete(entry)
    db.flush()


def recurring_dates(start_date: date, end_date: date, weekday: int | None = None) -> list[date]:
    """Every matching weekday from start_date through end_date inclusive."""
    target = start_date.weekday() if weekday is None else weekday
    cursor = start_date + timedelta(days=(target - start_date.weekday()) % 7)
    dates: list[date] = []
    while cursor <= end_date:
        dates.append(cursor)
        cursor += timedelta(days=7)
    return dates


def create_recurring_entries(
    db: Session,
    payload: RecurringScheduleCreate,
    *,
    max_occurrences: int,
) -> list[TimetableEntry]:
    _require_schedule_references(
        db,
        subject_id=payload.subject_id,
        hall_id=payload.hall_id,
        lecturer_id=payload.lecturer_id,
    )
    dates = recurring_dates(payload.start_date, payload.end_date, payload.weekday)
    if not dates:
        raise ValidationFailedError("No class dates fall inside the requested range")
    if len(dates) > max_occurrences:
        raise ValidationFailedError(
            f"Recurring schedule would create {len(dates)} classes; the limit is {max_occurrences}",
            details={"requested": len(dates), "limit": max_occurrences},
        )

    entries = [
        TimetableEntry(
            date=class_date,
            start_time=payload.start_time,
            end_time=payload.end_time,
            subject_id=payload.subject_id,
            hall_id=payload.hall_id,
            lecturer_id=payload.lecturer_id,
        )
        for class_date in dates
    ]
    db.add_all(entries)
    db.flush()
    logger.info("Created %d recurring timetable entries for subject %s", len(entries), payload.subject_id)
    return entries
