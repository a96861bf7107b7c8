from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from lectro.core.exceptions import ResourceNotFoundError, ValidationFailedError
from lectro.models.attendance import AttendanceRecord
from lectro.models.subject import Subject
from lectro.models.timetable import TimetableEntry
from lectro.schemas.attendance import AttendanceMark
from lectro.services.enrollments import enrolled_student_ids


def submit_attendance(db: Session, timetable_id: str, marks: list[AttendanceMark]) -> int:
    """Insert or overwrite one attendance row per student for a class. Returns rows written."""
    entry = db.get(TimetableEntry, timetable_id)
    if entry is None:
        raise ResourceNotFoundError("Timetable entry", timetable_id)

    enrolled = set(enrolled_student_ids(db, entry.subject_id))
    strangers = sorted({mark.student_id for mark in marks} - enrolled)
    if strangers:
        raise ValidationFailedError(
            "Attendance can only be recorded for enrolled students",
            details={"invalid_ids": strangers},
        )

    # Last mark wins when a student appears twice in one submission.
    latest = {mark.student_id: mark.is_present for mark in marks}
    existing = {
        record.student_id: record
        for record in db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.timetable_id == timetable_id,
                AttendanceRecord.student_id.in_(list(latest)),
            )
        ).scalars()
    }
    for student_id, is_present in latest.items():
        record = existing.get(student_id)
        if record is None:
            db.add(AttendanceRecord(timetable_id=timetable_id, student_id=student_id, is_present=is_present))
        else:
            record.is_present = is_present
    db.flush()
    return len(latest)


def attendance_metrics(db: Session, student_id: str) -> list[dict]:
    rows = db.execute(
        select(Subject.code, Subject.name, AttendanceRecord.is_present)
        .join(TimetableEntry, TimetableEntry.id == AttendanceRecord.timetable_id)
        .join(Subject, Subject.id == TimetableEntry.subject_id)
        .where(AttendanceRecord.student_id == student_id)
        .order_by(Subject.code)
    ).all()

    metrics: dict[str, dict] = {}
    for code, name, is_present in rows:
        bucket = metrics.setdefault(
            code,
            {"subject_code": code, "subject_name": name, "total_classes": 0, "attended_classes": 0},
        )
        bucket["total_classes"] += 1
        if is_present:
            bucket["attended_classes"] += 1

    for bucket in metrics.values():
        total = bucket["total_classes"]
        bucket["percentage"] = round(bucket["attended_classes"] * 100 / total) if total else 0
    return list(metrics.values())
