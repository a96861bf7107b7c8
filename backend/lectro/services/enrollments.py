from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from lectro.core.exceptions import ResourceNotFoundError, ValidationFailedError
from lectro.models.subject import Enrollment, Subject
from lectro.models.timetable import TimetableEntry
from lectro.models.user import User, UserRole


def enrolled_student_ids(db: Session, subject_id: str) -> list[str]:
    return list(
        db.execute(
            select(Enrollment.student_id)
            .where(Enrollment.subject_id == subject_id)
            .order_by(Enrollment.student_id)
        ).scalars()
    )


def roster_for_entry(db: Session, timetable_id: str) -> list[User]:
    entry = db.get(TimetableEntry, timetable_id)
    if entry is None:
        raise ResourceNotFoundError("Timetable entry", timetable_id)
    return list(
        db.execute(
            select(User)
            .join(Enrollment, Enrollment.student_id == User.id)
            .where(Enrollment.subject_id == entry.subject_id)
            .order_by(User.name)
        ).scalars()
    )


def enroll_students(db: Session, *, subject_id: str, student_ids: list[str]) -> list[str]:
    """Link students to a subject, skipping existing links. Returns the newly enrolled ids."""
    if db.get(Subject, subject_id) is None:
        raise ResourceNotFoundError("Subject", subject_id)

    requested = list(dict.fromkeys(student_ids))
    students = set(
        db.execute(
            select(User.id).where(User.id.in_(requested), User.role == UserRole.student)
        ).scalars()
    )
    unknown = [item for item in requested if item not in students]
    if unknown:
        raise ValidationFailedError("Only existing students can be enrolled", details={"invalid_ids": unknown})

    existing = set(
        db.execute(
            select(Enrollment.student_id).where(
                Enrollment.subject_id == subject_id,
                Enrollment.student_id.in_(requested),
            )
        ).scalars()
    )
    added = [item for item in requested if item not in existing]
    db.add_all(Enrollment(student_id=item, subject_id=subject_id) for item in added)
    db.flush()
    return added
