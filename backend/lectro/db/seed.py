"""Demo accounts, halls, subjects and a starter timetable for local development."""
from __future__ import annotations

from datetime import date, time
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from lectro.core.security import get_password_hash
from lectro.models.hall import LectureHall
from lectro.models.subject import Enrollment, Subject
from lectro.models.timetable import TimetableEntry
from lectro.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"key": "admin", "name": "System Admin", "email": "admin@lectro.edu", "university_id": "ADM-001", "role": UserRole.admin},
    {"key": "hod", "name": "Dr. Sarani", "email": "sarani@hod.edu", "university_id": "HOD-001", "role": UserRole.hod},
    {"key": "alan", "name": "Dr. Alan G.", "email": "alan.g@university.edu", "university_id": "LEC-001", "role": UserRole.lecturer},
    {"key": "perera", "name": "Dr. Perera", "email": "perera@university.edu", "university_id": "LEC-002", "role": UserRole.lecturer},
    {
        "key": "priya",
        "name": "Priya S.",
        "email": "priya@student.edu",
        "university_id": "STU-001",
        "role": UserRole.student,
        "batch": "Year 3",
    },
    {"key": "kasun", "name": "Kasun T.", "email": "kasun@to.edu", "university_id": "TO-001", "role": UserRole.technical_officer},
]

DEMO_HALLS = [
    {"name": "Hall 01 (Main)", "capacity": 150, "has_projector": True},
    {"name": "Hall 03 (Annex)", "capacity": 80, "has_projector": True},
    {"name": "Lab 02", "capacity": 40, "has_projector": False},
]

DEMO_SUBJECTS = [
    {"code": "CS201", "name": "Data Structures"},
    {"code": "CS202", "name": "Algorithms"},
    {"code": "CS305", "name": "Advanced Databases"},
]


def seed_demo_data(db: Session, *, password: str, class_date: date | None = None) -> dict[str, int]:
    """Insert the demo dataset once. Returns how many rows of each kind were created."""
    created = {"users": 0, "halls": 0, "subjects": 0, "enrollments": 0, "timetable_entries": 0}
    if db.execute(select(User.id).where(User.email == DEMO_USERS[0]["email"])).first() is not None:
        logger.info("Demo data already present; skipping seed")
        return created

    hashed = get_password_hash(password)
    users: dict[str, User] = {}
    for item in DEMO_USERS:
        user = User(
            name=item["name"],
            email=item["email"],
            university_id=item["university_id"],
            role=item["role"],
            batch=item.get("batch"),
            hashed_password=hashed,
        )
        db.add(user)
        users[item["key"]] = user
    halls = [LectureHall(**item) for item in DEMO_HALLS]
    subjects = [Subject(**item) for item in DEMO_SUBJECTS]
    db.add_all(halls + subjects)
    db.flush()

    enrollments = [
        Enrollment(student_id=users["priya"].id, subject_id=subjects[0].id),
        Enrollment(student_id=users["priya"].id, subject_id=subjects[1].id),
    ]
    scheduled_on = class_date or date.today()
    entries = [
        TimetableEntry(
            date=scheduled_on,
            start_time=time(8, 0),
            end_time=time(10, 0),
            subject_id=subjects[0].id,
            hall_id=halls[0].id,
            lecturer_id=users["alan"].id,
        ),
        TimetableEntry(
            date=scheduled_on,
            start_time=time(10, 30),
            end_time=time(12, 30),
            subject_id=subjects[1].id,
            hall_id=halls[1].id,
            lecturer_id=users["perera"].id,
        ),
    ]
    db.add_all(enrollments + entries)
    db.flush()

    created.update(
        users=len(users),
        halls=len(halls),
        subjects=len(subjects),
        enrollments=len(enrollments),
        timetable_entries=len(entries),
    )
    logger.info("Seeded demo data: %s", created)
    return created
