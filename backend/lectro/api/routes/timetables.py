from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lectro.api.deps import get_db, require_roles
from lectro.core.config import get_settings
from lectro.models.user import User, UserRole
from lectro.schemas.attendance import AttendanceSubmit, AttendanceSubmitOut, SubjectAttendanceOut
from lectro.schemas.timetable import (
    RecurringScheduleCreate,
    RecurringScheduleOut,
    RosterStudentOut,
    ScheduleEntryOut,
    TimetableEntryCreate,
    TimetableEntryOut,
)
from lectro.services import timetables as timetable_service
from lectro.services.attendance import attendance_metrics, submit_attendance
from lectro.services.audit import log_activity
from lectro.services.enrollments import roster_for_entry

settings = get_settings()
router = APIRouter()


@router.get("/my-schedule", response_model=list[ScheduleEntryOut])
def my_schedule(
    current_user: User = Depends(require_roles(UserRole.student, UserRole.lecturer)),
    db: Session = Depends(get_db),
) -> list[ScheduleEntryOut]:
    if current_user.role == UserRole.student:
        return timetable_service.list_for_student(db, current_user.id)
    return timetable_service.list_for_lecturer(db, current_user.id)


@router.get("/my-attendance", response_model=list[SubjectAttendanceOut])
def my_attendance(
    current_user: User = Depends(require_roles(UserRole.student)),
    db: Session = Depends(get_db),
) -> list[SubjectAttendanceOut]:
    return attendance_metrics(db, current_user.id)


@router.get("/department/all", response_model=list[ScheduleEntryOut])
def department_schedules(
    current_user: User = Depends(require_roles(UserRole.hod, UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[ScheduleEntryOut]:
    return timetable_service.list_all(db)


@router.post("/department/new", response_model=TimetableEntryOut, status_code=status.HTTP_201_CREATED)
def add_schedule(
    payload: TimetableEntryCreate,
    current_user: User = Depends(require_roles(UserRole.hod, UserRole.admin)),
    db: Session = Depends(get_db),
) -> TimetableEntryOut:
    entry = timetable_service.create_entry(db, payload)
    log_activity(db, user=current_user, action="timetable.create", entity_type="timetable_entry", entity_id=entry.id)
    db.commit()
    db.refresh(entry)
    return entry


@router.post(
    "/department/recurring",
    response_model=RecurringScheduleOut,
    status_code=status.HTTP_201_CREATED,
)
def add_recurring_schedule(
    payload: RecurringScheduleCreate,
    current_user: User = Depends(require_roles(UserRole.hod, UserRole.admin)),
    db: Session = Depends(get_db),
) -> RecurringScheduleOut:
    entries = timetable_service.create_recurring_entries(
        db,
        payload,
        max_occurrences=settings.max_recurring_occurrences,
    )
    log_activity(
        db,
        user=current_user,
        action="timetable.recurring.create",
        entity_type="subject",
        entity_id=payload.subject_id,
        details={"created": len(entries)},
    )
    db.commit()
    for entry in entries:
        db.refresh(entry)
    return RecurringScheduleOut(
        created=len(entries),
        entries=[TimetableEntryOut.model_validate(entry) for entry in entries],
    )


@router.delete("/department/{timetable_id}")
def remove_schedule(
    timetable_id: str,
    current_user: User = Depends(require_roles(UserRole.hod, UserRole.admin)),
    db: Session = Depends(get_db),
) -> dict:
    timetable_service.delete_entry(db, timetable_id)
    log_activity(db, user=current_user, action="timetable.delete", entity_type="timetable_entry", entity_id=timetable_id)
    db.commit()
    return {"success": True, "message": "Schedule deleted successfully"}


@router.get("/{timetable_id}/students", response_model=list[RosterStudentOut])
def class_roster(
    timetable_id: str,
    current_user: User = Depends(require_roles(UserRole.hod)),
    db: Session = Depends(get_db),
) -> list[RosterStudentOut]:
    return [
        RosterStudentOut(
            student_id=student.id,
            name=student.name,
            university_id=student.university_id,
            batch=student.batch,
        )
        for student in roster_for_entry(db, timetable_id)
    ]


@router.post("/{timetable_id}/attendance", response_model=AttendanceSubmitOut)
def mark_attendance(
    timetable_id: str,
    payload: AttendanceSubmit,
    current_user: User = Depends(require_roles(UserRole.hod)),
    db: Session = Depends(get_db),
) -> AttendanceSubmitOut:
    recorded = submit_attendance(db, timetable_id, payload.attendance_records)
    log_activity(
        db,
        user=current_user,
        action="attendance.submit",
        entity_type="timetable_entry",
        entity_id=timetable_id,
        details={"recorded": recorded},
    )
    db.commit()
    return AttendanceSubmitOut(success=True, message="Attendance successfully recorded", recorded=recorded)
