from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from lectro.api.deps import get_current_user, get_db
from lectro.models.hall import LectureHall
from lectro.models.subject import Subject
from lectro.models.user import User, UserRole
from lectro.schemas.system import HallOption, LecturerOption, SubjectOption, SystemDataOut

router = APIRouter()


@router.get("/system/data", response_model=SystemDataOut)
def system_data(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SystemDataOut:
    lecturers = db.execute(
        select(User)
        .where(User.role == UserRole.lecturer, User.is_active.is_(True))
        .order_by(User.name)
    ).scalars()
    halls = db.execute(select(LectureHall).order_by(LectureHall.name)).scalars()
    subjects = db.execute(select(Subject).order_by(Subject.code)).scalars()
    return SystemDataOut(
        lecturers=[LecturerOption.model_validate(item) for item in lecturers],
        halls=[HallOption.model_validate(item) for item in halls],
        subjects=[SubjectOption.model_validate(item) for item in subjects],
    )
