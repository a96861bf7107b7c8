from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lectro.api.deps import get_db, require_roles
from lectro.core.config import get_settings
from lectro.core.security import get_password_hash
from lectro.models.hall import LectureHall
from lectro.models.subject import Subject
from lectro.models.user import User, UserRole
from lectro.schemas.hall import LectureHallCreate, LectureHallOut
from lectro.schemas.subject import EnrollmentCreate, EnrollmentOut, SubjectCreate, SubjectOut
from lectro.schemas.user import UserCreate, UserOut
from lectro.services.audit import log_activity
from lectro.services.enrollments import enroll_students

settings = get_settings()
router = APIRouter()


def _commit_or_conflict(db: Session, detail: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail) from exc


@router.get("/users", response_model=list[UserOut])
def list_users(
    role: UserRole | None = None,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[UserOut]:
    query = select(User).order_by(User.role, User.name)
    if role is not None:
        query = query.where(User.role == role)
    return list(db.execute(query).scalars())


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> UserOut:
    user = User(
        name=payload.name,
        email=payload.email,
        university_id=payload.university_id,
        hashed_password=get_password_hash(payload.password or settings.default_user_password),
        role=payload.role,
        batch=payload.batch,
        department=payload.department,
    )
    db.add(user)
    _commit_or_conflict(db, "Failed to create user. Ensure email and university id are unique.")
    log_activity(
        db,
        user=current_user,
        action="admin.user.create",
        entity_type="user",
        entity_id=user.id,
        details={"role": payload.role.value},
    )
    db.commit()
    db.refresh(user)
    return user


@router.get("/halls", response_model=list[LectureHallOut])
def list_halls(
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[LectureHallOut]:
    return list(db.execute(select(LectureHall).order_by(LectureHall.name)).scalars())


@router.post("/halls", response_model=LectureHallOut, status_code=status.HTTP_201_CREATED)
def create_hall(
    payload: LectureHallCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> LectureHallOut:
    hall = LectureHall(**payload.model_dump())
    db.add(hall)
    _commit_or_conflict(db, "Failed to create hall. Hall names must be unique.")
    log_activity(db, user=current_user, action="admin.hall.create", entity_type="lecture_hall", entity_id=hall.id)
    db.commit()
    db.refresh(hall)
    return hall


@router.get("/subjects", response_model=list[SubjectOut])
def list_subjects(
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[SubjectOut]:
    return list(db.execute(select(Subject).order_by(Subject.code)).scalars())


@router.post("/subjects", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> SubjectOut:
    subject = Subject(code=payload.code, name=payload.name)
    db.add(subject)
    _commit_or_conflict(db, "Failed to create subject. Subject codes must be unique.")
    log_activity(db, user=current_user, action="admin.subject.create", entity_type="subject", entity_id=subject.id)
    db.commit()
    db.refresh(subject)
    return subject


@router.post(
    "/subjects/{subject_id}/enrollments",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
def enroll_subject_students(
    subject_id: str,
    payload: EnrollmentCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> EnrollmentOut:
    added = enroll_students(db, subject_id=subject_id, student_ids=payload.student_ids)
    log_activity(
        db,
        user=current_user,
        action="admin.subject.enroll",
        entity_type="subject",
        entity_id=subject_id,
        details={"added": len(added)},
    )
    db.commit()
    return EnrollmentOut(
        subject_id=subject_id,
        enrolled=added,
        already_enrolled=len(set(payload.student_ids)) - len(added),
    )
