from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from lectro.api.deps import get_db, require_roles
from lectro.core.exceptions import ResourceNotFoundError
from lectro.models.equipment_issue import EquipmentIssue, IssueStatus
from lectro.models.hall import LectureHall
from lectro.models.notification import NotificationType
from lectro.models.user import User, UserRole
from lectro.schemas.issue import IssueCreate, IssueListItemOut, IssueOut, IssueStatusUpdate
from lectro.services.audit import log_activity
from lectro.services.notifications import notify_roles, notify_users

router = APIRouter()

REPORTER_UPDATES = {
    IssueStatus.permanently_fixed: "resolved and is ready for use",
    IssueStatus.temporarily_solved: "temporarily fixed (please check before use)",
}


@router.post("/issues", response_model=IssueOut, status_code=status.HTTP_201_CREATED)
def report_issue(
    payload: IssueCreate,
    current_user: User = Depends(require_roles(UserRole.lecturer)),
    db: Session = Depends(get_db),
) -> IssueOut:
    hall = db.get(LectureHall, payload.hall_id)
    if hall is None:
        raise ResourceNotFoundError("Lecture hall", payload.hall_id)

    issue = EquipmentIssue(
        hall_id=hall.id,
        reported_by_id=current_user.id,
        equipment_type=payload.equipment_type,
        description=payload.description,
    )
    db.add(issue)
    db.flush()
    notify_roles(
        db,
        roles=[UserRole.technical_officer],
        title="New Equipment Issue",
        message=f"{current_user.name} reported a {payload.equipment_type} issue in {hall.name}.",
        notification_type=NotificationType.issue,
        exclude_user_id=current_user.id,
    )
    log_activity(
        db,
        user=current_user,
        action="issue.create",
        entity_type="equipment_issue",
        entity_id=issue.id,
        details={"hall_id": hall.id, "equipment_type": payload.equipment_type},
    )
    db.commit()
    db.refresh(issue)
    return issue


@router.get("/issues", response_model=list[IssueListItemOut])
def list_issues(
    issue_status: IssueStatus | None = None,
    current_user: User = Depends(require_roles(UserRole.technical_officer, UserRole.hod)),
    db: Session = Depends(get_db),
) -> list[IssueListItemOut]:
    query = (
        select(EquipmentIssue, LectureHall.name, User.name)
        .join(LectureHall, LectureHall.id == EquipmentIssue.hall_id)
        .join(User, User.id == EquipmentIssue.reported_by_id)
        .order_by(EquipmentIssue.created_at.desc())
    )
    if issue_status is not None:
        query = query.where(EquipmentIssue.status == issue_status)
    return [
        IssueListItemOut(
            **IssueOut.model_validate(issue).model_dump(),
            hall=hall_name,
            reporter=reporter_name,
        )
        for issue, hall_name, reporter_name in db.execute(query).all()
    ]


@router.patch("/issues/{issue_id}/status", response_model=IssueOut)
def change_issue_status(
    issue_id: str,
    payload: IssueStatusUpdate,
    current_user: User = Depends(require_roles(UserRole.technical_officer)),
    db: Session = Depends(get_db),
) -> IssueOut:
    issue = db.get(EquipmentIssue, issue_id)
    if issue is None:
        raise ResourceNotFoundError("Equipment issue", issue_id)

    previous = issue.status
    issue.status = payload.status
    action_text = REPORTER_UPDATES.get(payload.status)
    if action_text is not None and previous != payload.status:
        hall = db.get(LectureHall, issue.hall_id)
        hall_name = hall.name if hall is not None else "the lecture hall"
        notify_users(
            db,
            user_ids=[issue.reported_by_id],
            title="Equipment Issue Update",
            message=f"The {issue.equipment_type} issue you reported in {hall_name} has been {action_text}.",
            notification_type=NotificationType.issue,
        )
    log_activity(
        db,
        user=current_user,
        action="issue.status.update",
        entity_type="equipment_issue",
        entity_id=issue_id,
        details={"from": previous.value, "to": payload.status.value},
    )
    db.commit()
    db.refresh(issue)
    return issue
