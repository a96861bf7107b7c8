from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from lectro.api.deps import get_current_user, get_db
from lectro.core.config import get_settings
from lectro.models.notification import Notification, NotificationType
from lectro.models.user import User
from lectro.schemas.notification import NotificationOut, NotificationReadAllOut

settings = get_settings()
router = APIRouter()


@router.get("/notifications", response_model=list[NotificationOut])
def list_notifications(
    notification_type: NotificationType | None = Query(default=None),
    is_read: bool | None = Query(default=None),
    limit: int = Query(default=settings.notifications_page_size, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[NotificationOut]:
    query = (
        select(Notification)
        .where(Notification.user_id == current_user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    if notification_type:
        query = query.where(Notification.notification_type == notification_type)
    if is_read is not None:
        query = query.where(Notification.is_read == is_read)
    query = query.offset(offset).limit(limit)
    return list(db.execute(query).scalars())


@router.patch("/notifications/read-all", response_model=NotificationReadAllOut)
def mark_all_notifications_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NotificationReadAllOut:
    result = db.execute(
        update(Notification)
        .where(
            Notification.user_id == current_user.id,
            Notification.is_read.is_(False),
        )
        .values(is_read=True)
    )
    db.commit()
    return NotificationReadAllOut(updated=result.rowcount or 0)


@router.patch("/notifications/{notification_id}/read", response_model=NotificationOut)
def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NotificationOut:
    notification = db.get(Notification, notification_id)
    if notification is None or notification.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification
