from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from lectro.models.notification import Notification, NotificationType
from lectro.models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationDraft:
    user_id: str
    title: str
    message: str
    notification_type: NotificationType = NotificationType.system


def create_notification(
    db: Session,
    *,
    user_id: str,
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.system,
) -> Notification:
    record = Notification(
        user_id=user_id,
        title=title,
        message=message,
        notification_type=notification_type,
        is_read=False,
    )
    db.add(record)
    db.flush()
    return record


def create_notifications(db: Session, drafts: Iterable[NotificationDraft]) -> list[Notification]:
    """Persist one unread notification per draft, in order, as a single flush."""
    records = [
        Notification(
            user_id=draft.user_id,
            title=draft.title,
            message=draft.message,
            notification_type=draft.notification_type,
            is_read=False,
        )
        for draft in drafts
    ]
    if not records:
        return []
    db.add_all(records)
    db.flush()
    logger.debug("Queued %d notification(s)", len(records))
    return records


def notify_users(
    db: Session,
    *,
    user_ids: list[str] | set[str] | tuple[str, ...],
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.system,
    exclude_user_id: str | None = None,
) -> list[Notification]:
    requested_ids = [item for item in dict.fromkeys(user_ids) if item and item != exclude_user_id]
    if not requested_ids:
        return []

    recipient_ids = list(
        db.execute(
            select(User.id).where(
                User.id.in_(requested_ids),
                User.is_active.is_(True),
            )
        ).scalars()
    )
    return create_notifications(
        db,
        [
            NotificationDraft(user_id=user_id, title=title, message=message, notification_type=notification_type)
            for user_id in recipient_ids
        ],
    )


def notify_roles(
    db: Session,
    *,
    roles: list[UserRole] | set[UserRole] | tuple[UserRole, ...],
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.system,
    exclude_user_id: str | None = None,
) -> list[Notification]:
    if not roles:
        return []
    recipient_ids = list(
        db.execute(
            select(User.id)
            .where(
                User.role.in_(list(roles)),
                User.is_active.is_(True),
            )
            .order_by(User.name)
        ).scalars()
    )
    return create_notifications(
        db,
        [
            NotificationDraft(user_id=user_id, title=title, message=message, notification_type=notification_type)
            for user_id in recipient_ids
            if user_id != exclude_user_id
        ],
    )
