from datetime import datetime

from pydantic import BaseModel

from lectro.models.notification import NotificationType


class NotificationOut(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    notification_type: NotificationType
    is_read: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class NotificationReadAllOut(BaseModel):
    updated: int
