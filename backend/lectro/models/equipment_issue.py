import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from lectro.db.base import Base


class IssueStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    temporarily_solved = "temporarily_solved"
    permanently_fixed = "permanently_fixed"


class EquipmentIssue(Base):
    __tablename__ = "equipment_issues"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    hall_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("lecture_halls.id", ondelete="CASCADE"),
        nullable=False,
    )
    reported_by_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    equipment_type: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[IssueStatus] = mapped_column(
        SAEnum(IssueStatus, name="issue_status"),
        nullable=False,
        default=IssueStatus.pending,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
