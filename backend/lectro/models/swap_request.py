import uuid
from datetime import date, datetime, time
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, String, Time
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from lectro.db.base import Base


class SwapStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


swap_status_enum = SAEnum(SwapStatus, name="swap_status")


class SwapRequest(Base):
    __tablename__ = "swap_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    timetable_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("timetable_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    requesting_lecturer_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    target_lecturer_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    proposed_date: Mapped[date] = mapped_column(Date, nullable=False)
    proposed_start_time: Mapped[time] = mapped_column(Time, nullable=False)
    proposed_end_time: Mapped[time] = mapped_column(Time, nullable=False)
    proposed_hall_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("lecture_halls.id", ondelete="CASCADE"),
        nullable=False,
    )
    target_status: Mapped[SwapStatus] = mapped_column(
        swap_status_enum,
        nullable=False,
        default=SwapStatus.pending,
        index=True,
    )
    hod_status: Mapped[SwapStatus] = mapped_column(
        swap_status_enum,
        nullable=False,
        default=SwapStatus.pending,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
