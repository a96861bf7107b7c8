"""Two-stage approval workflow for lecture swap requests.

A lecturer proposes moving one of their classes to a new slot taught by another
lecturer. The target lecturer answers first; only an accepted request reaches
the head of department, whose approval rewrites the timetable entry and tells
every enrolled student.

Functions here only flush. The caller commits once, so a status change, the
timetable rewrite and every notification it causes land in one transaction.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import time
import logging

from sqlalchemy import ColumnElement, Select, select, update
from sqlalchemy.orm import Session, aliased

from lectro.core.exceptions import (
    ForbiddenActionError,
    ResourceNotFoundError,
    SwapConflictError,
    ValidationFailedError,
)
from lectro.models.hall import LectureHall
from lectro.models.notification import NotificationType
from lectro.models.subject import Subject
from lectro.models.swap_request import SwapRequest, SwapStatus
from lectro.models.timetable import TimetableEntry
from lectro.models.user import User, UserRole
from lectro.schemas.swap import SwapRequestCreate
from lectro.services.audit import log_activity
from lectro.services.enrollments import enrolled_student_ids
from lectro.services.notifications import NotificationDraft, create_notification, create_notifications
from lectro.services.timetables import RescheduleSlot, apply_reschedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LecturerResponder:
    lecturer_id: str


@dataclass(frozen=True)
class HodResponder:
    hod_id: str


ActingRole = LecturerResponder | HodResponder


@dataclass(frozen=True)
class SwapContext:
    swap: SwapRequest
    entry: TimetableEntry
    subject: Subject


@dataclass(frozen=True)
class SwapOutcome:
    swap: SwapRequest
    message: str
    notifications_sent: int


def acting_role_for(user: User) -> ActingRole:
    if user.role == UserRole.lecturer:
        return LecturerResponder(lecturer_id=user.id)
    if user.role == UserRole.hod:
        return HodResponder(hod_id=user.id)
    raise ForbiddenActionError(
        "Only lecturers and heads of department can respond to swap requests",
        details={"role": user.role.value},
    )


def _format_time(value: time) -> str:
    return value.strftime("%H:%M")


def create_swap_request(db: Session, *, requester: User, payload: SwapRequestCreate) -> SwapRequest:
    entry = db.get(TimetableEntry, payload.timetable_id)
    if entry is None:
        raise ResourceNotFoundError("Timetable entry", payload.timetable_id)
    if entry.lecturer_id != requester.id:
        raise ForbiddenActionError("You can only request swaps for classes you teach")

    target = db.get(User, payload.target_lecturer_id)
    if target is None or target.role != UserRole.lecturer or not target.is_active:
        raise ResourceNotFoundError("Lecturer", payload.target_lecturer_id)
    if target.id == requester.id:
        raise ValidationFailedError("A swap request must target another lecturer")
    if db.get(LectureHall, payload.proposed_hall_id) is None:
        raise ResourceNotFoundError("Lecture hall", payload.proposed_hall_id)

    swap = SwapRequest(
        timetable_id=entry.id,
        requesting_lecturer_id=requester.id,
        target_lecturer_id=target.id,
        proposed_date=payload.proposed_date,
        proposed_start_time=payload.proposed_start_time,
        proposed_end_time=payload.proposed_end_time,
        proposed_hall_id=payload.proposed_hall_id,
        target_status=SwapStatus.pending,
        hod_status=SwapStatus.pending,
    )
    db.add(swap)
    db.flush()

    create_notification(
        db,
        user_id=target.id,
        title="New Swap Request",
        message=(
            f"{requester.name} has requested to swap a lecture with you on "
            f"{payload.proposed_date.isoformat()}. Please review in your pending requests."
        ),
        notification_type=NotificationType.swap,
    )
    log_activity(
        db,
        user=requester,
        action="swap.create",
        entity_type="swap_request",
        entity_id=swap.id,
        details={"timetable_id": entry.id, "target_lecturer_id": target.id},
    )
    logger.info("Swap request %s created by %s for entry %s", swap.id, requester.id, entry.id)
    return swap


def _conditional_transition(
    db: Session,
    swap_id: str,
    *,
    field: str,
    decision: SwapStatus,
    guards: list[ColumnElement[bool]],
) -> None:
    result = db.execute(
        update(SwapRequest)
        .where(SwapRequest.id == swap_id, getattr(SwapRequest, field) == SwapStatus.pending, *guards)
        .values({field: decision})
    )
    if result.rowcount != 1:
        logger.warning("Swap request %s changed concurrently; %s update skipped", swap_id, field)
        raise SwapConflictError("Swap request has already been answered", details={"swap_id": swap_id})


def _record_decision(db: Session, swap: SwapRequest, actor: ActingRole, decision: SwapStatus) -> None:
    if isinstance(actor, LecturerResponder):
        if swap.target_lecturer_id != actor.lecturer_id:
            raise ForbiddenActionError("Only the target lecturer can respond to this swap request")
        if swap.target_status != SwapStatus.pending:
            raise SwapConflictError(
                "Swap request has already been answered by the target lecturer",
                details={"target_status": swap.target_status.value},
            )
        _conditional_transition(db, swap.id, field="target_status", decision=decision, guards=[])
    elif isinstance(actor, HodResponder):
        if swap.target_status != SwapStatus.accepted:
            raise SwapConflictError(
                "Swap request has not been accepted by the target lecturer",
                details={"target_status": swap.target_status.value},
            )
        if swap.hod_status != SwapStatus.pending:
            raise SwapConflictError(
                "Swap request has already been decided by the head of department",
                details={"hod_status": swap.hod_status.value},
            )
        _conditional_transition(
            db,
            swap.id,
            field="hod_status",
            decision=decision,
            guards=[SwapRequest.target_status == SwapStatus.accepted],
        )
    else:
        raise TypeError(f"Unsupported acting role: {actor!r}")


def _load_context(db: Session, swap_id: str) -> SwapContext:
    row = db.execute(
        select(SwapRequest, TimetableEntry, Subject)
        .join(TimetableEntry, TimetableEntry.id == SwapRequest.timetable_id)
        .join(Subject, Subject.id == TimetableEntry.subject_id)
        .where(SwapRequest.id == swap_id)
    ).one_or_none()
    if row is None:
        raise ResourceNotFoundError("Swap request", swap_id)
    swap, entry, subject = row
    return SwapContext(swap=swap, entry=entry, subject=subject)


def _notify_lecturer_decision(db: Session, context: SwapContext, decision: SwapStatus) -> int:
    swap = context.swap
    accepted = decision == SwapStatus.accepted
    next_step = " It is now awaiting final HOD approval." if accepted else ""
    create_notification(
        db,
        user_id=swap.requesting_lecturer_id,
        title=f"Swap Request {'Accepted' if accepted else 'Rejected'}",
        message=(
            f"Your swap request for {context.subject.code} on {swap.proposed_date.isoformat()} "
            f"was {decision.value} by the target lecturer.{next_step}"
        ),
        notification_type=NotificationType.swap,
    )
    return 1


def _notify_hod_decision(db: Session, context: SwapContext, decision: SwapStatus) -> int:
    swap = context.swap
    proposed = f"{context.subject.code} on {swap.proposed_date.isoformat()}"
    if decision == SwapStatus.accepted:
        title = "Swap Approved by HOD"
        message = f"The HOD has APPROVED the swap for {proposed}. The timetable is now updated."
    else:
        title = "Swap Rejected by HOD"
        message = f"The HOD has REJECTED the swap for {proposed}."

    sent = create_notifications(
        db,
        [
            NotificationDraft(swap.requesting_lecturer_id, title, message, NotificationType.swap),
            NotificationDraft(swap.target_lecturer_id, title, message, NotificationType.swap),
        ],
    )
    return len(sent)


def _reschedule_and_notify_students(db: Session, context: SwapContext) -> int:
    swap = context.swap
    apply_reschedule(
        db,
        swap.timetable_id,
        RescheduleSlot(
            date=swap.proposed_date,
            start_time=swap.proposed_start_time,
            end_time=swap.proposed_end_time,
            hall_id=swap.proposed_hall_id,
            lecturer_id=swap.target_lecturer_id,
        ),
    )
    hall = db.get(LectureHall, swap.proposed_hall_id)
    where = f" in {hall.name}" if hall is not None else ""
    message = (
        f"Your {context.subject.code} class has been moved to {swap.proposed_date.isoformat()} "
        f"at {_format_time(swap.proposed_start_time)}{where}."
    )
    sent = create_notifications(
        db,
        [
            NotificationDraft(student_id, "Class Rescheduled", message, NotificationType.timetable)
            for student_id in enrolled_student_ids(db, context.subject.id)
        ],
    )
    return len(sent)


def respond_to_swap(
    db: Session,
    *,
    swap_id: str,
    actor: ActingRole,
    decision: SwapStatus,
    acting_user: User | None = None,
) -> SwapOutcome:
    if decision == SwapStatus.pending:
        raise ValidationFailedError("A response must either accept or reject the swap request")

    swap = db.get(SwapRequest, swap_id)
    if swap is None:
        raise ResourceNotFoundError("Swap request", swap_id)

    try:
        _record_decision(db, swap, actor, decision)
    except (ForbiddenActionError, SwapConflictError) as exc:
        logger.warning("Rejected %s response to swap request %s: %s", decision.value, swap_id, exc.message)
        raise
    db.refresh(swap)
    context = _load_context(db, swap_id)

    if isinstance(actor, HodResponder):
        notifications_sent = _notify_hod_decision(db, context, decision)
        if decision == SwapStatus.accepted:
            notifications_sent += _reschedule_and_notify_students(db, context)
        stage = "hod"
    else:
        notifications_sent = _notify_lecturer_decision(db, context, decision)
        stage = "lecturer"

    log_activity(
        db,
        user=acting_user,
        action=f"swap.{stage}.{decision.value}",
        entity_type="swap_request",
        entity_id=swap_id,
        details={"notifications_sent": notifications_sent},
    )
    logger.info(
        "Swap request %s %s at %s stage (%d notification(s))",
        swap_id,
        decision.value,
        stage,
        notifications_sent,
    )
    return SwapOutcome(
        swap=context.swap,
        message=f"Swap request {decision.value} successfully.",
        notifications_sent=notifications_sent,
    )


def _summary_query() -> Select:
    requester = aliased(User)
    target = aliased(User)
    return (
        select(SwapRequest, TimetableEntry, Subject, LectureHall, requester.name, target.name)
        .join(TimetableEntry, TimetableEntry.id == SwapRequest.timetable_id)
        .join(Subject, Subject.id == TimetableEntry.subject_id)
        .join(LectureHall, LectureHall.id == SwapRequest.proposed_hall_id)
        .join(requester, requester.id == SwapRequest.requesting_lecturer_id)
        .join(target, target.id == SwapRequest.target_lecturer_id)
        .order_by(SwapRequest.created_at.desc(), SwapRequest.proposed_date.asc())
    )


def _summaries(db: Session, query: Select) -> list[dict]:
    summaries: list[dict] = []
    for swap, entry, subject, hall, requester_name, target_name in db.execute(query).all():
        summaries.append(
            {
                "swap_id": swap.id,
                "requesting_lecturer_id": swap.requesting_lecturer_id,
                "requesting_lecturer": requester_name,
                "target_lecturer_id": swap.target_lecturer_id,
                "target_lecturer": target_name,
                "subject_code": subject.code,
                "subject_name": subject.name,
                "original_date": entry.date,
                "original_start": entry.start_time,
                "original_end": entry.end_time,
                "proposed_date": swap.proposed_date,
                "proposed_start_time": swap.proposed_start_time,
                "proposed_end_time": swap.proposed_end_time,
                "proposed_hall": hall.name,
                "target_status": swap.target_status,
                "hod_status": swap.hod_status,
                "created_at": swap.created_at,
            }
        )
    return summaries


def list_pending_swaps(db: Session, *, user: User) -> list[dict]:
    query = _summary_query()
    if user.role == UserRole.hod:
        query = query.where(
            SwapRequest.target_status == SwapStatus.accepted,
            SwapRequest.hod_status == SwapStatus.pending,
        )
    elif user.role == UserRole.lecturer:
        query = query.where(
            SwapRequest.target_lecturer_id == user.id,
            SwapRequest.target_status == SwapStatus.pending,
        )
    else:
        return []
    return _summaries(db, query)


def list_requested_swaps(db: Session, *, user: User) -> list[dict]:
    return _summaries(db, _summary_query().where(SwapRequest.requesting_lecturer_id == user.id))
