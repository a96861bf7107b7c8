from datetime import date, time

import pytest
from sqlalchemy import create_engine, delete, func, select
from sqlalchemy.orm import sessionmaker

from lectro.core.exceptions import ForbiddenActionError, ResourceNotFoundError, SwapConflictError, ValidationFailedError
from lectro.db.base import Base
from lectro.db.seed import seed_demo_data
from lectro.models.activity_log import ActivityLog
from lectro.models.hall import LectureHall
from lectro.models.notification import Notification, NotificationType
from lectro.models.subject import Enrollment, Subject
from lectro.models.swap_request import SwapRequest, SwapStatus
from lectro.models.timetable import TimetableEntry
from lectro.models.user import User
from lectro.schemas.swap import SwapRequestCreate
from lectro.services.swaps import (
    HodResponder,
    LecturerResponder,
    acting_role_for,
    create_swap_request,
    list_pending_swaps,
    list_requested_swaps,
    respond_to_swap,
)

PROPOSED_DATE = date(2025, 3, 1)


def build_world(db):
    seed_demo_data(db, password="password123", class_date=date(2026, 3, 2))
    db.commit()

    def user(email):
        return db.execute(select(User).where(User.email == email)).scalar_one()

    subject = db.execute(select(Subject).where(Subject.code == "CS201")).scalar_one()
    entry = db.execute(select(TimetableEntry).where(TimetableEntry.subject_id == subject.id)).scalar_one()
    return {
        "db": db,
        "requester": user("alan.g@university.edu"),
        "target": user("perera@university.edu"),
        "hod": user("sarani@hod.edu"),
        "student": user("priya@student.edu"),
        "officer": user("kasun@to.edu"),
        "subject": subject,
        "entry": entry,
        "hall": db.execute(select(LectureHall).where(LectureHall.name == "Hall 03 (Annex)")).scalar_one(),
    }


@pytest.fixture()
def world(db_session):
    return build_world(db_session)


def notification_count(db, user_id=None):
    query = select(func.count()).select_from(Notification)
    if user_id is not None:
        query = query.where(Notification.user_id == user_id)
    return db.execute(query).scalar_one()


def entry_slot(db, entry_id):
    db.expire_all()
    entry = db.get(TimetableEntry, entry_id)
    return (entry.date, entry.start_time, entry.end_time, entry.hall_id, entry.lecturer_id)


def open_swap(world):
    payload = SwapRequestCreate(
        timetable_id=world["entry"].id,
        target_lecturer_id=world["target"].id,
        proposed_date=PROPOSED_DATE,
        proposed_start_time=time(9, 0),
        proposed_end_time=time(11, 0),
        proposed_hall_id=world["hall"].id,
    )
    swap = create_swap_request(world["db"], requester=world["requester"], payload=payload)
    world["db"].commit()
    return swap


def lecturer_response(world, swap, decision):
    outcome = respond_to_swap(
        world["db"],
        swap_id=swap.id,
        actor=LecturerResponder(lecturer_id=world["target"].id),
        decision=decision,
        acting_user=world["target"],
    )
    world["db"].commit()
    return outcome


def hod_response(world, swap, decision):
    outcome = respond_to_swap(
        world["db"],
        swap_id=swap.id,
        actor=HodResponder(hod_id=world["hod"].id),
        decision=decision,
        acting_user=world["hod"],
    )
    world["db"].commit()
    return outcome


def test_creating_swap_notifies_target_and_leaves_timetable_alone(world):
    db = world["db"]
    before = entry_slot(db, world["entry"].id)

    swap = open_swap(world)

    assert swap.target_status == SwapStatus.pending
    assert swap.hod_status == SwapStatus.pending
    assert entry_slot(db, world["entry"].id) == before
    inbox = db.execute(select(Notification).where(Notification.user_id == world["target"].id)).scalars().all()
    assert len(inbox) == 1
    assert inbox[0].title == "New Swap Request"
    assert inbox[0].notification_type == NotificationType.swap
    assert "Dr. Alan G." in inbox[0].message
    assert "2025-03-01" in inbox[0].message


def test_target_acceptance_waits_for_hod(world):
    db = world["db"]
    swap = open_swap(world)
    before_slot = entry_slot(db, world["entry"].id)
    before_total = notification_count(db)

    outcome = lecturer_response(world, swap, SwapStatus.accepted)

    assert outcome.swap.target_status == SwapStatus.accepted
    assert outcome.swap.hod_status == SwapStatus.pending
    assert outcome.notifications_sent == 1
    assert notification_count(db) == before_total + 1
    latest = db.execute(
        select(Notification).where(Notification.user_id == world["requester"].id)
    ).scalar_one()
    assert latest.title == "Swap Request Accepted"
    assert "awaiting final HOD approval" in latest.message
    assert entry_slot(db, world["entry"].id) == before_slot


def test_hod_approval_rewrites_timetable_and_notifies_everyone(world):
    db = world["db"]
    swap = open_swap(world)
    lecturer_response(world, swap, SwapStatus.accepted)
    before_total = notification_count(db)

    outcome = hod_response(world, swap, SwapStatus.accepted)

    enrolled = db.execute(
        select(func.count()).select_from(Enrollment).where(Enrollment.subject_id == world["subject"].id)
    ).scalar_one()
    assert enrolled == 1
    assert outcome.swap.hod_status == SwapStatus.accepted
    assert outcome.notifications_sent == 2 + enrolled
    assert notification_count(db) == before_total + 2 + enrolled
    assert entry_slot(db, world["entry"].id) == (
        PROPOSED_DATE,
        time(9, 0),
        time(11, 0),
        world["hall"].id,
        world["target"].id,
    )

    student_notice = db.execute(
        select(Notification).where(Notification.user_id == world["student"].id)
    ).scalar_one()
    assert student_notice.title == "Class Rescheduled"
    assert student_notice.notification_type == NotificationType.timetable
    assert student_notice.message == "Your CS201 class has been moved to 2025-03-01 at 09:00 in Hall 03 (Annex)."

    for lecturer in (world["requester"], world["target"]):
        titles = db.execute(select(Notification.title).where(Notification.user_id == lecturer.id)).scalars().all()
        assert "Swap Approved by HOD" in titles


def test_target_rejection_is_terminal(world):
    db = world["db"]
    swap = open_swap(world)
    before_slot = entry_slot(db, world["entry"].id)

    outcome = lecturer_response(world, swap, SwapStatus.rejected)

    assert outcome.swap.target_status == SwapStatus.rejected
    assert outcome.notifications_sent == 1
    notice = db.execute(select(Notification).where(Notification.user_id == world["requester"].id)).scalar_one()
    assert notice.title == "Swap Request Rejected"
    assert "awaiting" not in notice.message

    with pytest.raises(SwapConflictError):
        hod_response(world, swap, SwapStatus.accepted)
    db.rollback()

    db.expire_all()
    assert db.get(SwapRequest, swap.id).hod_status == SwapStatus.pending
    assert entry_slot(db, world["entry"].id) == before_slot


def test_hod_rejection_keeps_timetable(world):
    db = world["db"]
    swap = open_swap(world)
    lecturer_response(world, swap, SwapStatus.accepted)
    before_slot = entry_slot(db, world["entry"].id)
    before_total = notification_count(db)

    outcome = hod_response(world, swap, SwapStatus.rejected)

    assert outcome.swap.hod_status == SwapStatus.rejected
    assert outcome.notifications_sent == 2
    assert notification_count(db) == before_total + 2
    assert notification_count(db, world["student"].id) == 0
    assert entry_slot(db, world["entry"].id) == before_slot
    for lecturer in (world["requester"], world["target"]):
        titles = db.execute(select(Notification.title).where(Notification.user_id == lecturer.id)).scalars().all()
        assert "Swap Rejected by HOD" in titles


def test_hod_cannot_act_before_target_accepts(world):
    swap = open_swap(world)
    with pytest.raises(SwapConflictError):
        hod_response(world, swap, SwapStatus.accepted)


def test_approval_without_enrolled_students_only_notifies_lecturers(world):
    db = world["db"]
    db.execute(delete(Enrollment).where(Enrollment.subject_id == world["subject"].id))
    db.commit()
    swap = open_swap(world)
    lecturer_response(world, swap, SwapStatus.accepted)
    before_total = notification_count(db)

    outcome = hod_response(world, swap, SwapStatus.accepted)

    assert outcome.notifications_sent == 2
    assert notification_count(db) == before_total + 2
    assert entry_slot(db, world["entry"].id)[4] == world["target"].id


def test_only_the_target_lecturer_may_respond(world):
    swap = open_swap(world)
    with pytest.raises(ForbiddenActionError):
        respond_to_swap(
            world["db"],
            swap_id=swap.id,
            actor=LecturerResponder(lecturer_id=world["requester"].id),
            decision=SwapStatus.accepted,
        )


def test_repeat_lecturer_response_conflicts(world):
    swap = open_swap(world)
    lecturer_response(world, swap, SwapStatus.accepted)
    with pytest.raises(SwapConflictError):
        lecturer_response(world, swap, SwapStatus.rejected)


def test_repeat_hod_response_conflicts(world):
    swap = open_swap(world)
    lecturer_response(world, swap, SwapStatus.accepted)
    hod_response(world, swap, SwapStatus.rejected)
    with pytest.raises(SwapConflictError):
        hod_response(world, swap, SwapStatus.accepted)


def test_second_hod_approval_from_stale_session_conflicts(tmp_path):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'swaps.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    setup, first, second = SessionLocal(), SessionLocal(), SessionLocal()
    try:
        world = build_world(setup)
        swap = open_swap(world)
        lecturer_response(world, swap, SwapStatus.accepted)
        hod_id = world["hod"].id
        swap_id = swap.id

        # Both sessions read the swap while it is still waiting on the HOD.
        assert first.get(SwapRequest, swap_id).hod_status == SwapStatus.pending
        assert second.get(SwapRequest, swap_id).hod_status == SwapStatus.pending

        respond_to_swap(
            first,
            swap_id=swap_id,
            actor=HodResponder(hod_id=hod_id),
            decision=SwapStatus.accepted,
            acting_user=first.get(User, hod_id),
        )
        first.commit()
        notifications_after_approval = notification_count(first)

        with pytest.raises(SwapConflictError):
            respond_to_swap(
                second,
                swap_id=swap_id,
                actor=HodResponder(hod_id=hod_id),
                decision=SwapStatus.accepted,
                acting_user=second.get(User, hod_id),
            )
        second.rollback()

        assert notification_count(first) == notifications_after_approval
        assert first.get(SwapRequest, swap_id).hod_status == SwapStatus.accepted
    finally:
        for db in (setup, first, second):
            db.close()
        engine.dispose()


def test_pending_is_not_a_valid_response(world):
    swap = open_swap(world)
    with pytest.raises(ValidationFailedError):
        respond_to_swap(
            world["db"],
            swap_id=swap.id,
            actor=LecturerResponder(lecturer_id=world["target"].id),
            decision=SwapStatus.pending,
        )


def test_unknown_swap_is_not_found(world):
    with pytest.raises(ResourceNotFoundError):
        respond_to_swap(
            world["db"],
            swap_id="missing",
            actor=HodResponder(hod_id=world["hod"].id),
            decision=SwapStatus.accepted,
        )


def test_swap_creation_checks_ownership_and_target(world):
    base = {
        "timetable_id": world["entry"].id,
        "target_lecturer_id": world["target"].id,
        "proposed_date": PROPOSED_DATE,
        "proposed_start_time": time(9, 0),
        "proposed_end_time": time(11, 0),
        "proposed_hall_id": world["hall"].id,
    }
    db = world["db"]

    with pytest.raises(ForbiddenActionError):
        create_swap_request(db, requester=world["target"], payload=SwapRequestCreate(**base))
    with pytest.raises(ValidationFailedError):
        create_swap_request(
            db,
            requester=world["requester"],
            payload=SwapRequestCreate(**{**base, "target_lecturer_id": world["requester"].id}),
        )
    with pytest.raises(ResourceNotFoundError):
        create_swap_request(
            db,
            requester=world["requester"],
            payload=SwapRequestCreate(**{**base, "target_lecturer_id": world["student"].id}),
        )
    with pytest.raises(ResourceNotFoundError):
        create_swap_request(
            db,
            requester=world["requester"],
            payload=SwapRequestCreate(**{**base, "proposed_hall_id": "missing-hall"}),
        )


def test_acting_role_is_derived_from_user_role(world):
    assert acting_role_for(world["target"]) == LecturerResponder(lecturer_id=world["target"].id)
    assert acting_role_for(world["hod"]) == HodResponder(hod_id=world["hod"].id)
    with pytest.raises(ForbiddenActionError):
        acting_role_for(world["student"])


def test_pending_lists_follow_the_workflow_stage(world):
    db = world["db"]
    swap = open_swap(world)

    target_view = list_pending_swaps(db, user=world["target"])
    assert [item["swap_id"] for item in target_view] == [swap.id]
    assert target_view[0]["requesting_lecturer"] == "Dr. Alan G."
    assert target_view[0]["proposed_hall"] == "Hall 03 (Annex)"
    assert list_pending_swaps(db, user=world["hod"]) == []

    lecturer_response(world, swap, SwapStatus.accepted)
    assert list_pending_swaps(db, user=world["target"]) == []
    assert [item["swap_id"] for item in list_pending_swaps(db, user=world["hod"])] == [swap.id]

    hod_response(world, swap, SwapStatus.accepted)
    assert list_pending_swaps(db, user=world["hod"]) == []
    assert list_pending_swaps(db, user=world["officer"]) == []

    mine = list_requested_swaps(db, user=world["requester"])
    assert mine[0]["hod_status"] == SwapStatus.accepted
    assert mine[0]["original_date"] == PROPOSED_DATE


def test_every_transition_is_audited(world):
    db = world["db"]
    swap = open_swap(world)
    lecturer_response(world, swap, SwapStatus.accepted)
    hod_response(world, swap, SwapStatus.accepted)

    actions = db.execute(
        select(ActivityLog.action).where(ActivityLog.entity_id == swap.id).order_by(ActivityLog.action)
    ).scalars().all()
    assert actions == ["swap.create", "swap.hod.accepted", "swap.lecturer.accepted"]
