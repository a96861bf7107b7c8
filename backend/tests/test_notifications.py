from sqlalchemy import select

from lectro.models.notification import Notification, NotificationType
from lectro.models.user import User, UserRole
from lectro.services.notifications import NotificationDraft, create_notifications, notify_roles, notify_users

DEMO_PASSWORD = "password123"


def login_user(client, email, password=DEMO_PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def seed_inbox(session_factory, user_id, count, notification_type=NotificationType.system):
    with session_factory() as db:
        create_notifications(
            db,
            [
                NotificationDraft(user_id, f"Notice {index}", f"Body {index}", notification_type)
                for index in range(count)
            ],
        )
        db.commit()


def test_notifications_are_private_and_paginated(client, demo, session_factory):
    priya = demo["users"]["priya@student.edu"]
    seed_inbox(session_factory, priya, 25)
    seed_inbox(session_factory, demo["users"]["alan.g@university.edu"], 2)
    token = login_user(client, "priya@student.edu")

    first_page = client.get("/api/notifications", headers=auth(token))
    assert first_page.status_code == 200
    assert len(first_page.json()) == 20
    assert all(item["user_id"] == priya for item in first_page.json())

    rest = client.get("/api/notifications", params={"offset": 20}, headers=auth(token)).json()
    assert len(rest) == 5

    invalid_limit = client.get("/api/notifications", params={"limit": 0}, headers=auth(token))
    assert invalid_limit.status_code == 422


def test_mark_single_and_all_read(client, demo, session_factory):
    priya = demo["users"]["priya@student.edu"]
    seed_inbox(session_factory, priya, 3, NotificationType.timetable)
    token = login_user(client, "priya@student.edu")
    inbox = client.get("/api/notifications", headers=auth(token)).json()

    single = client.patch(f"/api/notifications/{inbox[0]['id']}/read", headers=auth(token))
    assert single.status_code == 200
    assert single.json()["is_read"] is True

    unread = client.get("/api/notifications", params={"is_read": False}, headers=auth(token)).json()
    assert len(unread) == 2

    everything = client.patch("/api/notifications/read-all", headers=auth(token))
    assert everything.status_code == 200
    assert everything.json() == {"updated": 2}
    assert client.get("/api/notifications", params={"is_read": False}, headers=auth(token)).json() == []

    by_type = client.get("/api/notifications", params={"notification_type": "timetable"}, headers=auth(token)).json()
    assert len(by_type) == 3


def test_cannot_read_someone_elses_notification(client, demo, session_factory):
    seed_inbox(session_factory, demo["users"]["alan.g@university.edu"], 1)
    alan = login_user(client, "alan.g@university.edu")
    priya = login_user(client, "priya@student.edu")
    notification_id = client.get("/api/notifications", headers=auth(alan)).json()[0]["id"]

    response = client.patch(f"/api/notifications/{notification_id}/read", headers=auth(priya))
    assert response.status_code == 404


def test_notify_users_skips_inactive_duplicate_and_excluded(db_session, demo):
    users = demo["users"]
    inactive = db_session.get(User, users["perera@university.edu"])
    inactive.is_active = False
    db_session.flush()

    created = notify_users(
        db_session,
        user_ids=[
            users["priya@student.edu"],
            users["priya@student.edu"],
            users["perera@university.edu"],
            users["kasun@to.edu"],
        ],
        title="Heads up",
        message="Hall 01 closes early today.",
        exclude_user_id=users["kasun@to.edu"],
    )
    assert [item.user_id for item in created] == [users["priya@student.edu"]]


def test_notify_roles_targets_active_role_members(db_session, demo):
    created = notify_roles(
        db_session,
        roles=[UserRole.lecturer],
        title="Staff meeting",
        message="Friday 3pm.",
    )
    recipients = {item.user_id for item in created}
    assert recipients == {demo["users"]["alan.g@university.edu"], demo["users"]["perera@university.edu"]}
    stored = db_session.execute(select(Notification).where(Notification.title == "Staff meeting")).scalars().all()
    assert len(stored) == 2
    assert all(item.is_read is False for item in stored)


def test_pages_do_not_overlap_when_timestamps_tie(client, demo, session_factory):
    priya = demo["users"]["priya@student.edu"]
    seed_inbox(session_factory, priya, 25)
    token = login_user(client, "priya@student.edu")

    first_page = [item["id"] for item in client.get("/api/notifications", headers=auth(token)).json()]
    rest = [item["id"] for item in client.get("/api/notifications", params={"offset": 20}, headers=auth(token)).json()]

    assert not set(first_page) & set(rest)
    assert len(set(first_page) | set(rest)) == 25
    assert [item["id"] for item in client.get("/api/notifications", headers=auth(token)).json()] == first_page
