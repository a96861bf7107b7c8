import os
from datetime import date

# Settings are cached on first import, so the app engine must point at memory before lectro loads.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, select  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from lectro.api.deps import get_db  # noqa: E402
from lectro.db.base import Base  # noqa: E402
from lectro.db.seed import seed_demo_data  # noqa: E402
from lectro.main import app  # noqa: E402
from lectro.models.hall import LectureHall  # noqa: E402
from lectro.models.subject import Subject  # noqa: E402
from lectro.models.timetable import TimetableEntry  # noqa: E402
from lectro.models.user import User  # noqa: E402
from lectro.services.rate_limit import clear_rate_limiter  # noqa: E402

DEMO_PASSWORD = "password123"
CLASS_DATE = date(2026, 3, 2)


@pytest.fixture()
def session_factory():
    clear_rate_limiter()  # earlier tests must not eat into the login budget
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    yield TestingSessionLocal

    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    clear_rate_limiter()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def demo(session_factory):
    """Seed the demo dataset and hand back lookups of the generated ids."""
    with session_factory() as db:
        seed_demo_data(db, password=DEMO_PASSWORD, class_date=CLASS_DATE)
        db.commit()
        users = {user.email: user.id for user in db.execute(select(User)).scalars()}
        halls = {hall.name: hall.id for hall in db.execute(select(LectureHall)).scalars()}
        subjects = {subject.code: subject.id for subject in db.execute(select(Subject)).scalars()}
        entries = {
            code: entry_id
            for entry_id, code in db.execute(
                select(TimetableEntry.id, Subject.code).join(Subject, Subject.id == TimetableEntry.subject_id)
            ).all()
        }
    return {"users": users, "halls": halls, "subjects": subjects, "entries": entries}
