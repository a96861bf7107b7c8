from __future__ import annotations

import logging

from sqlalchemy import inspect

from lectro.db.base import Base
from lectro.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "university_id", "role", "is_active"},
    "lecture_halls": {"id", "name", "capacity"},
    "subjects": {"id", "code", "name"},
    "enrollments": {"student_id", "subject_id"},
    "timetable_entries": {"id", "date", "start_time", "end_time", "subject_id", "hall_id", "lecturer_id"},
    "swap_requests": {
        "id",
        "timetable_id",
        "requesting_lecturer_id",
        "target_lecturer_id",
        "proposed_date",
        "proposed_start_time",
        "proposed_end_time",
        "proposed_hall_id",
        "target_status",
        "hod_status",
    },
    "notifications": {"id", "user_id", "title", "message", "is_read", "created_at"},
}
REQUIRED_TABLES: tuple[str, ...] = tuple(REQUIRED_COLUMNS)


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_TABLES if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        import lectro.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        _assert_required_columns()
    except Exception as exc:
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
