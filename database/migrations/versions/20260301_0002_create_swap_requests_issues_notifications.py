"""create swap requests, equipment issues, notifications and activity logs

Revision ID: 20260301_0002
Revises: 20260301_0001
Create Date: 2026-03-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20260301_0002"
down_revision = "20260301_0001"
branch_labels = None
depends_on = None


swap_status = sa.Enum("pending", "accepted", "rejected", name="swap_status")
issue_status = sa.Enum(
    "pending",
    "in_progress",
    "temporarily_solved",
    "permanently_fixed",
    name="issue_status",
)
notification_type = sa.Enum("swap", "timetable", "issue", "system", name="notification_type")


def upgrade() -> None:
    op.create_table(
        "swap_requests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "timetable_id",
            sa.String(length=36),
            sa.ForeignKey("timetable_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "requesting_lecturer_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "target_lecturer_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("proposed_date", sa.Date(), nullable=False),
        sa.Column("proposed_start_time", sa.Time(), nullable=False),
        sa.Column("proposed_end_time", sa.Time(), nullable=False),
        sa.Column(
            "proposed_hall_id",
            sa.String(length=36),
            sa.ForeignKey("lecture_halls.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("target_status", swap_status, nullable=False, server_default="pending"),
        sa.Column("hod_status", swap_status, nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_swap_requests_timetable_id", "swap_requests", ["timetable_id"], unique=False)
    op.create_index(
        "ix_swap_requests_requesting_lecturer_id",
        "swap_requests",
        ["requesting_lecturer_id"],
        unique=False,
    )
    op.create_index("ix_swap_requests_target_lecturer_id", "swap_requests", ["target_lecturer_id"], unique=False)
    op.create_index("ix_swap_requests_target_status", "swap_requests", ["target_status"], unique=False)
    op.create_index("ix_swap_requests_hod_status", "swap_requests", ["hod_status"], unique=False)

    op.create_table(
        "equipment_issues",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("hall_id", sa.String(length=36), sa.ForeignKey("lecture_halls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reported_by_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("equipment_type", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", issue_status, nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("notification_type", notification_type, nullable=False, server_default="system"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"], unique=False)

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=36), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_user_id", "activity_logs", ["user_id"], unique=False)
    op.create_index("ix_activity_logs_entity_id", "activity_logs", ["entity_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_activity_logs_entity_id", table_name="activity_logs")
    op.drop_index("ix_activity_logs_user_id", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("equipment_issues")
    op.drop_index("ix_swap_requests_hod_status", table_name="swap_requests")
    op.drop_index("ix_swap_requests_target_status", table_name="swap_requests")
    op.drop_index("ix_swap_requests_target_lecturer_id", table_name="swap_requests")
    op.drop_index("ix_swap_requests_requesting_lecturer_id", table_name="swap_requests")
    op.drop_index("ix_swap_requests_timetable_id", table_name="swap_requests")
    op.drop_table("swap_requests")
    notification_type.drop(op.get_bind(), checkfirst=True)
    issue_status.drop(op.get_bind(), checkfirst=True)
    swap_status.drop(op.get_bind(), checkfirst=True)
