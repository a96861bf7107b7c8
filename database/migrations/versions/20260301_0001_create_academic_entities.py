"""create users, halls, subjects, enrollments, timetable entries and attendance

Revision ID: 20260301_0001
Revises: None
Create Date: 2026-03-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20260301_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("student", "lecturer", "hod", "technical_officer", "admin", name="user_role")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("university_id", sa.String(length=50), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("batch", sa.String(length=50), nullable=True),
        sa.Column("department", sa.String(length=200), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_university_id", "users", ["university_id"], unique=True)
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    op.create_table(
        "lecture_halls",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("has_projector", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_lecture_halls_name", "lecture_halls", ["name"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)

    op.create_table(
        "enrollments",
        sa.Column("student_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", sa.String(length=36), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("student_id", "subject_id"),
    )
    op.create_index("ix_enrollments_subject_id", "enrollments", ["subject_id"], unique=False)

    op.create_table(
        "timetable_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("subject_id", sa.String(length=36), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("hall_id", sa.String(length=36), sa.ForeignKey("lecture_halls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lecturer_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_timetable_entries_date", "timetable_entries", ["date"], unique=False)
    op.create_index("ix_timetable_entries_subject_id", "timetable_entries", ["subject_id"], unique=False)
    op.create_index("ix_timetable_entries_lecturer_id", "timetable_entries", ["lecturer_id"], unique=False)

    op.create_table(
        "attendance_records",
        sa.Column(
            "timetable_id",
            sa.String(length=36),
            sa.ForeignKey("timetable_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("student_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_present", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("recorded_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("timetable_id", "student_id"),
    )
    op.create_index("ix_attendance_records_student_id", "attendance_records", ["student_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_attendance_records_student_id", table_name="attendance_records")
    op.drop_table("attendance_records")
    op.drop_index("ix_timetable_entries_lecturer_id", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_subject_id", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_date", table_name="timetable_entries")
    op.drop_table("timetable_entries")
    op.drop_index("ix_enrollments_subject_id", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_lecture_halls_name", table_name="lecture_halls")
    op.drop_table("lecture_halls")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_university_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    user_role_enum.drop(op.get_bind(), checkfirst=True)
