"""Initial schema with all core tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

Creates all tables for TutorHub:
- users, classrooms (identity and rosters)
- periods, points_transactions, experience_transactions (gamification)
- event_types, events, event_participants, part2_events,
  part2_event_participants, attendance_sessions, attendances (activities)
- meetings, meeting_attendees, meeting_decisions,
  decision_responsible_users (board decisions)
- social_posts, content_ingredients (content planning)
- donors, donations (donor ledger)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ENUMS: dict[str, tuple[str, ...]] = {
    "user_role": ("ADMIN", "TUTOR", "STUDENT", "ASISTAN"),
    "period_status": ("ACTIVE", "INACTIVE"),
    "transaction_type": ("AWARD", "REDEEM"),
    "event_status": ("YAKINDA", "DEVAM_EDIYOR", "TAMAMLANDI", "IPTAL_EDILDI"),
    "participant_status": ("REGISTERED", "ATTENDED", "ABSENT"),
    "session_status": ("ACTIVE", "COMPLETED"),
    "meeting_status": ("PLANNED", "ONGOING", "COMPLETED", "CANCELLED"),
    "decision_status": ("TODO", "IN_PROGRESS", "DONE"),
    "social_platform": ("INSTAGRAM", "TWITTER", "FACEBOOK", "LINKEDIN", "TIKTOK", "YOUTUBE"),
    "post_status": ("DRAFT", "SCHEDULED", "PUBLISHED", "ARCHIVED"),
    "ingredient_type": ("TEXT", "IMAGE", "VIDEO", "LINK", "HASHTAG"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _id() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _fk(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def _fk_constraint(table: str, column: str, target: str, ondelete: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        [column],
        [f"{target}.id"],
        name=op.f(f"fk_{table}_{column}_{target}"),
        ondelete=ondelete,
    )


def upgrade() -> None:
    """Apply migration: Initial schema with all core tables."""
    bind = op.get_bind()
    for name in ENUMS:
        _enum(name).create(bind, checkfirst=True)

    # -- identity -------------------------------------------------------------
    op.create_table(
        "users",
        _id(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("experience", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _fk("tutor_id", nullable=True),
        _fk("classroom_id", nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
        sa.UniqueConstraint("username", name=op.f("uq_users_username")),
        sa.UniqueConstraint("email", name=op.f("uq_users_email")),
        _fk_constraint("users", "tutor_id", "users", "SET NULL"),
    )
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_tutor_id", "users", ["tutor_id"])

    op.create_table(
        "classrooms",
        _id(),
        _timestamp("created_at"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _fk("tutor_id", nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_classrooms")),
        sa.UniqueConstraint("tutor_id", name=op.f("uq_classrooms_tutor_id")),
        _fk_constraint("classrooms", "tutor_id", "users", "SET NULL"),
    )
    # users <-> classrooms is circular; add the back reference once both exist
    op.create_foreign_key(
        op.f("fk_users_classroom_id_classrooms"),
        "users",
        "classrooms",
        ["classroom_id"],
        ["id"],
        ondelete="SET NULL",
    )

    # -- gamification ---------------------------------------------------------
    op.create_table(
        "periods",
        _id(),
        _timestamp("created_at"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", _enum("period_status"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_periods")),
    )
    op.create_index("ix_periods_status", "periods", ["status"])
    # At most one ACTIVE period
    op.create_index(
        "ix_periods_single_active",
        "periods",
        ["status"],
        unique=True,
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )

    for table, value_column, rolled_back_column in (
        ("points_transactions", "points", "rolled_back"),
        ("experience_transactions", "amount", "is_rolled_back"),
    ):
        extra = []
        if table == "points_transactions":
            extra = [
                sa.Column("type", _enum("transaction_type"), nullable=False),
                sa.Column("reason", sa.String(255), nullable=True),
            ]
        op.create_table(
            table,
            _id(),
            _timestamp("created_at"),
            _fk("student_id"),
            _fk("tutor_id", nullable=True),
            _fk("period_id", nullable=True),
            sa.Column(value_column, sa.Integer(), nullable=False),
            *extra,
            sa.Column(
                rolled_back_column, sa.Boolean(), nullable=False, server_default=sa.text("false")
            ),
            sa.PrimaryKeyConstraint("id", name=op.f(f"pk_{table}")),
            _fk_constraint(table, "student_id", "users", "CASCADE"),
            _fk_constraint(table, "tutor_id", "users", "SET NULL"),
            _fk_constraint(table, "period_id", "periods", "SET NULL"),
        )
        op.create_index(f"ix_{table}_student_period", table, ["student_id", "period_id"])
    op.create_index("ix_points_transactions_created_at", "points_transactions", ["created_at"])

    # -- activities -----------------------------------------------------------
    op.create_table(
        "event_types",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_event_types")),
        sa.UniqueConstraint("name", name=op.f("uq_event_types_name")),
    )

    op.create_table(
        "events",
        _id(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("experience", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", _enum("event_status"), nullable=False),
        _fk("created_by_id"),
        _fk("created_for_tutor_id", nullable=True),
        _fk("event_type_id", nullable=True),
        _fk("period_id", nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_events")),
        _fk_constraint("events", "created_by_id", "users", "CASCADE"),
        _fk_constraint("events", "created_for_tutor_id", "users", "SET NULL"),
        _fk_constraint("events", "event_type_id", "event_types", "SET NULL"),
        _fk_constraint("events", "period_id", "periods", "SET NULL"),
    )
    op.create_index("ix_events_start_date_time", "events", ["start_date_time"])
    op.create_index("ix_events_created_by_id", "events", ["created_by_id"])
    op.create_index("ix_events_created_for_tutor_id", "events", ["created_for_tutor_id"])

    op.create_table(
        "event_participants",
        _id(),
        _timestamp("registered_at"),
        _fk("event_id"),
        _fk("user_id"),
        sa.Column("status", _enum("participant_status"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_event_participants")),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_participants_event_user"),
        _fk_constraint("event_participants", "event_id", "events", "CASCADE"),
        _fk_constraint("event_participants", "user_id", "users", "CASCADE"),
    )

    op.create_table(
        "part2_events",
        _id(),
        _timestamp("created_at"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", _enum("event_status"), nullable=False),
        _fk("created_by_id"),
        _fk("classroom_id", nullable=True),
        _fk("event_type_id", nullable=True),
        _fk("period_id", nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_part2_events")),
        _fk_constraint("part2_events", "created_by_id", "users", "CASCADE"),
        _fk_constraint("part2_events", "classroom_id", "classrooms", "SET NULL"),
        _fk_constraint("part2_events", "event_type_id", "event_types", "SET NULL"),
        _fk_constraint("part2_events", "period_id", "periods", "SET NULL"),
    )
    op.create_index("ix_part2_events_event_date", "part2_events", ["event_date"])
    op.create_index("ix_part2_events_classroom_id", "part2_events", ["classroom_id"])

    op.create_table(
        "part2_event_participants",
        _id(),
        _timestamp("created_at"),
        _fk("event_id"),
        _fk("user_id"),
        sa.Column("status", _enum("participant_status"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_part2_event_participants")),
        sa.UniqueConstraint(
            "event_id", "user_id", name="uq_part2_event_participants_event_user"
        ),
        _fk_constraint("part2_event_participants", "event_id", "part2_events", "CASCADE"),
        _fk_constraint("part2_event_participants", "user_id", "users", "CASCADE"),
    )

    op.create_table(
        "attendance_sessions",
        _id(),
        _timestamp("created_at"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("session_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", _enum("session_status"), nullable=False),
        _fk("created_by_id"),
        _fk("period_id", nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_attendance_sessions")),
        _fk_constraint("attendance_sessions", "created_by_id", "users", "CASCADE"),
        _fk_constraint("attendance_sessions", "period_id", "periods", "SET NULL"),
    )
    op.create_index(
        "ix_attendance_sessions_session_date", "attendance_sessions", ["session_date"]
    )

    op.create_table(
        "attendances",
        _id(),
        _timestamp("checked_in_at"),
        _fk("session_id"),
        _fk("student_id"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_attendances")),
        sa.UniqueConstraint("session_id", "student_id", name="uq_attendances_session_student"),
        _fk_constraint("attendances", "session_id", "attendance_sessions", "CASCADE"),
        _fk_constraint("attendances", "student_id", "users", "CASCADE"),
    )

    # -- board decisions ------------------------------------------------------
    op.create_table(
        "meetings",
        _id(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("meeting_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("status", _enum("meeting_status"), nullable=False),
        _fk("created_by_id"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_meetings")),
        _fk_constraint("meetings", "created_by_id", "users", "CASCADE"),
    )
    op.create_index("ix_meetings_meeting_date", "meetings", ["meeting_date"])

    op.create_table(
        "meeting_attendees",
        _id(),
        _timestamp("checked_in_at"),
        _fk("meeting_id"),
        _fk("user_id"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_meeting_attendees")),
        _fk_constraint("meeting_attendees", "meeting_id", "meetings", "CASCADE"),
        _fk_constraint("meeting_attendees", "user_id", "users", "CASCADE"),
    )

    op.create_table(
        "meeting_decisions",
        _id(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("target_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", _enum("decision_status"), nullable=False),
        _fk("meeting_id"),
        _fk("created_by_id"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_meeting_decisions")),
        _fk_constraint("meeting_decisions", "meeting_id", "meetings", "CASCADE"),
        _fk_constraint("meeting_decisions", "created_by_id", "users", "CASCADE"),
    )
    op.create_index("ix_meeting_decisions_meeting_id", "meeting_decisions", ["meeting_id"])
    op.create_index("ix_meeting_decisions_status", "meeting_decisions", ["status"])

    op.create_table(
        "decision_responsible_users",
        _fk("decision_id"),
        _fk("user_id"),
        sa.PrimaryKeyConstraint(
            "decision_id", "user_id", name=op.f("pk_decision_responsible_users")
        ),
        _fk_constraint(
            "decision_responsible_users", "decision_id", "meeting_decisions", "CASCADE"
        ),
        _fk_constraint("decision_responsible_users", "user_id", "users", "CASCADE"),
    )

    # -- content planning -----------------------------------------------------
    op.create_table(
        "social_posts",
        _id(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("platform", _enum("social_platform"), nullable=False),
        sa.Column("status", _enum("post_status"), nullable=False),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "hashtags",
            postgresql.ARRAY(sa.String(100)),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("media_url", sa.String(1000), nullable=True),
        _fk("created_by_id"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_social_posts")),
        _fk_constraint("social_posts", "created_by_id", "users", "CASCADE"),
    )
    op.create_index("ix_social_posts_scheduled_date", "social_posts", ["scheduled_date"])

    op.create_table(
        "content_ingredients",
        _id(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("type", _enum("ingredient_type"), nullable=False),
        _fk("created_by_id"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_content_ingredients")),
        _fk_constraint("content_ingredients", "created_by_id", "users", "CASCADE"),
    )

    # -- donor ledger ---------------------------------------------------------
    op.create_table(
        "donors",
        _id(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_donors")),
        sa.UniqueConstraint("email", name=op.f("uq_donors_email")),
    )
    op.create_index("ix_donors_last_name", "donors", ["last_name"])

    op.create_table(
        "donations",
        _id(),
        _timestamp("created_at"),
        _fk("donor_id"),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="TRY"),
        sa.Column("donation_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_donations")),
        _fk_constraint("donations", "donor_id", "donors", "CASCADE"),
    )
    op.create_index("ix_donations_donor_id_date", "donations", ["donor_id", "donation_date"])


def downgrade() -> None:
    """Revert migration: Initial schema with all core tables."""
    for table in (
        "donations",
        "donors",
        "content_ingredients",
        "social_posts",
        "decision_responsible_users",
        "meeting_decisions",
        "meeting_attendees",
        "meetings",
        "attendances",
        "attendance_sessions",
        "part2_event_participants",
        "part2_events",
        "event_participants",
        "events",
        "event_types",
        "experience_transactions",
        "points_transactions",
        "periods",
    ):
        op.drop_table(table)

    op.drop_constraint(op.f("fk_users_classroom_id_classrooms"), "users", type_="foreignkey")
    op.drop_table("classrooms")
    op.drop_table("users")

    for name in reversed(list(ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
