# backend/alembic/versions/001_tutor_scheduling.py
"""Tutor scheduling tables

Revision ID: 001_tutor_scheduling
Revises:
Create Date: 2025-03-01 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_tutor_scheduling"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

EXCLUSION_CONSTRAINT_NAME = "tutor_bookings_no_overlap_per_tutor"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create users, tutor profiles, roster slots and bookings."""
    bind = op.get_bind()
    is_postgres = bind is not None and bind.dialect.name == "postgresql"

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="learner"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "tutor_profiles",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("user_id", sa.String(length=26), nullable=False),
        sa.Column("display_name", sa.String(length=200), nullable=False),
        sa.Column("hourly_rate_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hourly_rate_currency", sa.String(length=3), nullable=False, server_default="USD"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", name="uq_tutor_profiles_user_id"),
        sa.CheckConstraint("hourly_rate_amount >= 0", name="ck_tutor_profiles_rate_non_negative"),
    )
    op.create_index("ix_tutor_profiles_id", "tutor_profiles", ["id"])

    op.create_table(
        "tutor_availability_slots",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("tutor_id", sa.String(length=26), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recurrence_rule", sa.String(length=240), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutor_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("start_at < end_at", name="ck_tutor_availability_slots_window"),
        sa.CheckConstraint(
            "status IN ('open', 'held', 'blocked')", name="ck_tutor_availability_slots_status"
        ),
    )
    op.create_index("ix_tutor_availability_slots_id", "tutor_availability_slots", ["id"])
    op.create_index(
        "ix_tutor_availability_slots_tutor_start",
        "tutor_availability_slots",
        ["tutor_id", "start_at"],
    )

    op.create_table(
        "tutor_bookings",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("public_id", sa.String(length=36), nullable=False),
        sa.Column("tutor_id", sa.String(length=26), nullable=False),
        sa.Column("learner_id", sa.String(length=26), nullable=False),
        sa.Column("scheduled_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("scheduled_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("hourly_rate_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hourly_rate_currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="confirmed"),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("meeting_url", sa.String(length=500), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutor_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["learner_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("scheduled_start < scheduled_end", name="ck_tutor_bookings_window"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_tutor_bookings_duration_positive"),
        sa.CheckConstraint("hourly_rate_amount >= 0", name="ck_tutor_bookings_rate_non_negative"),
        sa.CheckConstraint(
            "status IN ('requested', 'confirmed', 'completed', 'cancelled')",
            name="ck_tutor_bookings_status",
        ),
    )
    op.create_index("ix_tutor_bookings_id", "tutor_bookings", ["id"])
    op.create_index("ix_tutor_bookings_public_id", "tutor_bookings", ["public_id"], unique=True)
    op.create_index("ix_tutor_bookings_learner_id", "tutor_bookings", ["learner_id"])
    op.create_index("ix_tutor_bookings_status", "tutor_bookings", ["status"])
    op.create_index(
        "ix_tutor_bookings_tutor_window",
        "tutor_bookings",
        ["tutor_id", "scheduled_start", "scheduled_end"],
    )

    if is_postgres:
        # Equality on tutor_id inside a gist index needs btree_gist.
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            f"""
            ALTER TABLE tutor_bookings
              ADD CONSTRAINT {EXCLUSION_CONSTRAINT_NAME}
              EXCLUDE USING gist (
                tutor_id WITH =,
                tstzrange(scheduled_start, scheduled_end, '[)') WITH &&
              )
              WHERE (status <> 'cancelled')
            """
        )


def downgrade() -> None:
    bind = op.get_bind()
    if bind is not None and bind.dialect.name == "postgresql":
        op.execute(
            f"ALTER TABLE tutor_bookings DROP CONSTRAINT IF EXISTS {EXCLUSION_CONSTRAINT_NAME}"
        )

    op.drop_index("ix_tutor_bookings_tutor_window", table_name="tutor_bookings")
    op.drop_index("ix_tutor_bookings_status", table_name="tutor_bookings")
    op.drop_index("ix_tutor_bookings_learner_id", table_name="tutor_bookings")
    op.drop_index("ix_tutor_bookings_public_id", table_name="tutor_bookings")
    op.drop_index("ix_tutor_bookings_id", table_name="tutor_bookings")
    op.drop_table("tutor_bookings")

    op.drop_index("ix_tutor_availability_slots_tutor_start", table_name="tutor_availability_slots")
    op.drop_index("ix_tutor_availability_slots_id", table_name="tutor_availability_slots")
    op.drop_table("tutor_availability_slots")

    op.drop_index("ix_tutor_profiles_id", table_name="tutor_profiles")
    op.drop_table("tutor_profiles")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
