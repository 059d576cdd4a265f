"""Profiles, English lesson content, completions and audit trail.

Revision ID: 20251006_01_initial_schema
Revises:
Create Date: 2025-10-06 09:00:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20251006_01_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("full_name", sa.String(length=256), nullable=True),
        sa.Column("mobile_no", sa.String(length=32), nullable=True),
        sa.Column("agristack_id", sa.String(length=64), nullable=True),
        sa.Column("language", sa.String(length=8), nullable=True),
        sa.Column("coins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp", sa.Integer(), nullable=False, server_default="0"),
        sa.CheckConstraint("coins >= 0", name="ck_profiles_coins_non_negative"),
        sa.CheckConstraint("xp >= 0", name="ck_profiles_xp_non_negative"),
    )

    op.create_table(
        "lessons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("theme", sa.String(length=64), nullable=True),
        sa.Column("title_en", sa.Text(), nullable=False, server_default=""),
        sa.Column("description_en", sa.Text(), nullable=True),
        sa.Column("content_en", sa.Text(), nullable=True),
        sa.UniqueConstraint("sequence", name="uq_lessons_sequence"),
        sa.CheckConstraint("sequence > 0", name="ck_lessons_sequence_positive"),
        sa.CheckConstraint("points >= 0", name="ck_lessons_points_non_negative"),
    )

    op.create_table(
        "user_lessons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lesson_id", sa.Integer(), sa.ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.UniqueConstraint("user_id", "lesson_id", name="uq_user_lessons_user_lesson"),
    )
    op.create_index("ix_user_lessons_user", "user_lessons", ["user_id"])

    op.create_table(
        "audit_events",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("actor", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    )
    op.create_index("ix_audit_events_user", "audit_events", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_events_user", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_index("ix_user_lessons_user", table_name="user_lessons")
    op.drop_table("user_lessons")
    op.drop_table("lessons")
    op.drop_table("profiles")
