"""Add Hindi and Punjabi lesson text slots.

Revision ID: 20251013_01_hindi_punjabi_slots
Revises: 20251006_01_initial_schema
Create Date: 2025-10-13 09:00:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20251013_01_hindi_punjabi_slots"
down_revision = "20251006_01_initial_schema"
branch_labels = None
depends_on = None

LANGUAGES = ("hi", "pa")
FIELDS = ("title", "description", "content")


def upgrade() -> None:
    with op.batch_alter_table("lessons") as batch:
        for language in LANGUAGES:
            for field in FIELDS:
                batch.add_column(sa.Column(f"{field}_{language}", sa.Text(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("lessons") as batch:
        for language in LANGUAGES:
            for field in FIELDS:
                batch.drop_column(f"{field}_{language}")
