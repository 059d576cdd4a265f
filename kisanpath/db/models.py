"""ORM models backing lessons, completions and farmer profiles."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin

JSONType = JSON

LESSONS_TABLE = "lessons"

# Localized text fields; each language gets one column per field named "{field}_{code}".
LOCALIZED_FIELDS = ("title", "description", "content")


class ProfileModel(TimestampMixin, Base):
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("coins >= 0", name="ck_profiles_coins_non_negative"),
        CheckConstraint("xp >= 0", name="ck_profiles_xp_non_negative"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    full_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    mobile_no: Mapped[str | None] = mapped_column(String(32), nullable=True)
    agristack_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    language: Mapped[str | None] = mapped_column(String(8), nullable=True)
    coins: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    xp: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    completions: Mapped[list["LessonCompletionModel"]] = relationship(
        back_populates="profile", cascade="all, delete-orphan"
    )


class LessonModel(Base):
    """Curriculum unit. Only the language slots created by migrations are mapped."""

    __tablename__ = LESSONS_TABLE
    __table_args__ = (
        UniqueConstraint("sequence", name="uq_lessons_sequence"),
        CheckConstraint("sequence > 0", name="ck_lessons_sequence_positive"),
        CheckConstraint("points >= 0", name="ck_lessons_points_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    theme: Mapped[str | None] = mapped_column(String(64), nullable=True)

    title_en: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_en: Mapped[str | None] = mapped_column(Text, nullable=True)

    title_hi: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_hi: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_hi: Mapped[str | None] = mapped_column(Text, nullable=True)

    title_pa: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_pa: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_pa: Mapped[str | None] = mapped_column(Text, nullable=True)


class LessonCompletionModel(Base):
    __tablename__ = "user_lessons"
    __table_args__ = (
        Index("ix_user_lessons_user", "user_id"),
        UniqueConstraint("user_id", "lesson_id", name="uq_user_lessons_user_lesson"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    lesson_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
    )
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    profile: Mapped[ProfileModel] = relationship(back_populates="completions")


class AuditEventModel(Base):
    __tablename__ = "audit_events"
    __table_args__ = (Index("ix_audit_events_user", "user_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    payload: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    actor: Mapped[str | None] = mapped_column(String(128))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )


__all__ = [
    "AuditEventModel",
    "LESSONS_TABLE",
    "LOCALIZED_FIELDS",
    "LessonCompletionModel",
    "LessonModel",
    "ProfileModel",
]
