"""Lesson, completion and account models shared by the engine and routes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, Field

from .errors import UnavailableReason

LessonStatus = Literal["locked", "current", "completed"]
ResolutionTier = Literal[1, 2]

# Sparse per-language text: language tag -> value (None when the slot is present but unset).
LocalizedText = Dict[str, Optional[str]]

T = TypeVar("T")


class LessonRow(BaseModel):
    """Lesson as read from the store, before any language is chosen."""

    id: int
    sequence: int = Field(ge=1)
    points: int = Field(default=0, ge=0)
    theme: Optional[str] = None
    title: LocalizedText = Field(default_factory=dict)
    description: LocalizedText = Field(default_factory=dict)
    content: LocalizedText = Field(default_factory=dict)


class LessonRecord(BaseModel):
    """Lesson with its text resolved for a single language."""

    id: int
    sequence: int = Field(ge=1)
    points: int = Field(default=0, ge=0)
    theme: Optional[str] = None
    title: str
    description: Optional[str] = None
    content: Optional[str] = None


class AnnotatedLesson(LessonRecord):
    status: LessonStatus


class LessonBoard(BaseModel):
    """Lesson list grouped the way the lessons screen presents it."""

    current: Optional[AnnotatedLesson] = None
    upcoming: List[AnnotatedLesson] = Field(default_factory=list)
    completed: List[AnnotatedLesson] = Field(default_factory=list)
    total_score: int = 0
    last_completed_sequence: int = 0


class CompletionRecord(BaseModel):
    """One (user, lesson) completion; never updated once stored."""

    user_id: str
    lesson_id: int
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserAccount(BaseModel):
    user_id: str
    coins: int = Field(default=0, ge=0)
    xp: int = Field(default=0, ge=0)
    language: Optional[str] = None
    full_name: Optional[str] = None


@dataclass(frozen=True)
class Resolved(Generic[T]):
    """Successful resolution; ``tier`` is 2 when only default-language slots were read."""

    tier: ResolutionTier
    value: T
    requested_language: str


@dataclass(frozen=True)
class Unavailable:
    reason: UnavailableReason
    message: str


Resolution = Union[Resolved[T], Unavailable]


@dataclass(frozen=True)
class CompletionOutcome:
    accepted: bool
    lesson_id: int
    # None when a guest completion skipped the lesson lookup.
    sequence: Optional[int] = None
    persisted: bool = False
    duplicate: bool = False
    reward_applied: bool = False
    account: Optional[UserAccount] = None
    error: Optional[str] = None


__all__ = [
    "AnnotatedLesson",
    "CompletionOutcome",
    "CompletionRecord",
    "LessonBoard",
    "LessonRecord",
    "LessonRow",
    "LessonStatus",
    "LocalizedText",
    "Resolution",
    "ResolutionTier",
    "Resolved",
    "Unavailable",
    "UserAccount",
]
