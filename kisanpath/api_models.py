"""Pydantic payloads mirroring the mobile client's lesson, profile and reward screens."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .content_format import ContentBlock


class LessonCardPayload(BaseModel):
    id: int
    sequence: int
    title: str
    description: Optional[str] = None
    points: int
    theme: Optional[str] = None
    status: Literal["locked", "current", "completed"]


class LessonListPayload(BaseModel):
    language: str
    tier: int
    lessons: List[LessonCardPayload] = Field(default_factory=list)
    current_lesson: Optional[LessonCardPayload] = None
    upcoming_lessons: List[LessonCardPayload] = Field(default_factory=list)
    completed_lessons: List[LessonCardPayload] = Field(default_factory=list)
    total_score: int = 0
    last_completed_sequence: int = 0


class LessonDetailPayload(BaseModel):
    id: int
    sequence: int
    title: str
    content: str
    content_blocks: List[ContentBlock] = Field(default_factory=list)
    points: int
    theme: Optional[str] = None
    language: str
    tier: int
    is_completed: bool = False


class AccountPayload(BaseModel):
    user_id: str
    coins: int
    xp: int
    language: Optional[str] = None
    full_name: Optional[str] = None


class CompletionPayload(BaseModel):
    accepted: bool
    lesson_id: int
    sequence: Optional[int] = None
    persisted: bool
    duplicate: bool
    reward_applied: bool
    account: Optional[AccountPayload] = None


class LanguageUpdateRequest(BaseModel):
    language: str = Field(..., min_length=2, max_length=8)


class LanguageUpdatePayload(BaseModel):
    language: str
    saved: bool


class ProfileUpdateRequest(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=256)
    mobile_no: Optional[str] = Field(default=None, max_length=32)
    agristack_id: Optional[str] = Field(default=None, max_length=64)


class LanguageOptionPayload(BaseModel):
    code: str
    name: str


class RewardPayload(BaseModel):
    reward_id: str
    percentage: str
    item: str


__all__ = [
    "AccountPayload",
    "CompletionPayload",
    "LanguageOptionPayload",
    "LanguageUpdatePayload",
    "LanguageUpdateRequest",
    "LessonCardPayload",
    "LessonDetailPayload",
    "LessonListPayload",
    "ProfileUpdateRequest",
    "RewardPayload",
]
