"""Failure taxonomy shared by the lesson engine and its HTTP routes."""

from __future__ import annotations

from typing import Literal, Optional

UnavailableReason = Literal["not_found", "store_error"]


class LessonEngineError(Exception):
    """Base class for lesson engine failures."""


class SchemaMismatch(LessonEngineError):
    """A requested localized slot does not exist in the lessons schema.

    Always recovered by the resolver through the default-language query.
    """

    def __init__(self, language: str, missing: Optional[list[str]] = None) -> None:
        self.language = language
        self.missing = list(missing or [])
        detail = ", ".join(self.missing) if self.missing else "localized slots"
        super().__init__(f"No storage for language '{language}': {detail}")


class DataUnavailable(LessonEngineError):
    """Even the default-language query failed or the lesson does not exist."""

    def __init__(self, message: str, *, reason: UnavailableReason = "store_error") -> None:
        self.reason = reason
        super().__init__(message)


class DuplicateCompletion(LessonEngineError):
    """A completion already exists for the (user, lesson) pair."""

    def __init__(self, user_id: str, lesson_id: int) -> None:
        self.user_id = user_id
        self.lesson_id = lesson_id
        super().__init__(f"Lesson {lesson_id} already completed by '{user_id}'.")


class WriteFailure(LessonEngineError):
    """Persisting a completion or account change failed; the caller may retry."""

    retryable = True


__all__ = [
    "DataUnavailable",
    "DuplicateCompletion",
    "LessonEngineError",
    "SchemaMismatch",
    "UnavailableReason",
    "WriteFailure",
]
