"""REST endpoints backing the lessons list, lesson detail and completion flow."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .api_models import (
    AccountPayload,
    CompletionPayload,
    LanguageOptionPayload,
    LessonCardPayload,
    LessonDetailPayload,
    LessonListPayload,
)
from .content_format import parse_lesson_content
from .identity import current_user_id
from .languages import SUPPORTED_LANGUAGES, normalize_language_code
from .lesson_models import AnnotatedLesson, Unavailable
from .lesson_resolver import PLACEHOLDERS
from .lesson_service import LessonService

router = APIRouter(prefix="/api/lessons", tags=["lessons"])
logger = logging.getLogger(__name__)

_lesson_service: Optional[LessonService] = None


def get_lesson_service() -> LessonService:
    global _lesson_service
    if _lesson_service is None:
        _lesson_service = LessonService()
    return _lesson_service


def _language(lang: Optional[str]) -> str:
    try:
        return normalize_language_code(lang)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


def _raise_unavailable(unavailable: Unavailable) -> None:
    if unavailable.reason == "not_found":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=unavailable.message)
    raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=unavailable.message)


def _require_lesson_id(lesson_id: int) -> None:
    if lesson_id <= 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Lesson {lesson_id} does not exist.")


def _card(lesson: AnnotatedLesson) -> LessonCardPayload:
    return LessonCardPayload(
        id=lesson.id,
        sequence=lesson.sequence,
        title=lesson.title,
        description=lesson.description,
        points=lesson.points,
        theme=lesson.theme,
        status=lesson.status,
    )


@router.get("/languages", response_model=list[LanguageOptionPayload])
def list_languages() -> list[LanguageOptionPayload]:
    return [LanguageOptionPayload(code=code, name=name) for code, name in SUPPORTED_LANGUAGES.items()]


@router.get("", response_model=LessonListPayload)
def list_lessons(
    lang: Optional[str] = Query(default=None),
    user_id: Optional[str] = Depends(current_user_id),
    service: LessonService = Depends(get_lesson_service),
) -> LessonListPayload:
    language = _language(lang)
    view = service.fetch_lessons(language, user_id)
    if view.unavailable is not None:
        _raise_unavailable(view.unavailable)
    board = view.board
    return LessonListPayload(
        language=language,
        tier=view.tier or 1,
        lessons=[_card(lesson) for lesson in view.lessons],
        current_lesson=_card(board.current) if board.current else None,
        upcoming_lessons=[_card(lesson) for lesson in board.upcoming],
        completed_lessons=[_card(lesson) for lesson in board.completed],
        total_score=board.total_score,
        last_completed_sequence=board.last_completed_sequence,
    )


@router.get("/{lesson_id}", response_model=LessonDetailPayload)
def get_lesson(
    lesson_id: int,
    lang: Optional[str] = Query(default=None),
    user_id: Optional[str] = Depends(current_user_id),
    service: LessonService = Depends(get_lesson_service),
) -> LessonDetailPayload:
    _require_lesson_id(lesson_id)
    language = _language(lang)
    view = service.fetch_lesson(lesson_id, language, user_id)
    if view.unavailable is not None or view.lesson is None:
        _raise_unavailable(view.unavailable or Unavailable(reason="not_found", message="Lesson not found."))
    lesson = view.lesson
    content = lesson.content or PLACEHOLDERS["content"]
    return LessonDetailPayload(
        id=lesson.id,
        sequence=lesson.sequence,
        title=lesson.title,
        content=content,
        content_blocks=parse_lesson_content(content),
        points=lesson.points,
        theme=lesson.theme,
        language=language,
        tier=view.tier or 1,
        is_completed=view.is_completed,
    )


@router.post("/{lesson_id}/complete", response_model=CompletionPayload)
def complete_lesson(
    lesson_id: int,
    user_id: Optional[str] = Depends(current_user_id),
    service: LessonService = Depends(get_lesson_service),
) -> CompletionPayload:
    _require_lesson_id(lesson_id)
    view = service.complete_lesson(lesson_id, user_id)
    if view.unavailable is not None:
        _raise_unavailable(view.unavailable)
    outcome = view.outcome
    if outcome is None or not outcome.accepted:
        message = outcome.error if outcome is not None and outcome.error else "Failed to save progress."
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": message, "retryable": True},
        )
    account = outcome.account
    return CompletionPayload(
        accepted=True,
        lesson_id=outcome.lesson_id,
        sequence=outcome.sequence,
        persisted=outcome.persisted,
        duplicate=outcome.duplicate,
        reward_applied=outcome.reward_applied,
        account=AccountPayload(**account.model_dump()) if account else None,
    )


__all__ = ["get_lesson_service", "router"]
