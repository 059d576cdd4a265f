"""Screen-level lesson fetches composed from resolution, progression and completion."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .completion import CompletionReconciler
from .db.session import STORE_ERRORS, SessionScope, session_scope
from .identity import normalize_user_id
from .languages import DEFAULT_LANGUAGE
from .lesson_models import (
    AnnotatedLesson,
    CompletionOutcome,
    LessonBoard,
    LessonRecord,
    ResolutionTier,
    Unavailable,
)
from .lesson_resolver import DETAIL_FIELDS, LIST_FIELDS, LocalizedLessonResolver
from .progression import compute_statuses, sequence_problems, summarize_board
from .repositories.completions import CompletionRepository, completion_repository
from .telemetry import emit_event

logger = logging.getLogger(__name__)


@dataclass
class LessonDetailView:
    lesson: Optional[LessonRecord] = None
    is_completed: bool = False
    tier: Optional[ResolutionTier] = None
    unavailable: Optional[Unavailable] = None


@dataclass
class LessonListView:
    lessons: List[AnnotatedLesson] = field(default_factory=list)
    board: LessonBoard = field(default_factory=LessonBoard)
    tier: Optional[ResolutionTier] = None
    unavailable: Optional[Unavailable] = None


@dataclass
class CompletionView:
    outcome: Optional[CompletionOutcome] = None
    unavailable: Optional[Unavailable] = None


class LessonService:
    """Entry point used by the routes; the caller's identity is always explicit."""

    def __init__(
        self,
        resolver: Optional[LocalizedLessonResolver] = None,
        reconciler: Optional[CompletionReconciler] = None,
        completions: Optional[CompletionRepository] = None,
        *,
        scope: SessionScope = session_scope,
    ) -> None:
        self._resolver = resolver or LocalizedLessonResolver(scope=scope)
        self._reconciler = reconciler or CompletionReconciler(scope=scope)
        self._completions = completions or completion_repository
        self._scope = scope

    def fetch_lesson(self, lesson_id: int, language: Optional[str], user_id: Optional[str]) -> LessonDetailView:
        user_id = normalize_user_id(user_id)
        resolution = self._resolver.resolve(lesson_id, language, fields=DETAIL_FIELDS)
        if isinstance(resolution, Unavailable):
            return LessonDetailView(unavailable=resolution)
        return LessonDetailView(
            lesson=resolution.value,
            is_completed=self._has_completed(user_id, lesson_id),
            tier=resolution.tier,
        )

    def fetch_lessons(self, language: Optional[str], user_id: Optional[str]) -> LessonListView:
        user_id = normalize_user_id(user_id)
        resolution = self._resolver.resolve_all(language, fields=LIST_FIELDS)
        if isinstance(resolution, Unavailable):
            return LessonListView(unavailable=resolution)

        completed_ids: Set[int] = set()
        if user_id:
            try:
                with self._scope(commit=False) as session:
                    completed_ids = self._completions.completed_lesson_ids(session, user_id)
            except STORE_ERRORS as exc:
                # Never render a list with partial progress.
                logger.error("FATAL DB ERROR: could not load completions for %s: %s", user_id, exc)
                emit_event("lesson_data_unavailable", reason="store_error", user_id=user_id, stage="completions")
                return LessonListView(
                    unavailable=Unavailable(reason="store_error", message="Failed to load lessons from the server.")
                )

        records = resolution.value
        problems = sequence_problems(records)
        if problems:
            logger.warning("Lesson sequence is inconsistent: %s", "; ".join(problems))

        annotated = compute_statuses(records, completed_ids, has_identity=bool(user_id))
        return LessonListView(lessons=annotated, board=summarize_board(annotated), tier=resolution.tier)

    def complete_lesson(self, lesson_id: int, user_id: Optional[str]) -> CompletionView:
        if normalize_user_id(user_id) is None:
            # Guest progress is never stored, so the store is not consulted.
            return CompletionView(outcome=CompletionOutcome(accepted=True, lesson_id=lesson_id))
        # Points and sequence do not depend on language.
        resolution = self._resolver.resolve(lesson_id, DEFAULT_LANGUAGE, fields=("title",))
        if isinstance(resolution, Unavailable):
            return CompletionView(unavailable=resolution)
        return CompletionView(outcome=self._reconciler.complete(user_id, resolution.value))

    def _has_completed(self, user_id: Optional[str], lesson_id: int) -> bool:
        if not user_id:
            return False
        try:
            with self._scope(commit=False) as session:
                return self._completions.exists(session, user_id, lesson_id)
        except STORE_ERRORS as exc:
            logger.warning("Could not check completion of lesson %s for %s: %s", lesson_id, user_id, exc)
            return False


__all__ = ["CompletionView", "LessonDetailView", "LessonListView", "LessonService"]
