"""Localized lesson lookup with default-language fallback.

Lessons keep one text slot per language and field. New languages are rolled
out column by column, so a requested language may have no slot at all. The
resolver runs two tiers:

1. Read the default-language slots together with the requested language's
   slots in one query.
2. If that query cannot run (missing slot, schema error, timeout), read only
   the default-language slots.

Each field then takes the requested-language value, else the default-language
value, else a fixed placeholder. Only a failure of tier 2 (or a missing
lesson) is reported to the caller, as :class:`Unavailable`.
"""

from __future__ import annotations

import logging
from typing import Callable, FrozenSet, List, Mapping, Optional, Sequence, Tuple, TypeVar

from sqlalchemy.orm import Session

from .cache import LanguageSlotCache
from .config import get_settings
from .db.models import LESSONS_TABLE
from .db.session import STORE_ERRORS, SessionScope, session_scope
from .errors import SchemaMismatch
from .languages import DEFAULT_LANGUAGE, normalize_language_code
from .lesson_models import LessonRecord, LessonRow, LocalizedText, Resolution, Resolved, Unavailable
from .repositories.lessons import LessonRepository, lesson_repository, slot_name
from .telemetry import emit_event

logger = logging.getLogger(__name__)

DETAIL_FIELDS: Tuple[str, ...] = ("title", "content")
LIST_FIELDS: Tuple[str, ...] = ("title", "description")

PLACEHOLDERS = {
    "title": "Lesson Title Missing",
    "description": "Lesson description missing.",
    "content": "No content available.",
}

T = TypeVar("T")


def pick_localized(values: LocalizedText, language: str, field: str) -> str:
    """Requested language first, then the default language, then the placeholder."""
    for code in (language, DEFAULT_LANGUAGE):
        value = values.get(code)
        if value:
            return value
    return PLACEHOLDERS[field]


def localize_row(row: LessonRow, language: str, fields: Sequence[str]) -> LessonRecord:
    texts: Mapping[str, LocalizedText] = {
        "title": row.title,
        "description": row.description,
        "content": row.content,
    }
    payload = {
        "id": row.id,
        "sequence": row.sequence,
        "points": row.points,
        "theme": row.theme,
    }
    for field in fields:
        payload[field] = pick_localized(texts[field], language, field)
    return LessonRecord.model_validate(payload)


class LocalizedLessonResolver:
    def __init__(
        self,
        repository: Optional[LessonRepository] = None,
        *,
        scope: SessionScope = session_scope,
        slot_cache: Optional[LanguageSlotCache] = None,
    ) -> None:
        self._repository = repository or lesson_repository
        self._scope = scope
        self._slot_cache = slot_cache or LanguageSlotCache(get_settings().slot_cache_ttl_seconds)

    def resolve(
        self,
        lesson_id: int,
        language: Optional[str],
        *,
        fields: Sequence[str] = DETAIL_FIELDS,
    ) -> Resolution[LessonRecord]:
        requested = normalize_language_code(language)

        def query(session: Session, languages: Sequence[str]) -> Optional[LessonRow]:
            return self._repository.fetch_lesson(session, lesson_id, languages=languages, fields=fields)

        outcome = self._run_tiers(requested, fields, query, lesson_id=lesson_id)
        if isinstance(outcome, Unavailable):
            return outcome
        tier, row = outcome
        if row is None:
            return self._unavailable(
                "not_found",
                f"Lesson {lesson_id} does not exist.",
                lesson_id=lesson_id,
                requested_language=requested,
            )
        return Resolved(tier=tier, value=localize_row(row, requested, fields), requested_language=requested)

    def resolve_all(
        self,
        language: Optional[str],
        *,
        fields: Sequence[str] = LIST_FIELDS,
    ) -> Resolution[List[LessonRecord]]:
        """Batched variant of :meth:`resolve`: every lesson, ordered by sequence."""
        requested = normalize_language_code(language)

        def query(session: Session, languages: Sequence[str]) -> List[LessonRow]:
            return self._repository.fetch_lessons(session, languages=languages, fields=fields)

        outcome = self._run_tiers(requested, fields, query, lesson_id=None)
        if isinstance(outcome, Unavailable):
            return outcome
        tier, rows = outcome
        return Resolved(
            tier=tier,
            value=[localize_row(row, requested, fields) for row in rows],
            requested_language=requested,
        )

    def invalidate_slots(self) -> None:
        self._slot_cache.invalidate(LESSONS_TABLE)

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    def _run_tiers(
        self,
        language: str,
        fields: Sequence[str],
        query: Callable[[Session, Sequence[str]], T],
        *,
        lesson_id: Optional[int],
    ) -> Tuple[int, T] | Unavailable:
        if language != DEFAULT_LANGUAGE:
            try:
                with self._scope(commit=False) as session:
                    self._require_slots(session, language, fields)
                    return 1, query(session, [DEFAULT_LANGUAGE, language])
            except SchemaMismatch as exc:
                logger.warning("Lesson text not stored for %s; using %s: %s", language, DEFAULT_LANGUAGE, exc)
                reason = "schema_mismatch"
            except STORE_ERRORS as exc:
                logger.warning(
                    "Localized query failed for %s. Switching to %s fallback: %s",
                    language,
                    DEFAULT_LANGUAGE,
                    exc,
                )
                self.invalidate_slots()
                reason = "query_failed"
            emit_event(
                "lesson_fallback_used",
                lesson_id=lesson_id,
                requested_language=language,
                reason=reason,
            )

        try:
            with self._scope(commit=False) as session:
                tier = 1 if language == DEFAULT_LANGUAGE else 2
                return tier, query(session, [DEFAULT_LANGUAGE])
        except STORE_ERRORS as exc:
            return self._unavailable(
                "store_error",
                "Could not retrieve base lesson data.",
                lesson_id=lesson_id,
                requested_language=language,
                error=str(exc),
            )

    def _require_slots(self, session: Session, language: str, fields: Sequence[str]) -> None:
        columns = self._columns(session)
        missing = [slot_name(field, language) for field in fields if slot_name(field, language) not in columns]
        if missing:
            raise SchemaMismatch(language, missing)

    def _columns(self, session: Session) -> FrozenSet[str]:
        cached = self._slot_cache.get(LESSONS_TABLE)
        if cached is not None:
            return cached
        columns = self._repository.table_columns(session)
        self._slot_cache.set(LESSONS_TABLE, columns)
        return columns

    def _unavailable(self, reason, message: str, **context) -> Unavailable:
        error = context.pop("error", None)
        if reason == "not_found":
            logger.warning("%s", message)
        else:
            logger.error("FATAL DB ERROR: %s %s", message, error or "")
        emit_event("lesson_data_unavailable", reason=reason, **context)
        return Unavailable(reason=reason, message=message)


__all__ = [
    "DETAIL_FIELDS",
    "LIST_FIELDS",
    "LocalizedLessonResolver",
    "PLACEHOLDERS",
    "localize_row",
    "pick_localized",
]
