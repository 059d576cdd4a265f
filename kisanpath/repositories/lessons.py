"""Read access to lessons and their per-language text slots."""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from sqlalchemy import column, inspect, select, table
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import TableClause

from ..db.models import LESSONS_TABLE, LOCALIZED_FIELDS
from ..lesson_models import LessonRow

BASE_COLUMNS = ("id", "sequence", "points", "theme")


def slot_name(field: str, language: str) -> str:
    if field not in LOCALIZED_FIELDS:
        raise ValueError(f"'{field}' is not a localized lesson field.")
    return f"{field}_{language}"


def parse_slot_name(name: str) -> Optional[tuple[str, str]]:
    """Split ``title_hi`` into ``("title", "hi")``; ``None`` for non-slot columns."""
    field, sep, language = name.partition("_")
    if not sep or field not in LOCALIZED_FIELDS or not language:
        return None
    return field, language


class LessonRepository:
    """Lesson queries. Callers own the session and therefore the transaction."""

    def table_columns(self, session: Session) -> FrozenSet[str]:
        columns = inspect(session.connection()).get_columns(LESSONS_TABLE)
        return frozenset(entry["name"] for entry in columns)

    def language_slots(self, columns: Iterable[str]) -> Dict[str, FrozenSet[str]]:
        """Map each language tag to the localized fields it has storage for."""
        slots: Dict[str, set[str]] = {}
        for name in columns:
            parsed = parse_slot_name(name)
            if parsed is None:
                continue
            field, language = parsed
            slots.setdefault(language, set()).add(field)
        return {language: frozenset(fields) for language, fields in slots.items()}

    def fetch_lesson(
        self,
        session: Session,
        lesson_id: int,
        *,
        languages: Sequence[str],
        fields: Sequence[str],
    ) -> Optional[LessonRow]:
        lessons = self._projection(languages, fields)
        stmt = select(*lessons.c).where(lessons.c.id == lesson_id)
        row = session.execute(stmt).mappings().one_or_none()
        if row is None:
            return None
        return self._to_row(row, languages, fields)

    def fetch_lessons(
        self,
        session: Session,
        *,
        languages: Sequence[str],
        fields: Sequence[str],
    ) -> List[LessonRow]:
        lessons = self._projection(languages, fields)
        stmt = select(*lessons.c).order_by(lessons.c.sequence.asc())
        rows = session.execute(stmt).mappings().all()
        return [self._to_row(row, languages, fields) for row in rows]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _projection(self, languages: Sequence[str], fields: Sequence[str]) -> TableClause:
        names = list(BASE_COLUMNS)
        for language in dict.fromkeys(languages):
            names.extend(slot_name(field, language) for field in fields)
        return table(LESSONS_TABLE, *(column(name) for name in names))

    def _to_row(self, row: Mapping[str, Any], languages: Sequence[str], fields: Sequence[str]) -> LessonRow:
        payload: Dict[str, Any] = {name: row[name] for name in BASE_COLUMNS}
        if payload["points"] is None:
            payload["points"] = 0
        for field in fields:
            payload[field] = {language: row[slot_name(field, language)] for language in languages}
        return LessonRow.model_validate(payload)


lesson_repository = LessonRepository()

__all__ = ["BASE_COLUMNS", "LessonRepository", "lesson_repository", "parse_slot_name", "slot_name"]
