"""Persistence for per-user lesson completions."""

from __future__ import annotations

import logging
from typing import Literal, Set

from sqlalchemy import insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.models import LessonCompletionModel
from ..errors import DuplicateCompletion
from ..lesson_models import CompletionRecord

logger = logging.getLogger(__name__)

ConflictPolicy = Literal["ignore", "error"]

_COMPLETIONS = LessonCompletionModel.__table__
_CONFLICT_COLUMNS = ["user_id", "lesson_id"]

# Dialects with INSERT ... ON CONFLICT DO NOTHING; others use a savepoint.
UPSERT_DIALECTS = frozenset({"postgresql", "sqlite"})


class CompletionRepository:
    def insert(
        self,
        session: Session,
        record: CompletionRecord,
        *,
        on_conflict: ConflictPolicy = "ignore",
    ) -> bool:
        """Insert ``record`` unless its (user, lesson) pair is already stored.

        Returns ``False`` when the pair already exists and ``on_conflict`` is
        ``"ignore"``; raises :class:`DuplicateCompletion` when it is ``"error"``.
        Any other integrity failure propagates.
        """
        values = record.model_dump()
        dialect = session.get_bind().dialect.name
        if dialect in UPSERT_DIALECTS:
            module = postgresql if dialect == "postgresql" else sqlite
            stmt = module.insert(_COMPLETIONS).values(**values).on_conflict_do_nothing(
                index_elements=_CONFLICT_COLUMNS
            )
            inserted = session.execute(stmt).rowcount == 1
        else:
            inserted = self._insert_with_savepoint(session, values)

        if not inserted and on_conflict == "error":
            raise DuplicateCompletion(record.user_id, record.lesson_id)
        return inserted

    def exists(self, session: Session, user_id: str, lesson_id: int) -> bool:
        stmt = select(LessonCompletionModel.id).where(
            LessonCompletionModel.user_id == user_id,
            LessonCompletionModel.lesson_id == lesson_id,
        )
        return session.execute(stmt).first() is not None

    def completed_lesson_ids(self, session: Session, user_id: str) -> Set[int]:
        stmt = select(LessonCompletionModel.lesson_id).where(LessonCompletionModel.user_id == user_id)
        return set(session.execute(stmt).scalars().all())

    def _insert_with_savepoint(self, session: Session, values: dict) -> bool:
        try:
            with session.begin_nested():
                session.execute(insert(_COMPLETIONS).values(**values))
        except IntegrityError:
            if self.exists(session, values["user_id"], values["lesson_id"]):
                logger.debug("Completion already present for user=%s lesson=%s", values["user_id"], values["lesson_id"])
                return False
            raise
        return True


completion_repository = CompletionRepository()

__all__ = ["CompletionRepository", "ConflictPolicy", "UPSERT_DIALECTS", "completion_repository"]
