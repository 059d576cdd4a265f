"""Record lesson completions and grant their reward exactly once."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .db.session import STORE_ERRORS, SessionScope, session_scope
from .errors import WriteFailure
from .identity import normalize_user_id
from .lesson_models import CompletionOutcome, CompletionRecord, LessonRecord, UserAccount
from .repositories.completions import CompletionRepository, completion_repository
from .repositories.profiles import ProfileRepository, profile_repository
from .telemetry import emit_event

logger = logging.getLogger(__name__)


class CompletionReconciler:
    """Moves a (user, lesson) pair from not completed to completed.

    The completion insert and the coin/XP increment commit in the same
    transaction, and the increment is a single ``UPDATE ... SET x = x + n``.
    A failed call therefore leaves nothing behind and can be retried, and a
    duplicate insert (earlier or concurrent completion) never re-grants points.
    Completions reference the profile row, so a user without a profile is
    refused like any other write failure.
    """

    def __init__(
        self,
        completions: Optional[CompletionRepository] = None,
        profiles: Optional[ProfileRepository] = None,
        *,
        scope: SessionScope = session_scope,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._completions = completions or completion_repository
        self._profiles = profiles or profile_repository
        self._scope = scope
        self._clock = clock

    def complete(self, user_id: Optional[str], lesson: LessonRecord) -> CompletionOutcome:
        # Completion rows and the reward must be keyed on the same id.
        user_id = normalize_user_id(user_id)
        if user_id is None:
            # Guest progress is not tracked server-side.
            return CompletionOutcome(accepted=True, lesson_id=lesson.id, sequence=lesson.sequence)

        account: Optional[UserAccount] = None
        try:
            with self._scope() as session:
                record = CompletionRecord(user_id=user_id, lesson_id=lesson.id, completed_at=self._clock())
                inserted = self._completions.insert(session, record, on_conflict="ignore")
                if inserted:
                    account = self._profiles.increment_rewards(session, user_id, lesson.points)
        except STORE_ERRORS as exc:
            failure = WriteFailure(f"Failed to save progress for lesson {lesson.id}.")
            logger.error("%s user=%s: %s", failure, user_id, exc)
            emit_event(
                "lesson_completion_failed",
                user_id=user_id,
                lesson_id=lesson.id,
                error=exc.__class__.__name__,
            )
            return CompletionOutcome(
                accepted=False,
                lesson_id=lesson.id,
                sequence=lesson.sequence,
                error=str(failure),
            )

        if not inserted:
            logger.info("Lesson %s already completed by %s; reward not re-applied", lesson.id, user_id)

        outcome = CompletionOutcome(
            accepted=True,
            lesson_id=lesson.id,
            sequence=lesson.sequence,
            persisted=inserted,
            duplicate=not inserted,
            reward_applied=account is not None,
            account=account,
        )
        emit_event(
            "lesson_completion_recorded",
            user_id=user_id,
            lesson_id=lesson.id,
            sequence=lesson.sequence,
            points=lesson.points,
            duplicate=outcome.duplicate,
            reward_applied=outcome.reward_applied,
        )
        return outcome


__all__ = ["CompletionReconciler"]
