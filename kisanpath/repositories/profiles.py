"""Farmer profile persistence, including the coin and XP counters."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..db.models import ProfileModel
from ..lesson_models import UserAccount


def _normalize_user_id(user_id: str) -> str:
    normalized = user_id.strip()
    if not normalized:
        raise ValueError("User id cannot be empty.")
    return normalized


class ProfileRepository:
    def get_account(self, session: Session, user_id: str) -> Optional[UserAccount]:
        model = session.get(ProfileModel, _normalize_user_id(user_id))
        if model is None:
            return None
        return self._to_domain(model)

    def increment_rewards(self, session: Session, user_id: str, points: int) -> Optional[UserAccount]:
        """Add ``points`` to both counters with one UPDATE; ``None`` if the profile is missing."""
        if points < 0:
            raise ValueError("Reward points cannot be negative.")
        normalized = _normalize_user_id(user_id)
        result = session.execute(
            update(ProfileModel)
            .where(ProfileModel.id == normalized)
            .values(
                coins=ProfileModel.coins + points,
                xp=ProfileModel.xp + points,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return self._read_counters(session, normalized)

    def set_language(self, session: Session, user_id: str, language: str) -> bool:
        result = session.execute(
            update(ProfileModel)
            .where(ProfileModel.id == _normalize_user_id(user_id))
            .values(language=language, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def upsert(
        self,
        session: Session,
        user_id: str,
        *,
        full_name: Optional[str] = None,
        mobile_no: Optional[str] = None,
        agristack_id: Optional[str] = None,
        language: Optional[str] = None,
    ) -> UserAccount:
        normalized = _normalize_user_id(user_id)
        model = session.get(ProfileModel, normalized)
        if model is None:
            model = ProfileModel(id=normalized, coins=0, xp=0)
            session.add(model)

        if full_name is not None:
            model.full_name = full_name.strip() or None
        if mobile_no is not None:
            model.mobile_no = mobile_no.strip() or None
        if agristack_id is not None:
            model.agristack_id = agristack_id.strip() or None
        if language is not None:
            model.language = language
        session.flush()
        return self._to_domain(model)

    def _read_counters(self, session: Session, user_id: str) -> Optional[UserAccount]:
        stmt = select(
            ProfileModel.id,
            ProfileModel.coins,
            ProfileModel.xp,
            ProfileModel.language,
            ProfileModel.full_name,
        ).where(ProfileModel.id == user_id)
        row = session.execute(stmt).one_or_none()
        if row is None:
            return None
        return UserAccount(
            user_id=row.id,
            coins=row.coins or 0,
            xp=row.xp or 0,
            language=row.language,
            full_name=row.full_name,
        )

    def _to_domain(self, model: ProfileModel) -> UserAccount:
        return UserAccount(
            user_id=model.id,
            coins=model.coins or 0,
            xp=model.xp or 0,
            language=model.language,
            full_name=model.full_name,
        )


profile_repository = ProfileRepository()

__all__ = ["ProfileRepository", "profile_repository"]
