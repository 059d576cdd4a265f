from __future__ import annotations

from typing import Iterator, Optional

import pytest

from kisanpath.config import get_settings
from kisanpath.db.base import Base
from kisanpath.db.models import LessonModel, ProfileModel
from kisanpath.db.session import dispose_engine, get_engine, session_scope


@pytest.fixture
def database(tmp_path, monkeypatch) -> Iterator[str]:
    """Fresh sqlite file with every table the models declare (en, hi and pa slots)."""
    url = f"sqlite:///{tmp_path / 'kisanpath.sqlite'}"
    monkeypatch.setenv("KISANPATH_DATABASE_URL", url)
    get_settings.cache_clear()
    dispose_engine()
    Base.metadata.create_all(get_engine())
    yield url
    dispose_engine()
    get_settings.cache_clear()


@pytest.fixture
def no_database(monkeypatch) -> Iterator[None]:
    monkeypatch.delenv("KISANPATH_DATABASE_URL", raising=False)
    get_settings.cache_clear()
    dispose_engine()
    yield
    dispose_engine()
    get_settings.cache_clear()


def add_lesson(
    sequence: int,
    *,
    points: int = 10,
    title_en: str = "",
    description_en: Optional[str] = None,
    content_en: Optional[str] = None,
    theme: Optional[str] = None,
    **slots: Optional[str],
) -> int:
    with session_scope() as session:
        lesson = LessonModel(
            sequence=sequence,
            points=points,
            theme=theme,
            title_en=title_en,
            description_en=description_en,
            content_en=content_en,
            **slots,
        )
        session.add(lesson)
        session.flush()
        return lesson.id


def add_profile(user_id: str, *, coins: int = 0, xp: int = 0, language: Optional[str] = None) -> None:
    with session_scope() as session:
        session.add(ProfileModel(id=user_id, coins=coins, xp=xp, language=language))
