from __future__ import annotations

import json

from sqlalchemy import select

from kisanpath.db.models import LessonModel
from kisanpath.db.session import session_scope
from scripts import seed_lessons

from .conftest import add_lesson


def _write(tmp_path, lessons) -> object:
    path = tmp_path / "lessons.json"
    path.write_text(json.dumps(lessons), encoding="utf-8")
    return path


def test_seed_inserts_and_skips_missing_slots(database, tmp_path) -> None:
    path = _write(
        tmp_path,
        [
            {"sequence": 1, "points": 10, "title": {"en": "Soil", "hi": "मिट्टी", "ta": "மண்"}},
            {"sequence": 2, "title": {"hi": "पानी"}},
            {"sequence": 0, "title": {"en": "Invalid"}},
        ],
    )

    with session_scope() as session:
        counts = seed_lessons.seed_lessons(session, seed_lessons._load(path))

    assert counts == {"inserted": 1, "updated": 0}
    with session_scope(commit=False) as session:
        lesson = session.execute(select(LessonModel)).scalar_one()
    assert (lesson.title_en, lesson.title_hi, lesson.points) == ("Soil", "मिट्टी", 10)


def test_seed_updates_existing_sequence(database, tmp_path) -> None:
    lesson_id = add_lesson(1, points=5, title_en="Old title")
    path = _write(tmp_path, [{"sequence": 1, "points": 20, "title": {"en": "New title"}, "content": {"pa": "Paath"}}])

    with session_scope() as session:
        counts = seed_lessons.seed_lessons(session, seed_lessons._load(path))

    assert counts == {"inserted": 0, "updated": 1}
    with session_scope(commit=False) as session:
        lesson = session.get(LessonModel, lesson_id)
    assert (lesson.title_en, lesson.points, lesson.content_pa) == ("New title", 20, "Paath")
