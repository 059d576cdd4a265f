from __future__ import annotations

from sqlalchemy.exc import OperationalError

from kisanpath.lesson_service import LessonService
from kisanpath.repositories.completions import CompletionRepository

from .conftest import add_lesson, add_profile


class _UnreadableCompletions(CompletionRepository):
    def completed_lesson_ids(self, session, user_id):
        raise OperationalError("SELECT", {}, Exception("timeout"))

    def exists(self, session, user_id, lesson_id):
        raise OperationalError("SELECT", {}, Exception("timeout"))


def _seed_catalog() -> list[int]:
    return [
        add_lesson(1, points=10, title_en="Soil", description_en="Test your soil", title_hi="मिट्टी"),
        add_lesson(2, points=20, title_en="Water", description_en="Save water"),
        add_lesson(3, points=30, title_en="Seeds", description_en="Pick seeds"),
    ]


def test_list_reflects_completions(database) -> None:
    first, second, third = _seed_catalog()
    add_profile("farmer-1")
    service = LessonService()
    service.complete_lesson(first, "farmer-1")

    view = service.fetch_lessons("hi", "farmer-1")

    assert view.unavailable is None
    assert view.tier == 1
    assert [lesson.status for lesson in view.lessons] == ["completed", "current", "locked"]
    assert view.lessons[0].title == "मिट्टी"
    assert view.board.current is not None and view.board.current.id == second
    assert [lesson.id for lesson in view.board.upcoming] == [third]
    assert view.board.total_score == 10


def test_guest_list_starts_at_first_lesson(database) -> None:
    _seed_catalog()

    view = LessonService().fetch_lessons("en", None)

    assert [lesson.status for lesson in view.lessons] == ["current", "locked", "locked"]
    assert view.board.total_score == 0


def test_unreadable_completions_fail_the_list(database) -> None:
    _seed_catalog()

    view = LessonService(completions=_UnreadableCompletions()).fetch_lessons("en", "farmer-1")

    assert view.lessons == []
    assert view.unavailable is not None
    assert view.unavailable.message == "Failed to load lessons from the server."


def test_detail_reports_completion(database) -> None:
    first, _, _ = _seed_catalog()
    add_profile("farmer-2")
    service = LessonService()

    assert service.fetch_lesson(first, "en", "farmer-2").is_completed is False
    service.complete_lesson(first, "farmer-2")
    view = service.fetch_lesson(first, "en", "farmer-2")

    assert view.is_completed is True
    assert view.lesson is not None and view.lesson.title == "Soil"


def test_detail_survives_unreadable_completion_flag(database) -> None:
    first, _, _ = _seed_catalog()

    view = LessonService(completions=_UnreadableCompletions()).fetch_lesson(first, "pa", "farmer-3")

    assert view.unavailable is None
    assert view.is_completed is False
    assert view.lesson is not None and view.lesson.title == "Soil"


def test_completing_unknown_lesson_is_not_found(database) -> None:
    view = LessonService().complete_lesson(404, "farmer-4")

    assert view.outcome is None
    assert view.unavailable is not None and view.unavailable.reason == "not_found"


def test_guest_completion_skips_the_store(no_database) -> None:
    view = LessonService().complete_lesson(3, None)

    assert view.unavailable is None
    assert view.outcome is not None
    assert view.outcome.accepted and not view.outcome.persisted
    assert view.outcome.sequence is None


def test_padded_user_id_sees_its_progress(database) -> None:
    first, _, _ = _seed_catalog()
    add_profile("farmer-5")
    service = LessonService()
    service.complete_lesson(first, "farmer-5")

    view = service.fetch_lessons("en", " farmer-5 ")

    assert view.lessons[0].status == "completed"
    assert service.fetch_lesson(first, "en", "farmer-5 ").is_completed is True
