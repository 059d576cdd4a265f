from __future__ import annotations

from contextlib import contextmanager

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from kisanpath import completion as completion_module
from kisanpath.completion import CompletionReconciler
from kisanpath.db.models import LessonCompletionModel
from kisanpath.db.session import session_scope
from kisanpath.errors import DuplicateCompletion
from kisanpath.lesson_models import CompletionRecord, LessonRecord
from kisanpath.repositories import completions as completions_module
from kisanpath.repositories.completions import completion_repository
from kisanpath.repositories.profiles import profile_repository

from .conftest import add_lesson, add_profile


def _lesson(lesson_id: int, *, sequence: int = 1, points: int = 10) -> LessonRecord:
    return LessonRecord(id=lesson_id, sequence=sequence, points=points, title="Lesson")


def _completion_count(user_id: str) -> int:
    with session_scope(commit=False) as session:
        return session.execute(
            select(func.count()).select_from(LessonCompletionModel).where(LessonCompletionModel.user_id == user_id)
        ).scalar_one()


def test_first_completion_grants_points(database) -> None:
    lesson_id = add_lesson(1, points=25, title_en="Soil")
    add_profile("farmer-1", coins=5, xp=5)

    outcome = CompletionReconciler().complete("farmer-1", _lesson(lesson_id, points=25))

    assert outcome.accepted and outcome.persisted and outcome.reward_applied
    assert not outcome.duplicate
    assert outcome.account is not None
    assert (outcome.account.coins, outcome.account.xp) == (30, 30)


def test_repeat_completion_is_idempotent(database) -> None:
    lesson_id = add_lesson(1, points=10, title_en="Soil")
    add_profile("farmer-2")
    reconciler = CompletionReconciler()

    reconciler.complete("farmer-2", _lesson(lesson_id))
    second = reconciler.complete("farmer-2", _lesson(lesson_id))

    assert second.accepted
    assert second.duplicate and not second.persisted and not second.reward_applied
    assert _completion_count("farmer-2") == 1
    with session_scope(commit=False) as session:
        account = profile_repository.get_account(session, "farmer-2")
    assert account is not None
    assert (account.coins, account.xp) == (10, 10)


def test_guest_completion_is_accepted_without_writes(database) -> None:
    lesson_id = add_lesson(1, title_en="Soil")

    outcome = CompletionReconciler().complete(None, _lesson(lesson_id))

    assert outcome.accepted
    assert not outcome.persisted
    with session_scope(commit=False) as session:
        assert session.execute(select(func.count()).select_from(LessonCompletionModel)).scalar_one() == 0


def test_missing_profile_is_refused(database) -> None:
    lesson_id = add_lesson(1, title_en="Soil")

    outcome = CompletionReconciler().complete("no-profile", _lesson(lesson_id))

    assert not outcome.accepted
    assert not outcome.persisted
    assert outcome.error == f"Failed to save progress for lesson {lesson_id}."
    assert _completion_count("no-profile") == 0


def test_padded_user_id_is_the_same_farmer(database) -> None:
    lesson_id = add_lesson(1, points=10, title_en="Soil")
    add_profile("farmer-7")
    reconciler = CompletionReconciler()

    first = reconciler.complete(" farmer-7 ", _lesson(lesson_id))
    second = reconciler.complete("farmer-7", _lesson(lesson_id))

    assert first.persisted and second.duplicate
    assert _completion_count("farmer-7") == 1
    with session_scope(commit=False) as session:
        account = profile_repository.get_account(session, "farmer-7")
    assert account is not None
    assert (account.coins, account.xp) == (10, 10)


def test_blank_user_id_is_a_guest(database) -> None:
    lesson_id = add_lesson(1, title_en="Soil")

    outcome = CompletionReconciler().complete("   ", _lesson(lesson_id))

    assert outcome.accepted and not outcome.persisted
    with session_scope(commit=False) as session:
        assert session.execute(select(func.count()).select_from(LessonCompletionModel)).scalar_one() == 0


def test_store_failure_refuses_completion(monkeypatch) -> None:
    emitted: list[tuple[str, dict[str, object]]] = []
    monkeypatch.setattr(completion_module, "emit_event", lambda name, **payload: emitted.append((name, payload)))

    @contextmanager
    def broken_scope(*, commit: bool = True):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))
        yield  # pragma: no cover

    outcome = CompletionReconciler(scope=broken_scope).complete("farmer-3", _lesson(7))

    assert not outcome.accepted
    assert outcome.error == "Failed to save progress for lesson 7."
    assert emitted[0][0] == "lesson_completion_failed"
    assert emitted[0][1]["error"] == "OperationalError"


def test_failed_reward_rolls_back_the_completion(database, monkeypatch) -> None:
    lesson_id = add_lesson(1, title_en="Soil")
    add_profile("farmer-4")

    def fail_increment(session, user_id, points):
        raise OperationalError("UPDATE", {}, Exception("lock timeout"))

    monkeypatch.setattr(profile_repository, "increment_rewards", fail_increment)
    outcome = CompletionReconciler().complete("farmer-4", _lesson(lesson_id))

    assert not outcome.accepted
    assert _completion_count("farmer-4") == 0


def test_strict_insert_raises_on_duplicate(database) -> None:
    lesson_id = add_lesson(1, title_en="Soil")
    add_profile("farmer-5")
    with session_scope() as session:
        assert completion_repository.insert(session, CompletionRecord(user_id="farmer-5", lesson_id=lesson_id))
    with pytest.raises(DuplicateCompletion):
        with session_scope() as session:
            completion_repository.insert(
                session, CompletionRecord(user_id="farmer-5", lesson_id=lesson_id), on_conflict="error"
            )


def test_negative_points_are_rejected(database) -> None:
    add_profile("farmer-6")
    with pytest.raises(ValueError):
        with session_scope() as session:
            profile_repository.increment_rewards(session, "farmer-6", -1)


def test_savepoint_insert_detects_duplicates(database, monkeypatch) -> None:
    monkeypatch.setattr(completions_module, "UPSERT_DIALECTS", frozenset())
    lesson_id = add_lesson(1, title_en="Soil")
    add_profile("farmer-8")

    with session_scope() as session:
        assert completion_repository.insert(session, CompletionRecord(user_id="farmer-8", lesson_id=lesson_id))
    with session_scope() as session:
        assert not completion_repository.insert(session, CompletionRecord(user_id="farmer-8", lesson_id=lesson_id))
    assert _completion_count("farmer-8") == 1


def test_savepoint_insert_reraises_other_integrity_errors(database, monkeypatch) -> None:
    monkeypatch.setattr(completions_module, "UPSERT_DIALECTS", frozenset())
    lesson_id = add_lesson(1, title_en="Soil")

    with pytest.raises(IntegrityError):
        with session_scope() as session:
            completion_repository.insert(session, CompletionRecord(user_id="unknown-farmer", lesson_id=lesson_id))
    assert _completion_count("unknown-farmer") == 0


def test_savepoint_duplicate_keeps_the_surrounding_transaction(database, monkeypatch) -> None:
    monkeypatch.setattr(completions_module, "UPSERT_DIALECTS", frozenset())
    lesson_id = add_lesson(1, points=10, title_en="Soil")
    add_profile("farmer-9")
    reconciler = CompletionReconciler()

    reconciler.complete("farmer-9", _lesson(lesson_id))
    second = reconciler.complete("farmer-9", _lesson(lesson_id))

    assert second.accepted and second.duplicate
    with session_scope(commit=False) as session:
        account = profile_repository.get_account(session, "farmer-9")
    assert account is not None
    assert account.coins == 10
