from __future__ import annotations

import types

import pytest
from sqlalchemy import create_engine, inspect

from scripts import run_migrations as runner


def _config(monkeypatch, url: str = "sqlite://"):
    monkeypatch.setenv("KISANPATH_DATABASE_URL", url)
    return runner.get_alembic_config(str(runner.PROJECT_ROOT / "alembic.ini"))


def test_resolve_database_url_prefers_env(monkeypatch) -> None:
    config = _config(monkeypatch)
    assert runner.resolve_database_url(config) == "sqlite://"
    assert config.get_main_option("sqlalchemy.url") == "sqlite://"


def test_resolve_database_url_requires_env(monkeypatch) -> None:
    config = _config(monkeypatch)
    monkeypatch.delenv("KISANPATH_DATABASE_URL")
    with pytest.raises(RuntimeError, match="KISANPATH_DATABASE_URL"):
        runner.resolve_database_url(config)


def test_wait_for_database_succeeds_with_sqlite(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'test.sqlite'}"
    runner.wait_for_database(url, timeout=2, poll_interval=0.1)


def test_wait_for_database_times_out(monkeypatch) -> None:
    class DummyEngine:
        def connect(self) -> types.SimpleNamespace:
            raise runner.OperationalError("SELECT 1", {}, Exception("boom"))

        def dispose(self) -> None:
            pass

    monkeypatch.setattr(runner, "create_engine", lambda *_, **__: DummyEngine())
    with pytest.raises(RuntimeError):
        runner.wait_for_database("postgresql://example", timeout=0, poll_interval=0)


def test_run_migrations_invokes_upgrade(monkeypatch) -> None:
    config = _config(monkeypatch)
    recorded: dict[str, object] = {}

    def fake_wait(url: str, *, timeout: int, poll_interval: float) -> None:
        recorded["wait"] = (url, timeout, poll_interval)

    def fake_upgrade(cfg, revision: str) -> None:
        recorded["revision"] = revision
        recorded["script_location"] = cfg.get_main_option("script_location")

    monkeypatch.setattr(runner, "wait_for_database", fake_wait)
    monkeypatch.setattr(runner.command, "upgrade", fake_upgrade)

    slots = runner.run_migrations("head", timeout=5, poll_interval=0.1, config=config)

    assert recorded["revision"] == "head"
    assert slots == {}
    assert recorded["wait"][0] == "sqlite://"
    assert str(recorded["script_location"]).endswith("alembic")


def test_migrations_add_language_slots_incrementally(tmp_path, monkeypatch) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.sqlite'}"
    config = _config(monkeypatch, url)

    slots = runner.run_migrations("20251006_01_initial_schema", timeout=2, poll_interval=0.1, config=config)
    assert slots == {"en": frozenset({"title", "description", "content"})}
    engine = create_engine(url)
    try:
        columns = {column["name"] for column in inspect(engine).get_columns("lessons")}
        assert "title_en" in columns and "title_hi" not in columns
    finally:
        engine.dispose()

    slots = runner.run_migrations("head", timeout=2, poll_interval=0.1, config=config)
    assert sorted(slots) == ["en", "hi", "pa"]
    engine = create_engine(url)
    try:
        columns = {column["name"] for column in inspect(engine).get_columns("lessons")}
        assert {"title_hi", "description_pa", "content_pa"} <= columns
    finally:
        engine.dispose()


def test_partial_language_slots_are_reported(caplog) -> None:
    columns = ["id", "sequence", "title_en", "description_en", "content_en", "title_ta"]

    with caplog.at_level("WARNING", logger="kisanpath.migrations"):
        slots = runner.summarize_language_slots(columns)

    assert slots["ta"] == frozenset({"title"})
    assert "Language ta lacks content, description" in caplog.text
