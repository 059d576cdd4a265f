"""Apply Alembic migrations once the lesson store accepts connections.

Deploys run this before the API starts so newly added language slots exist
before any request asks for them.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from kisanpath.db.models import LESSONS_TABLE, LOCALIZED_FIELDS
from kisanpath.languages import DEFAULT_LANGUAGE
from kisanpath.repositories.lessons import lesson_repository

LOGGER = logging.getLogger("kisanpath.migrations")
DEFAULT_TIMEOUT = int(os.getenv("KISANPATH_DB_MIGRATION_TIMEOUT", "60"))
DEFAULT_POLL_INTERVAL = float(os.getenv("KISANPATH_DB_MIGRATION_POLL_INTERVAL", "3"))
URL_PLACEHOLDER = "%(KISANPATH_DATABASE_URL)s"
PROJECT_ROOT = Path(__file__).resolve().parent.parent


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Upgrade the lesson store schema.")
    parser.add_argument(
        "--revision",
        default=os.getenv("KISANPATH_DB_MIGRATION_REVISION", "head"),
        help="Revision to upgrade to (default: head).",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT,
        help=f"Seconds to wait for the database (default: {DEFAULT_TIMEOUT}).",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help=f"Seconds between readiness probes (default: {DEFAULT_POLL_INTERVAL}).",
    )
    parser.add_argument(
        "--config",
        default=str(PROJECT_ROOT / "alembic.ini"),
        help="Path to alembic.ini.",
    )
    return parser.parse_args(argv)


def get_alembic_config(config_path: str) -> Config:
    config = Config(config_path)
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return config


def resolve_database_url(config: Config) -> str:
    url = config.get_main_option("sqlalchemy.url")
    if url and url != URL_PLACEHOLDER:
        return url
    env_url = os.getenv("KISANPATH_DATABASE_URL")
    if not env_url:
        raise RuntimeError("KISANPATH_DATABASE_URL must be set before running migrations.")
    config.set_main_option("sqlalchemy.url", env_url)
    return env_url


def wait_for_database(database_url: str, *, timeout: int, poll_interval: float) -> None:
    """Retry ``SELECT 1`` until it succeeds or ``timeout`` seconds pass."""
    deadline = time.time() + timeout
    engine: Optional[Engine] = None
    last_error: Optional[Exception] = None

    try:
        engine = create_engine(database_url, pool_pre_ping=True)
        while time.time() < deadline:
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                LOGGER.info("Database is reachable.")
                return
            except OperationalError as exc:
                last_error = exc
                LOGGER.warning("Database not ready yet: %s", exc)
            except SQLAlchemyError as exc:
                last_error = exc
                LOGGER.error("Database error during readiness probe: %s", exc)
                break
            time.sleep(poll_interval)
    finally:
        if engine is not None:
            engine.dispose()

    raise RuntimeError("Database did not become ready in time.") from last_error


def summarize_language_slots(columns: Iterable[str]) -> Dict[str, FrozenSet[str]]:
    """Log which languages the lessons table can hold and which are partial."""
    slots = lesson_repository.language_slots(columns)
    if DEFAULT_LANGUAGE not in slots:
        LOGGER.error("Default language %s has no lesson text columns.", DEFAULT_LANGUAGE)
    for language, fields in sorted(slots.items()):
        missing = sorted(set(LOCALIZED_FIELDS) - fields)
        if missing:
            LOGGER.warning(
                "Language %s lacks %s; those fields fall back to %s.",
                language,
                ", ".join(missing),
                DEFAULT_LANGUAGE,
            )
    LOGGER.info("Lesson text columns exist for: %s", ", ".join(sorted(slots)) or "none")
    return slots


def inspect_language_slots(database_url: str) -> Dict[str, FrozenSet[str]]:
    engine = create_engine(database_url)
    try:
        inspector = inspect(engine)
        if not inspector.has_table(LESSONS_TABLE):
            LOGGER.warning("No %s table at this revision.", LESSONS_TABLE)
            return {}
        columns = [column["name"] for column in inspector.get_columns(LESSONS_TABLE)]
    finally:
        engine.dispose()
    return summarize_language_slots(columns)


def run_migrations(
    revision: str,
    *,
    timeout: int,
    poll_interval: float,
    config: Optional[Config] = None,
) -> Dict[str, FrozenSet[str]]:
    """Upgrade to ``revision`` and return the language slots now available."""
    config = config or get_alembic_config(str(PROJECT_ROOT / "alembic.ini"))
    database_url = resolve_database_url(config)
    LOGGER.info("Upgrading lesson store to %s (timeout=%ss poll=%ss)", revision, timeout, poll_interval)
    wait_for_database(database_url, timeout=timeout, poll_interval=poll_interval)
    command.upgrade(config, revision)
    LOGGER.info("Migrations complete.")
    return inspect_language_slots(database_url)


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(
        level=os.getenv("KISANPATH_DB_MIGRATION_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    args = parse_args(argv)
    try:
        run_migrations(
            args.revision,
            timeout=args.timeout,
            poll_interval=args.poll_interval,
            config=get_alembic_config(args.config),
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Migration run failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
