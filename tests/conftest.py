"""Shared test fixtures and configuration.

Provides in-memory databases and isolates tests from the real config, data
and log directories.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from recurrence_engine.adapters.sqlite.change_log_repository import (
    SqliteChangeLogRepository,
)
from recurrence_engine.adapters.sqlite.connection import configure_connection
from recurrence_engine.adapters.sqlite.pattern_repository import (
    SqliteRecurrencePatternRepository,
)
from recurrence_engine.adapters.sqlite.series_repository import (
    SqliteWorkItemSeriesRepository,
)
from recurrence_engine.adapters.sqlite.user_manager import ensure_user

OWNER_ID = "user-owner-001"
OTHER_OWNER_ID = "user-owner-002"


class FixedClock:
    """Deterministic clock; each call advances one second."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2025, 1, 6, 9, 0, tzinfo=UTC)
        self.calls = 0

    def __call__(self) -> datetime:
        value = self.current + timedelta(seconds=self.calls)
        self.calls += 1
        return value


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def isolated_log_dir(tmp_path_factory):
    """Send the engine log file to a temporary directory for the whole run."""
    import recurrence_engine.utils.logger as logger_mod

    log_dir = str(tmp_path_factory.mktemp("logs"))
    with patch("recurrence_engine.utils.logger.user_log_dir", return_value=log_dir):
        logger_mod._logger = None
        logging.getLogger("recurrence_engine").handlers.clear()
        yield log_dir
        logger_mod._logger = None
        logging.getLogger("recurrence_engine").handlers.clear()


# ---------------------------------------------------------------------------
# Database helpers
# ---------------------------------------------------------------------------


def create_in_memory_db() -> sqlite3.Connection:
    """In-memory SQLite database with every migration applied."""
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    return configure_connection(conn)


def make_repo(repo_cls, conn: sqlite3.Connection):
    """Return a repository of *repo_cls* wired to the given connection."""
    repo = repo_cls.__new__(repo_cls)
    repo.db_path = None
    repo._connection = conn
    return repo


@pytest.fixture
def db() -> sqlite3.Connection:
    """Fresh in-memory DB with two seeded owners."""
    conn = create_in_memory_db()
    ensure_user(conn, OWNER_ID, name="Test Owner", timezone="UTC")
    ensure_user(conn, OTHER_OWNER_ID, name="Other Owner", timezone="UTC")
    yield conn
    conn.close()


@pytest.fixture
def pattern_repo(db) -> SqliteRecurrencePatternRepository:
    return make_repo(SqliteRecurrencePatternRepository, db)


@pytest.fixture
def series_repo(db) -> SqliteWorkItemSeriesRepository:
    return make_repo(SqliteWorkItemSeriesRepository, db)


@pytest.fixture
def change_log_repo(db) -> SqliteChangeLogRepository:
    return make_repo(SqliteChangeLogRepository, db)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config and data files land in *tmp_path* only,
    and clears the lru_cache so each test gets a fresh service instance.
    """
    from recurrence_engine.adapters.sqlite.connection import DatabaseConnection
    from recurrence_engine.services.config_service import get_config_service

    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    with patch(
        "recurrence_engine.services.config_service.user_config_dir", return_value=tmpdir
    ), patch(
        "recurrence_engine.services.config_service.user_data_dir", return_value=tmpdir
    ), patch(
        "recurrence_engine.services.config_service.get_system_timezone",
        return_value="Europe/Berlin",
    ), patch(
        "recurrence_engine.adapters.sqlite.user_manager.get_system_timezone",
        return_value="Europe/Berlin",
    ):
        from recurrence_engine.services.config_service import ConfigService

        yield ConfigService()
    DatabaseConnection.close_connection()
    get_config_service.cache_clear()
