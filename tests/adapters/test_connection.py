"""Unit tests for DatabaseConnection (connection.py)."""

from __future__ import annotations

import sqlite3
import stat
from unittest.mock import MagicMock, patch

import pytest

from recurrence_engine.adapters.sqlite.connection import (
    DatabaseConnection,
    configure_connection,
    get_connection,
)


@pytest.fixture(autouse=True)
def reset_singleton():
    """Reset DatabaseConnection singleton state around each test."""
    DatabaseConnection.close_connection()
    DatabaseConnection._instance = None
    DatabaseConnection._connection = None
    DatabaseConnection._db_path = None
    yield
    DatabaseConnection.close_connection()
    DatabaseConnection._instance = None
    DatabaseConnection._connection = None
    DatabaseConnection._db_path = None


class TestSingleton:
    def test_same_instance_returned_twice(self):
        assert DatabaseConnection() is DatabaseConnection()


class TestGetConnection:
    def test_creates_db_file_with_owner_only_permissions(self, tmp_path):
        db_file = tmp_path / "recurrence.db"

        conn = DatabaseConnection.get_connection(db_path=str(db_file))

        assert isinstance(conn, sqlite3.Connection)
        assert db_file.exists()
        assert stat.S_IMODE(db_file.stat().st_mode) == 0o600

    def test_same_connection_returned_for_same_path(self, tmp_path):
        db_file = tmp_path / "same.db"
        assert get_connection(str(db_file)) is get_connection(str(db_file))

    def test_new_connection_when_path_changes(self, tmp_path):
        conn1 = get_connection(str(tmp_path / "one.db"))
        conn2 = get_connection(str(tmp_path / "two.db"))
        assert conn1 is not conn2

    def test_default_path_uses_user_data_dir(self, tmp_path):
        with patch(
            "recurrence_engine.adapters.sqlite.connection.user_data_dir",
            return_value=str(tmp_path),
        ):
            get_connection()

        assert (tmp_path / "recurrence.db").exists()

    def test_schema_is_migrated_and_foreign_keys_enabled(self, tmp_path):
        conn = get_connection(str(tmp_path / "schema.db"))

        version = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
        foreign_keys = conn.execute("PRAGMA foreign_keys").fetchone()[0]
        journal_mode = conn.execute("PRAGMA journal_mode").fetchone()[0]

        assert version == 1
        assert foreign_keys == 1
        assert journal_mode == "wal"

    def test_close_connection_resets_state(self, tmp_path):
        get_connection(str(tmp_path / "close.db"))

        DatabaseConnection.close_connection()

        assert DatabaseConnection()._connection is None
        assert DatabaseConnection()._db_path is None


class TestConfigureConnection:
    def test_rows_are_addressable_by_name(self):
        conn = configure_connection(sqlite3.connect(":memory:"))
        row = conn.execute("SELECT 1 AS answer").fetchone()
        assert row["answer"] == 1


class TestExecuteWithRetry:
    def test_retries_while_locked(self):
        conn = MagicMock()
        cursor = MagicMock()
        conn.execute.side_effect = [
            sqlite3.OperationalError("database is locked"),
            sqlite3.OperationalError("database is locked"),
            cursor,
        ]

        with patch("recurrence_engine.adapters.sqlite.connection.time.sleep") as sleep:
            result = DatabaseConnection.execute_with_retry(conn, "SELECT 1", (1,))

        assert result is cursor
        assert conn.execute.call_count == 3
        assert sleep.call_count == 2

    def test_gives_up_after_max_retries(self):
        conn = MagicMock()
        conn.execute.side_effect = sqlite3.OperationalError("database is locked")

        with patch("recurrence_engine.adapters.sqlite.connection.time.sleep"):
            with pytest.raises(sqlite3.OperationalError, match="locked"):
                DatabaseConnection.execute_with_retry(conn, "SELECT 1", max_retries=2)

        assert conn.execute.call_count == 2

    def test_other_errors_are_not_retried(self):
        conn = MagicMock()
        conn.execute.side_effect = sqlite3.OperationalError("no such table: x")

        with pytest.raises(sqlite3.OperationalError, match="no such table"):
            DatabaseConnection.execute_with_retry(conn, "SELECT * FROM x")

        assert conn.execute.call_count == 1
