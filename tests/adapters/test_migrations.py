"""Tests for the migration runner and the initial schema."""

from __future__ import annotations

import sqlite3

import pytest

from recurrence_engine.adapters.sqlite.migrations import Migration, MigrationRunner
from recurrence_engine.adapters.sqlite.migrations.m001_initial_schema import (
    ALL_MIGRATIONS,
    initial_migration,
)


def _table_names(conn: sqlite3.Connection) -> set[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {row[0] for row in rows}


def _index_names(conn: sqlite3.Connection) -> set[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'").fetchall()
    return {row[0] for row in rows}


class _BrokenMigration(Migration):
    @property
    def version(self) -> int:
        return 2

    @property
    def description(self) -> str:
        return "Broken"

    def up(self, connection: sqlite3.Connection) -> None:
        connection.execute("CREATE TABLE half_done (id TEXT)")
        connection.execute("THIS IS NOT SQL")


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    yield connection
    connection.close()


def test_fresh_database_is_version_zero(conn):
    assert MigrationRunner(conn).get_current_version() == 0


def test_initial_migration_creates_tables_and_indexes(conn):
    runner = MigrationRunner(conn)

    applied = runner.run_migrations(ALL_MIGRATIONS)

    assert applied == 1
    assert runner.get_current_version() == 1
    assert {"users", "recurrence_patterns", "work_item_series", "change_logs"} <= _table_names(
        conn
    )
    assert {
        "idx_patterns_user_fingerprint",
        "idx_series_user_habit",
        "idx_series_user_task",
    } <= _index_names(conn)


def test_run_migrations_is_idempotent(conn):
    runner = MigrationRunner(conn)
    runner.run_migrations(ALL_MIGRATIONS)

    assert runner.run_migrations(ALL_MIGRATIONS) == 0
    assert runner.get_current_version() == 1


def test_rerunning_applied_migration_is_rejected(conn):
    runner = MigrationRunner(conn)
    runner.run_migration(initial_migration)

    with pytest.raises(ValueError, match="not greater than"):
        runner.run_migration(initial_migration)


def test_failed_migration_is_not_recorded(conn):
    runner = MigrationRunner(conn)
    runner.run_migrations(ALL_MIGRATIONS)

    with pytest.raises(RuntimeError, match="Migration 2 failed"):
        runner.run_migration(_BrokenMigration())

    assert runner.get_current_version() == 1
