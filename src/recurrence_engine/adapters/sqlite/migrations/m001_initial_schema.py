"""Initial database schema migration.

Creates the users, recurrence_patterns, work_item_series and change_logs
tables together with their unique and lookup indexes.
"""

import sqlite3

from recurrence_engine.adapters.sqlite import schema

from .runner import Migration


class InitialSchemaMigration(Migration):
    """Migration 001: Create initial database schema."""

    @property
    def version(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "Initial recurrence schema"

    def up(self, connection: sqlite3.Connection) -> None:
        """Create all initial tables and indexes."""
        for create_statement in schema.ALL_TABLES:
            connection.execute(create_statement)

        for index_sql in schema.ALL_INDEXES:
            connection.execute(index_sql)


initial_migration = InitialSchemaMigration()

ALL_MIGRATIONS = [initial_migration]
