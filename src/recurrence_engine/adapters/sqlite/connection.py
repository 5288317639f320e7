"""Database connection management for the local SQLite store.

This module provides a singleton connection manager, ensuring one connection
per process, WAL mode, foreign key enforcement and an up-to-date schema.
"""

from __future__ import annotations

import atexit
import os
import sqlite3
import time
from pathlib import Path

from platformdirs import user_data_dir

from recurrence_engine.adapters.sqlite.migrations.m001_initial_schema import (
    ALL_MIGRATIONS,
)
from recurrence_engine.adapters.sqlite.migrations.runner import MigrationRunner
from recurrence_engine.utils.logger import get_logger


def configure_connection(connection: sqlite3.Connection) -> sqlite3.Connection:
    """Apply pragmas and pending migrations to a fresh connection.

    Args:
        connection: Newly opened sqlite3 connection (file or ``:memory:``)

    Returns:
        The same connection, ready for repository use
    """
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")
    connection.execute("PRAGMA journal_mode = WAL")
    MigrationRunner(connection).run_migrations(ALL_MIGRATIONS)
    return connection


class DatabaseConnection:
    """Singleton connection manager for the local SQLite store.

    Provides:
    - Single connection per process (connection reuse)
    - WAL mode and a busy timeout for concurrent writers
    - Foreign key constraint enforcement
    - Owner-only file permissions on new databases
    - Graceful cleanup on exit
    """

    _instance: DatabaseConnection | None = None
    _connection: sqlite3.Connection | None = None
    _db_path: Path | None = None

    def __new__(cls) -> DatabaseConnection:
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Get or create the database connection.

        Args:
            db_path: Path to database file. If None, uses default location.

        Returns:
            Configured sqlite3.Connection
        """
        instance = cls()

        if db_path is None:
            db_path = Path(user_data_dir("recurrence_engine")) / "recurrence.db"
        else:
            db_path = Path(db_path)

        if instance._connection is not None and instance._db_path == db_path:
            return instance._connection

        if instance._connection is not None:
            instance._connection.close()

        db_path.parent.mkdir(parents=True, exist_ok=True)
        is_new_database = not db_path.exists()

        connection = sqlite3.connect(
            str(db_path),
            check_same_thread=False,
            timeout=30.0,  # Wait up to 30s for locks
        )

        if is_new_database:
            os.chmod(db_path, 0o600)

        configure_connection(connection)
        get_logger().debug("opened database %s", db_path)

        instance._connection = connection
        instance._db_path = db_path

        atexit.register(cls.close_connection)

        return connection

    @classmethod
    def close_connection(cls) -> None:
        """Commit and close the connection if one is open."""
        instance = cls()
        if instance._connection is None:
            return
        try:
            instance._connection.commit()
            instance._connection.close()
        except sqlite3.Error as e:
            get_logger().warning("error closing database: %s", e)
        finally:
            instance._connection = None
            instance._db_path = None

    @classmethod
    def execute_with_retry(
        cls,
        connection: sqlite3.Connection,
        sql: str,
        params: tuple | dict | None = None,
        max_retries: int = 3,
    ) -> sqlite3.Cursor:
        """Execute SQL, retrying while the database is locked.

        Raises:
            sqlite3.OperationalError: If the database remains locked after retries
        """
        for attempt in range(max_retries):
            try:
                if params:
                    return connection.execute(sql, params)
                return connection.execute(sql)
            except sqlite3.OperationalError as e:
                if "database is locked" in str(e) and attempt < max_retries - 1:
                    # Exponential backoff: 0.1s, 0.2s, 0.4s
                    time.sleep(0.1 * (2**attempt))
                    continue
                raise

        raise sqlite3.OperationalError("Max retries exceeded")


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Helper function to get the shared database connection."""
    return DatabaseConnection.get_connection(db_path)
