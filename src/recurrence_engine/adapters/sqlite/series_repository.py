"""SQLite implementation of WorkItemSeriesRepository."""

from __future__ import annotations

import sqlite3
from datetime import datetime

from recurrence_engine.adapters.sqlite.connection import DatabaseConnection, get_connection
from recurrence_engine.adapters.sqlite.user_manager import ensure_user
from recurrence_engine.adapters.sqlite.utils import (
    generate_uuid,
    is_unique_violation,
    row_to_dict,
    to_iso,
)
from recurrence_engine.models import WorkItemSeries, WorkItemSeriesCreate
from recurrence_engine.models.core import SourceType
from recurrence_engine.models.exceptions import DuplicateRecordError, RecordNotFoundError
from recurrence_engine.repositories import WorkItemSeriesRepository

_SOURCE_COLUMNS: dict[str, str] = {
    "task": "source_task_id",
    "habit": "source_habit_id",
}


class SqliteWorkItemSeriesRepository(WorkItemSeriesRepository):
    """SQLite implementation of work item series repository."""

    def __init__(self, db_path: str | None = None):
        """Initialize SQLite series repository.

        Args:
            db_path: Optional database file path. If None, uses default location.
        """
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    def _row_to_series(self, row: sqlite3.Row) -> WorkItemSeries:
        data = row_to_dict(row)
        data["is_active"] = bool(data["is_active"])
        return WorkItemSeries(**data)

    def _require_owned_pattern(self, owner_id: str, pattern_id: str) -> None:
        """Raise unless *pattern_id* belongs to *owner_id*."""
        cursor = self.connection.execute(
            "SELECT 1 FROM recurrence_patterns WHERE id = ? AND user_id = ?",
            (pattern_id, owner_id),
        )
        if not cursor.fetchone():
            raise RecordNotFoundError(f"Recurrence pattern not found: {pattern_id}")

    async def get(self, owner_id: str, series_id: str) -> WorkItemSeries:
        """Get a specific series by ID."""
        cursor = self.connection.execute(
            "SELECT * FROM work_item_series WHERE id = ? AND user_id = ?",
            (series_id, owner_id),
        )
        row = cursor.fetchone()

        if not row:
            raise RecordNotFoundError(f"Work item series not found: {series_id}")

        return self._row_to_series(row)

    async def get_by_source(
        self, owner_id: str, source_type: SourceType, source_id: str
    ) -> WorkItemSeries | None:
        """Find the series bound to a task or habit."""
        column = _SOURCE_COLUMNS[source_type]
        cursor = self.connection.execute(
            f"SELECT * FROM work_item_series WHERE user_id = ? AND {column} = ?",
            (owner_id, source_id),
        )
        row = cursor.fetchone()
        return self._row_to_series(row) if row else None

    async def create(
        self, owner_id: str, series_data: WorkItemSeriesCreate, now: datetime
    ) -> WorkItemSeries:
        """Insert a new series; scheduling cursors stay NULL."""
        series_id = generate_uuid()
        timestamp = to_iso(now)
        is_task = series_data.source_type == "task"
        ensure_user(self.connection, owner_id)
        self._require_owned_pattern(owner_id, series_data.recurrence_pattern_id)

        try:
            DatabaseConnection.execute_with_retry(
                self.connection,
                """INSERT INTO work_item_series (
                       id, user_id, source_type, source_task_id, source_habit_id,
                       recurrence_pattern_id, is_active, created_at, updated_at
                   ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    series_id,
                    owner_id,
                    series_data.source_type,
                    series_data.source_id if is_task else None,
                    None if is_task else series_data.source_id,
                    series_data.recurrence_pattern_id,
                    int(series_data.is_active),
                    timestamp,
                    timestamp,
                ),
            )
            self.connection.commit()
        except sqlite3.IntegrityError as e:
            self.connection.rollback()
            if is_unique_violation(e):
                raise DuplicateRecordError(
                    f"Series already exists for {series_data.source_type} "
                    f"{series_data.source_id}"
                ) from e
            raise

        return await self.get(owner_id, series_id)

    async def update_binding(
        self,
        owner_id: str,
        series_id: str,
        recurrence_pattern_id: str,
        is_active: bool,
        now: datetime,
    ) -> None:
        """Patch pattern binding and active flag."""
        self._require_owned_pattern(owner_id, recurrence_pattern_id)
        cursor = DatabaseConnection.execute_with_retry(
            self.connection,
            """UPDATE work_item_series
               SET recurrence_pattern_id = ?, is_active = ?, updated_at = ?
               WHERE id = ? AND user_id = ?""",
            (recurrence_pattern_id, int(is_active), to_iso(now), series_id, owner_id),
        )
        self.connection.commit()

        if cursor.rowcount == 0:
            raise RecordNotFoundError(f"Work item series not found: {series_id}")
