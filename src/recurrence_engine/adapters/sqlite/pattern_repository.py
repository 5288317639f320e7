"""SQLite implementation of RecurrencePatternRepository."""

from __future__ import annotations

import sqlite3
from datetime import datetime

from recurrence_engine.adapters.sqlite.connection import DatabaseConnection, get_connection
from recurrence_engine.adapters.sqlite.user_manager import ensure_user
from recurrence_engine.adapters.sqlite.utils import (
    dump_json,
    generate_uuid,
    is_unique_violation,
    load_json,
    row_to_dict,
    to_iso,
)
from recurrence_engine.models import RecurrencePattern, RecurrencePatternInput
from recurrence_engine.models.exceptions import DuplicateRecordError, RecordNotFoundError
from recurrence_engine.repositories import RecurrencePatternRepository
from recurrence_engine.utils.fingerprint import normalize_preferred_days


class SqliteRecurrencePatternRepository(RecurrencePatternRepository):
    """SQLite implementation of recurrence pattern repository."""

    def __init__(self, db_path: str | None = None):
        """Initialize SQLite pattern repository.

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

    def _row_to_pattern(self, row: sqlite3.Row) -> RecurrencePattern:
        data = row_to_dict(row)
        data["preferred_days"] = load_json(data["preferred_days"])
        return RecurrencePattern(**data)

    async def get(self, owner_id: str, pattern_id: str) -> RecurrencePattern:
        """Get a specific pattern by ID."""
        cursor = self.connection.execute(
            "SELECT * FROM recurrence_patterns WHERE id = ? AND user_id = ?",
            (pattern_id, owner_id),
        )
        row = cursor.fetchone()

        if not row:
            raise RecordNotFoundError(f"Recurrence pattern not found: {pattern_id}")

        return self._row_to_pattern(row)

    async def get_by_fingerprint(
        self, owner_id: str, fingerprint: str
    ) -> RecurrencePattern | None:
        """Find the owner's pattern with this fingerprint."""
        cursor = self.connection.execute(
            "SELECT * FROM recurrence_patterns WHERE user_id = ? AND fingerprint = ?",
            (owner_id, fingerprint),
        )
        row = cursor.fetchone()
        return self._row_to_pattern(row) if row else None

    async def create(
        self,
        owner_id: str,
        fingerprint: str,
        pattern_data: RecurrencePatternInput,
        now: datetime,
    ) -> RecurrencePattern:
        """Insert a new pattern row; preferred days are stored sorted."""
        pattern_id = generate_uuid()
        timestamp = to_iso(now)
        ensure_user(self.connection, owner_id)

        try:
            DatabaseConnection.execute_with_retry(
                self.connection,
                """INSERT INTO recurrence_patterns (
                       id, user_id, fingerprint, recurrence_rule, frequency,
                       repeats_per_period, recovery_policy, start_date, end_date,
                       preferred_window_start, preferred_window_end, preferred_days,
                       timezone, created_at, updated_at
                   ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    pattern_id,
                    owner_id,
                    fingerprint,
                    pattern_data.recurrence_rule,
                    pattern_data.frequency,
                    pattern_data.repeats_per_period,
                    pattern_data.recovery_policy or "skip",
                    to_iso(pattern_data.start_date),
                    to_iso(pattern_data.end_date),
                    pattern_data.preferred_window_start,
                    pattern_data.preferred_window_end,
                    dump_json(normalize_preferred_days(pattern_data.preferred_days)),
                    pattern_data.timezone,
                    timestamp,
                    timestamp,
                ),
            )
            self.connection.commit()
        except sqlite3.IntegrityError as e:
            self.connection.rollback()
            if is_unique_violation(e):
                raise DuplicateRecordError(
                    f"Recurrence pattern already exists for fingerprint {fingerprint}"
                ) from e
            raise

        return await self.get(owner_id, pattern_id)

    async def touch(self, owner_id: str, pattern_id: str, now: datetime) -> None:
        """Bump ``updated_at`` on an existing pattern."""
        cursor = DatabaseConnection.execute_with_retry(
            self.connection,
            "UPDATE recurrence_patterns SET updated_at = ? WHERE id = ? AND user_id = ?",
            (to_iso(now), pattern_id, owner_id),
        )
        self.connection.commit()

        if cursor.rowcount == 0:
            raise RecordNotFoundError(f"Recurrence pattern not found: {pattern_id}")
