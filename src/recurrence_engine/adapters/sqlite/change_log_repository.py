"""SQLite implementation of ChangeLogRepository."""

from __future__ import annotations

import sqlite3
from datetime import datetime

from recurrence_engine.adapters.sqlite.connection import DatabaseConnection, get_connection
from recurrence_engine.adapters.sqlite.user_manager import ensure_user
from recurrence_engine.adapters.sqlite.utils import dump_json, generate_uuid, to_iso
from recurrence_engine.models import ChangeLogActor, ChangeLogCreate, ChangeLogEntry
from recurrence_engine.repositories import ChangeLogRepository


class SqliteChangeLogRepository(ChangeLogRepository):
    """Append-only SQLite change log."""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    async def append(
        self, owner_id: str, entry_data: ChangeLogCreate, timestamp: datetime
    ) -> ChangeLogEntry:
        """Append an entry; ``created_at`` equals *timestamp*."""
        entry = ChangeLogEntry(
            id=generate_uuid(),
            user_id=owner_id,
            entity_type=entry_data.entity_type,
            entity_id=entry_data.entity_id,
            action=entry_data.action,
            scope=entry_data.scope,
            event_id=entry_data.event_id,
            series_id=entry_data.series_id,
            actor=ChangeLogActor(type="user", id=owner_id),
            metadata=entry_data.metadata,
            timestamp=timestamp,
            created_at=timestamp,
        )

        ensure_user(self.connection, owner_id)
        DatabaseConnection.execute_with_retry(
            self.connection,
            """INSERT INTO change_logs (
                   id, user_id, entity_type, entity_id, action, scope, event_id,
                   series_id, actor_type, actor_id, metadata, timestamp, created_at
               ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                entry.id,
                entry.user_id,
                entry.entity_type,
                entry.entity_id,
                entry.action,
                entry.scope,
                entry.event_id,
                entry.series_id,
                entry.actor.type,
                entry.actor.id,
                dump_json(entry.metadata),
                to_iso(entry.timestamp),
                to_iso(entry.created_at),
            ),
        )
        self.connection.commit()

        return entry
