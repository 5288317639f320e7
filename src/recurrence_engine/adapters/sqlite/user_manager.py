"""Local owner profile management.

The CLI runs against a single local owner. Library callers pass their own
owner IDs; repositories seed a profile row with :func:`ensure_user` on first
write.
"""

from __future__ import annotations

import sqlite3
import uuid
from datetime import UTC, datetime

import tzlocal


def get_system_timezone() -> str:
    """Detect system timezone.

    Returns:
        Timezone string (e.g., "America/New_York")
    """
    tz = tzlocal.get_localzone()
    return str(tz.key) if hasattr(tz, "key") else str(tz)


def ensure_user(
    connection: sqlite3.Connection,
    user_id: str,
    *,
    name: str | None = None,
    timezone: str | None = None,
) -> str:
    """Insert an owner profile if it does not exist yet.

    Args:
        connection: Database connection
        user_id: Owner ID to ensure
        name: Optional display name
        timezone: Optional timezone. If None, auto-detects system timezone.

    Returns:
        The owner ID
    """
    cursor = connection.execute("SELECT 1 FROM users WHERE id = ?", (user_id,))
    if cursor.fetchone():
        return user_id

    if timezone is None:
        timezone = get_system_timezone()

    now = datetime.now(UTC).isoformat()
    connection.execute(
        """
        INSERT OR IGNORE INTO users (id, name, timezone, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (user_id, name, timezone, now, now),
    )
    connection.commit()
    return user_id


def get_or_create_local_user(connection: sqlite3.Connection) -> str:
    """Get the existing local owner or create one.

    Args:
        connection: Database connection

    Returns:
        User ID (UUID string)
    """
    cursor = connection.execute("SELECT id FROM users ORDER BY created_at LIMIT 1")
    row = cursor.fetchone()

    if row:
        return row[0]

    return ensure_user(connection, str(uuid.uuid4()), name="Local User")
