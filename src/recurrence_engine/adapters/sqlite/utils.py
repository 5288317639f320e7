"""Utility functions for the SQLite adapter."""

from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import date, datetime
from typing import Any


def generate_uuid() -> str:
    """Generate a new UUID as string."""
    return str(uuid.uuid4())


def to_iso(value: datetime | date | None) -> str | None:
    """Serialize a date or datetime for storage."""
    if value is None:
        return None
    return value.isoformat()


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary."""
    if row is None:
        return {}
    return dict(row)


def dump_json(value: Any) -> str | None:
    """Serialize a JSON column value; ``None`` stays SQL NULL."""
    if value is None:
        return None
    return json.dumps(value, separators=(",", ":"))


def load_json(value: str | None) -> Any:
    """Deserialize a JSON column value."""
    if value is None:
        return None
    return json.loads(value)


def is_unique_violation(error: sqlite3.IntegrityError) -> bool:
    """Whether an IntegrityError came from a UNIQUE constraint or index."""
    return "UNIQUE constraint" in str(error)
