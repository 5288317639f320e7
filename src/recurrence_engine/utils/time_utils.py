"""Time helpers."""

from __future__ import annotations

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def parse_iso_date(value: str | None) -> date | None:
    """Parse ``YYYY-MM-DD``; ``None`` and empty strings give ``None``."""
    if not value:
        return None
    return date.fromisoformat(value)
