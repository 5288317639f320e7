"""Content fingerprints for recurrence pattern deduplication."""

from __future__ import annotations

import hashlib
import json
from typing import Any

from recurrence_engine.models.core import RecurrencePatternInput


def normalize_preferred_days(preferred_days: list[int] | None) -> list[int] | None:
    """Sort preferred weekdays ascending; ``None`` stays ``None``."""
    if preferred_days is None:
        return None
    return sorted(preferred_days)


def fingerprint_payload(pattern: RecurrencePatternInput) -> str:
    """Canonical JSON for a pattern specification.

    Key order is fixed and preferred days are sorted so logically identical
    specifications serialize identically.
    """
    payload: dict[str, Any] = {
        "recurrenceRule": pattern.recurrence_rule,
        "recoveryPolicy": pattern.recovery_policy or "skip",
        "frequency": pattern.frequency,
        "repeatsPerPeriod": pattern.repeats_per_period,
        "startDate": pattern.start_date.isoformat() if pattern.start_date else None,
        "endDate": pattern.end_date.isoformat() if pattern.end_date else None,
        "preferredWindowStart": pattern.preferred_window_start,
        "preferredWindowEnd": pattern.preferred_window_end,
        "preferredDays": normalize_preferred_days(pattern.preferred_days),
        "timezone": pattern.timezone,
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def recurrence_fingerprint(pattern: RecurrencePatternInput) -> str:
    """SHA-256 hex digest of :func:`fingerprint_payload`."""
    return hashlib.sha256(fingerprint_payload(pattern).encode("utf-8")).hexdigest()
