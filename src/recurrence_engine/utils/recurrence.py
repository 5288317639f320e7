"""Recurrence rule codec.

Converts between the editable ``RecurrenceState`` and the canonical rule
string stored on recurrence patterns, e.g.
``RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO,WE,FR``.

Decoding is lenient: unknown keys are ignored, bad intervals collapse to 1 and
unknown weekday tokens are dropped. ``parse_supported_rule`` is the strict
variant for consumers that must not guess the frequency.
"""

from __future__ import annotations

import re
from datetime import date

from recurrence_engine.models.exceptions import UnsupportedRecurrenceError
from recurrence_engine.models.recurrence import (
    LegacyFrequency,
    ParsedRule,
    RecurrenceState,
    RecurrenceUnit,
)

RULE_PREFIX = "RRULE:"

WEEKDAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]
WEEKDAY_SHORT = ["Su", "Mo", "Tu", "We", "Th", "Fr", "Sa"]

# Indexed by weekday number, 0 = Sunday.
BYDAY_TOKENS = ["SU", "MO", "TU", "WE", "TH", "FR", "SA"]
_TOKEN_TO_WEEKDAY = {token: index for index, token in enumerate(BYDAY_TOKENS)}

# Picker order: Monday first, Sunday last.
DAY_OPTIONS: list[dict[str, int | str]] = [
    {"value": 1, "short": "Mo", "label": "Monday"},
    {"value": 2, "short": "Tu", "label": "Tuesday"},
    {"value": 3, "short": "We", "label": "Wednesday"},
    {"value": 4, "short": "Th", "label": "Thursday"},
    {"value": 5, "short": "Fr", "label": "Friday"},
    {"value": 6, "short": "Sa", "label": "Saturday"},
    {"value": 0, "short": "Su", "label": "Sunday"},
]

WEEKDAY_DAYS = [1, 2, 3, 4, 5]

_UNIT_TO_FREQ: dict[str, str] = {"day": "DAILY", "week": "WEEKLY", "month": "MONTHLY"}
_SUPPORTED_FREQUENCIES = ("DAILY", "WEEKLY", "MONTHLY")
_PREFIX_RE = re.compile(r"^RRULE:", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

LEGACY_FREQUENCY_RULES: dict[str, str] = {
    "daily": "RRULE:FREQ=DAILY;INTERVAL=1",
    "weekly": "RRULE:FREQ=WEEKLY;INTERVAL=1",
    "biweekly": "RRULE:FREQ=WEEKLY;INTERVAL=2",
    "monthly": "RRULE:FREQ=MONTHLY;INTERVAL=1",
}


def weekday_index(day: date) -> int:
    """Return the weekday number of *day* with Sunday as 0."""
    return (day.weekday() + 1) % 7


def sort_weekdays(days: list[int]) -> list[int]:
    """Sort weekday numbers Monday first, Sunday last."""
    return sorted(days, key=lambda d: 7 if d == 0 else d)


def default_recurrence_state(reference_date: date | None = None) -> RecurrenceState:
    """Starting state for a new recurring item: weekly on the reference weekday.

    Args:
        reference_date: Day whose weekday seeds the selection. Defaults to today.

    Returns:
        RecurrenceState with the ``weekly_on_day`` preset
    """
    ref = reference_date if reference_date is not None else date.today()
    return RecurrenceState(
        preset="weekly_on_day",
        interval=1,
        unit="week",
        by_day=[weekday_index(ref)],
        end_condition="never",
    )


def encode_recurrence_state(state: RecurrenceState) -> str:
    """Serialize a recurrence state to its canonical rule string.

    An ``on_date`` end condition is not encoded; the end date travels as
    scheduling metadata next to the rule.

    Args:
        state: Recurrence state to encode

    Returns:
        Rule string such as ``RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO``
    """
    parts = [f"{RULE_PREFIX}FREQ={_UNIT_TO_FREQ[state.unit]}", f"INTERVAL={state.interval}"]

    if state.unit == "week" and state.by_day:
        tokens = [
            BYDAY_TOKENS[d] if 0 <= d < len(BYDAY_TOKENS) else "MO"
            for d in sort_weekdays(state.by_day)
        ]
        parts.append(f"BYDAY={','.join(tokens)}")

    if state.end_condition == "after_count" and state.end_count and state.end_count > 0:
        parts.append(f"COUNT={state.end_count}")

    return ";".join(parts)


def _split_rule(rule: str) -> dict[str, str]:
    """Split a rule string into upper-cased KEY -> VALUE fields."""
    body = _PREFIX_RE.sub("", rule.strip())
    fields: dict[str, str] = {}
    for chunk in body.split(";"):
        # Anything after a second "=" is dropped.
        key, value = (chunk.split("=") + [""])[:2]
        if not key or not value:
            continue
        fields[key.strip().upper()] = value.strip().upper()
    return fields


def _parse_positive_int(value: str | None, fallback: int) -> int:
    """Parse a leading integer, returning *fallback* unless it is positive."""
    if not value:
        return fallback
    match = _LEADING_INT_RE.match(value)
    if match is None:
        return fallback
    parsed = int(match.group(1))
    return parsed if parsed > 0 else fallback


def _parse_by_day(raw: str | None) -> list[int]:
    if not raw:
        return []
    days = []
    for token in raw.split(","):
        weekday = _TOKEN_TO_WEEKDAY.get(token.strip())
        if weekday is not None:
            days.append(weekday)
    return days


def _freq_to_unit(freq: str) -> RecurrenceUnit:
    if freq == "DAILY":
        return "day"
    if freq == "MONTHLY":
        return "month"
    return "week"


def decode_recurrence_rule(
    rule: str | None,
    legacy_frequency: LegacyFrequency | str | None = None,
    *,
    reference_date: date | None = None,
) -> RecurrenceState:
    """Parse a rule string back into an editable recurrence state.

    Without a rule, the legacy frequency (if any) seeds the state; without
    either, the default weekly state is returned. The preset is always
    re-derived from the decoded fields.

    Args:
        rule: Canonical rule string, optionally prefixed with ``RRULE:``
        legacy_frequency: Legacy frequency enum used when *rule* is empty
        reference_date: Day used to seed weekday selections

    Returns:
        Decoded RecurrenceState
    """
    # Imported here to avoid a circular import with the preset module.
    from recurrence_engine.utils.recurrence_presets import detect_preset

    if not rule:
        if legacy_frequency:
            return legacy_frequency_to_state(legacy_frequency, reference_date)
        return default_recurrence_state(reference_date)

    fields = _split_rule(rule)
    unit = _freq_to_unit(fields.get("FREQ", "WEEKLY"))
    interval = _parse_positive_int(fields.get("INTERVAL"), 1)
    by_day = _parse_by_day(fields.get("BYDAY")) if unit == "week" else []
    count = _parse_positive_int(fields.get("COUNT"), 0)

    return RecurrenceState(
        preset=detect_preset(unit, interval, by_day),
        interval=interval,
        unit=unit,
        by_day=by_day,
        end_condition="after_count" if count > 0 else "never",
        end_count=count if count > 0 else None,
    )


def legacy_frequency_to_state(
    frequency: LegacyFrequency | str, reference_date: date | None = None
) -> RecurrenceState:
    """Map a legacy frequency enum to a starting recurrence state."""
    ref = reference_date if reference_date is not None else date.today()
    if frequency == "daily":
        return RecurrenceState(preset="daily", interval=1, unit="day")
    if frequency == "biweekly":
        return RecurrenceState(
            preset="biweekly", interval=2, unit="week", by_day=[weekday_index(ref)]
        )
    if frequency == "monthly":
        return RecurrenceState(preset="monthly", interval=1, unit="month")
    return default_recurrence_state(ref)


def recurrence_state_to_legacy_frequency(state: RecurrenceState) -> LegacyFrequency:
    """Project a recurrence state onto the legacy frequency enum.

    Lossy: weekdays and intervals above two are dropped.
    """
    if state.unit == "day":
        return "daily"
    if state.unit == "month":
        return "monthly"
    if state.interval >= 2:
        return "biweekly"
    return "weekly"


def recurrence_from_legacy_frequency(frequency: str | None) -> str:
    """Canonical rule string for a legacy frequency; weekly when unknown."""
    return LEGACY_FREQUENCY_RULES.get(frequency or "", LEGACY_FREQUENCY_RULES["weekly"])


def parse_supported_rule(rule: str) -> ParsedRule:
    """Strictly parse a rule string.

    Args:
        rule: Canonical rule string

    Returns:
        ParsedRule with frequency, interval and weekdays

    Raises:
        UnsupportedRecurrenceError: If FREQ is missing or not DAILY, WEEKLY or MONTHLY
    """
    fields = _split_rule(rule)
    frequency = fields.get("FREQ")
    if frequency not in _SUPPORTED_FREQUENCIES:
        raise UnsupportedRecurrenceError(
            "Unsupported recurrence rule frequency. Use DAILY, WEEKLY, or MONTHLY."
        )
    return ParsedRule(
        frequency=frequency,
        interval=_parse_positive_int(fields.get("INTERVAL"), 1),
        by_day=_parse_by_day(fields.get("BYDAY")),
    )
