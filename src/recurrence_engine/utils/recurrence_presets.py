"""Preset detection and human-readable recurrence descriptions."""

from __future__ import annotations

from datetime import date

from recurrence_engine.models.recurrence import (
    PresetOption,
    RecurrencePreset,
    RecurrenceState,
    RecurrenceUnit,
)
from recurrence_engine.utils.recurrence import (
    WEEKDAY_DAYS,
    WEEKDAY_NAMES,
    WEEKDAY_SHORT,
    default_recurrence_state,
    sort_weekdays,
    weekday_index,
)


def _same_days(left: list[int], right: list[int]) -> bool:
    return len(left) == len(right) and sorted(left) == sorted(right)


def detect_preset(unit: RecurrenceUnit, interval: int, by_day: list[int]) -> RecurrencePreset:
    """Derive the preset that best names a decoded schedule.

    Args:
        unit: Recurrence unit
        interval: Repeat interval
        by_day: Selected weekdays (0 = Sunday)

    Returns:
        Preset name, ``custom`` when nothing simpler fits
    """
    if unit == "day" and interval == 1:
        return "daily"
    if unit == "month" and interval == 1:
        return "monthly"

    if unit == "week":
        if interval == 1 and _same_days(by_day, WEEKDAY_DAYS):
            return "every_weekday"
        if interval == 2:
            return "biweekly"
        if interval == 1 and len(by_day) <= 1:
            return "weekly_on_day"

    return "custom"


def describe_recurrence(state: RecurrenceState) -> str:
    """Render a short label such as "Weekly on Monday" or "Every 3 days ×5"."""
    if state.unit == "day" and state.interval == 1:
        return "Daily"
    if state.unit == "month" and state.interval == 1:
        return "Monthly"

    if state.unit == "week":
        days = sort_weekdays(state.by_day)

        if state.interval == 1 and _same_days(days, WEEKDAY_DAYS):
            return "Every weekday"

        if state.interval == 1:
            prefix = "Weekly"
        elif state.interval == 2:
            prefix = "Biweekly"
        else:
            prefix = f"Every {state.interval} weeks"

        if len(days) == 1:
            return f"{prefix} on {_day_name(days[0], WEEKDAY_NAMES)}"
        if days:
            return f"{prefix} on {', '.join(_day_name(d, WEEKDAY_SHORT) for d in days)}"
        return prefix

    if state.interval == 1:
        unit_label = state.unit
    else:
        plural = "s" if state.interval > 1 else ""
        unit_label = f"{state.interval} {state.unit}{plural}"

    description = f"Every {unit_label}"

    if state.end_condition == "after_count" and state.end_count:
        description += f" ×{state.end_count}"
    elif state.end_condition == "on_date" and state.end_date:
        description += f" until {state.end_date}"

    return description


def _day_name(day: int, names: list[str]) -> str:
    return names[day] if 0 <= day < len(names) else "?"


def build_contextual_presets(reference_date: date) -> list[PresetOption]:
    """Build the five picker presets relative to *reference_date*.

    Args:
        reference_date: Day whose weekday is offered for weekly options

    Returns:
        Daily, weekly-on-day, every-weekday, biweekly and monthly options
    """
    weekday = weekday_index(reference_date)
    day_name = WEEKDAY_NAMES[weekday]

    return [
        PresetOption(
            value="daily",
            label="Daily",
            state=RecurrenceState(preset="daily", interval=1, unit="day"),
        ),
        PresetOption(
            value="weekly_on_day",
            label=f"Weekly on {day_name}",
            state=RecurrenceState(
                preset="weekly_on_day", interval=1, unit="week", by_day=[weekday]
            ),
        ),
        PresetOption(
            value="every_weekday",
            label="Every weekday (Mon–Fri)",
            state=RecurrenceState(
                preset="every_weekday",
                interval=1,
                unit="week",
                by_day=list(WEEKDAY_DAYS),
            ),
        ),
        PresetOption(
            value="biweekly",
            label="Biweekly",
            state=RecurrenceState(
                preset="biweekly", interval=2, unit="week", by_day=[weekday]
            ),
        ),
        PresetOption(
            value="monthly",
            label="Monthly",
            state=RecurrenceState(preset="monthly", interval=1, unit="month"),
        ),
    ]


def apply_preset(preset: RecurrencePreset, reference_date: date) -> RecurrenceState:
    """Return the state for a picker selection.

    ``custom`` opens on the default weekly state so the editor starts from a
    sensible selection.
    """
    for option in build_contextual_presets(reference_date):
        if option.value == preset:
            return option.state
    return default_recurrence_state(reference_date).model_copy(update={"preset": "custom"})
