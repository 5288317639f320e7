"""Recurrence editor models.

These models describe a repeating schedule the way a user edits it. They are
never persisted directly; the canonical rule string is.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

RecurrencePreset = Literal[
    "daily",
    "weekly_on_day",
    "every_weekday",
    "biweekly",
    "monthly",
    "custom",
]
RecurrenceUnit = Literal["day", "week", "month"]
EndCondition = Literal["never", "on_date", "after_count"]
LegacyFrequency = Literal["daily", "weekly", "biweekly", "monthly"]
RuleFrequency = Literal["DAILY", "WEEKLY", "MONTHLY"]


class RecurrenceState(BaseModel):
    """Editable description of a repeating schedule.

    Attributes:
        preset: Display hint derived from the other fields
        interval: Repeat every N units
        unit: Base unit of repetition
        by_day: Weekday numbers 0-6 (0 = Sunday), weekly schedules only
        end_condition: How the recurrence ends
        end_date: ISO date (YYYY-MM-DD) for ``on_date``
        end_count: Number of occurrences for ``after_count``
    """

    preset: RecurrencePreset = "custom"
    interval: int = 1
    unit: RecurrenceUnit = "week"
    by_day: list[int] = Field(default_factory=list)
    end_condition: EndCondition = "never"
    end_date: str | None = None
    end_count: int | None = None

    @model_validator(mode="after")
    def _drop_days_outside_weeks(self) -> RecurrenceState:
        if self.unit != "week" and self.by_day:
            self.by_day = []
        return self


class PresetOption(BaseModel):
    """A picker entry pairing a preset with a ready-made state."""

    value: RecurrencePreset
    label: str
    state: RecurrenceState


class ParsedRule(BaseModel):
    """Strictly parsed rule as consumed by schedulers."""

    frequency: RuleFrequency
    interval: int = 1
    by_day: list[int] = Field(default_factory=list)
