"""Persisted recurrence data models."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel

from .recurrence import LegacyFrequency

RecoveryPolicy = Literal["skip", "recover"]
SourceType = Literal["task", "habit"]
ChangeLogEntityType = Literal["task", "habit", "event", "occurrence"]
EditScope = Literal["single", "following", "series"]


class SchedulingMetadata(BaseModel):
    """Scheduling hints stored next to a rule string.

    Attributes:
        recovery_policy: Whether missed occurrences are skipped or recovered
        frequency: Legacy frequency enum for older consumers
        repeats_per_period: Target occurrences per period
        start_date: First day the schedule applies
        end_date: Last day the schedule applies
        preferred_window_start: Preferred start of day window (HH:MM)
        preferred_window_end: Preferred end of day window (HH:MM)
        preferred_days: Preferred weekdays 0-6 (0 = Sunday)
        timezone: IANA timezone name
    """

    recovery_policy: RecoveryPolicy | None = None
    frequency: LegacyFrequency | None = None
    repeats_per_period: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    preferred_window_start: str | None = None
    preferred_window_end: str | None = None
    preferred_days: list[int] | None = None
    timezone: str | None = None


class RecurrencePatternInput(SchedulingMetadata):
    """Full specification of a recurrence pattern, as submitted by a caller."""

    recurrence_rule: str


class RecurrencePattern(BaseModel):
    """Deduplicated recurrence pattern owned by a user.

    Rows are immutable once created apart from ``updated_at``.
    """

    id: str
    user_id: str
    fingerprint: str
    recurrence_rule: str
    frequency: LegacyFrequency | None = None
    repeats_per_period: int | None = None
    recovery_policy: RecoveryPolicy = "skip"
    start_date: date | None = None
    end_date: date | None = None
    preferred_window_start: str | None = None
    preferred_window_end: str | None = None
    preferred_days: list[int] | None = None
    timezone: str | None = None
    created_at: datetime
    updated_at: datetime


class WorkItemSeries(BaseModel):
    """Durable binding between a recurring item and its current pattern.

    The scheduling cursors belong to the occurrence generator; this engine
    only stores them.
    """

    id: str
    user_id: str
    source_type: SourceType
    source_task_id: str | None = None
    source_habit_id: str | None = None
    recurrence_pattern_id: str
    is_active: bool = True
    anchor_start: datetime | None = None
    horizon_cursor: datetime | None = None
    last_occurrence_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @property
    def source_id(self) -> str:
        """Id of the source task or habit."""
        return self.source_task_id or self.source_habit_id or ""


class WorkItemSeriesCreate(BaseModel):
    """Model for creating a new series."""

    source_type: SourceType
    source_id: str
    recurrence_pattern_id: str
    is_active: bool = True


class ChangeLogActor(BaseModel):
    """Who performed a logged change."""

    type: Literal["user"] = "user"
    id: str


class ChangeLogCreate(BaseModel):
    """Model for appending a change log entry."""

    entity_type: ChangeLogEntityType
    entity_id: str
    action: str
    scope: EditScope | None = None
    event_id: str | None = None
    series_id: str | None = None
    metadata: dict[str, Any] | None = None


class ChangeLogEntry(BaseModel):
    """Immutable audit record for a mutation."""

    id: str
    user_id: str
    entity_type: ChangeLogEntityType
    entity_id: str
    action: str
    scope: EditScope | None = None
    event_id: str | None = None
    series_id: str | None = None
    actor: ChangeLogActor
    metadata: dict[str, Any] | None = None
    timestamp: datetime
    created_at: datetime


class RecurrenceBinding(BaseModel):
    """Result of applying a recurrence to a source item."""

    recurrence_pattern_id: str
    series_id: str
    recurrence_rule: str
    fingerprint: str
    description: str
    change_log_id: str | None = None
