"""Recurrence service - the item-management entry point.

Turns a recurrence edit on a task or habit into a deduplicated pattern, a
re-bound series and an audit entry.
"""

from __future__ import annotations

from datetime import date

from recurrence_engine.models import (
    RecurrenceBinding,
    RecurrencePatternInput,
    RecurrenceState,
    SchedulingMetadata,
)
from recurrence_engine.models.core import EditScope, SourceType
from recurrence_engine.models.recurrence import LegacyFrequency
from recurrence_engine.models.storage_strategy import StorageStrategyContext
from recurrence_engine.services.change_log_service import ChangeLogService
from recurrence_engine.services.pattern_service import PatternService
from recurrence_engine.services.series_service import SeriesService
from recurrence_engine.utils.fingerprint import recurrence_fingerprint
from recurrence_engine.utils.recurrence import (
    decode_recurrence_rule,
    encode_recurrence_state,
    recurrence_from_legacy_frequency,
    recurrence_state_to_legacy_frequency,
)
from recurrence_engine.utils.recurrence_presets import describe_recurrence
from recurrence_engine.utils.time_utils import parse_iso_date


class RecurrenceService:
    """Orchestrates pattern, series and change log services."""

    def __init__(
        self,
        pattern_service: PatternService,
        series_service: SeriesService,
        change_log_service: ChangeLogService,
        *,
        default_timezone: str | None = None,
    ):
        """Initialize the recurrence service.

        Args:
            pattern_service: Deduplicating pattern store
            series_service: Series lifecycle manager
            change_log_service: Audit recorder
            default_timezone: Timezone stored when a schedule omits one
        """
        self.patterns = pattern_service
        self.series = series_service
        self.change_logs = change_log_service
        self.default_timezone = default_timezone

    @classmethod
    def from_storage(
        cls,
        storage: StorageStrategyContext,
        *,
        default_timezone: str | None = None,
        max_attempts: int = 3,
    ) -> RecurrenceService:
        """Build the service stack on top of a storage strategy."""
        return cls(
            PatternService(storage.pattern_repository, max_attempts=max_attempts),
            SeriesService(storage.series_repository, max_attempts=max_attempts),
            ChangeLogService(storage.change_log_repository),
            default_timezone=default_timezone,
        )

    def build_pattern_input(
        self,
        recurrence_rule: str,
        state: RecurrenceState,
        schedule: SchedulingMetadata | None = None,
    ) -> RecurrencePatternInput:
        """Assemble the pattern specification for a rule and its schedule.

        The legacy frequency defaults to the projection of *state*. An
        ``on_date`` end is carried as the sidecar ``end_date``; the rule
        itself stays open-ended.
        """
        schedule = schedule or SchedulingMetadata()
        end_date = schedule.end_date
        if end_date is None and state.end_condition == "on_date":
            end_date = parse_iso_date(state.end_date)

        return RecurrencePatternInput(
            recurrence_rule=recurrence_rule,
            recovery_policy=schedule.recovery_policy,
            frequency=schedule.frequency or recurrence_state_to_legacy_frequency(state),
            repeats_per_period=schedule.repeats_per_period,
            start_date=schedule.start_date,
            end_date=end_date,
            preferred_window_start=schedule.preferred_window_start,
            preferred_window_end=schedule.preferred_window_end,
            preferred_days=schedule.preferred_days,
            timezone=schedule.timezone or self.default_timezone,
        )

    async def apply_recurrence(
        self,
        owner_id: str,
        source_type: SourceType,
        source_id: str,
        *,
        state: RecurrenceState | None = None,
        recurrence_rule: str | None = None,
        legacy_frequency: LegacyFrequency | None = None,
        schedule: SchedulingMetadata | None = None,
        is_active: bool = True,
        action: str = "recurrence_updated",
        scope: EditScope | None = "series",
        changed_fields: list[str] | None = None,
        reference_date: date | None = None,
    ) -> RecurrenceBinding:
        """Bind a source item to the pattern for its recurrence.

        The rule comes from *state* when given, else *recurrence_rule*, else
        the canonical rule for *legacy_frequency*.

        Args:
            owner_id: Owning user ID
            source_type: "task" or "habit"
            source_id: ID of the task or habit
            state: Edited recurrence state
            recurrence_rule: Rule string, used when no state is given
            legacy_frequency: Legacy enum, used when neither is given
            schedule: Scheduling metadata stored with the pattern
            is_active: Whether the series should produce occurrences
            action: Change log verb
            scope: Change log edit scope
            changed_fields: Field names recorded in the change log metadata
            reference_date: Day used to seed weekday defaults when decoding

        Returns:
            RecurrenceBinding with pattern and series IDs
        """
        if state is not None:
            rule = encode_recurrence_state(state)
        else:
            rule = recurrence_rule or recurrence_from_legacy_frequency(legacy_frequency)
            state = decode_recurrence_rule(rule, reference_date=reference_date)

        pattern_input = self.build_pattern_input(rule, state, schedule)
        pattern_id = await self.patterns.ensure_pattern(owner_id, pattern_input)
        series_id = await self.series.ensure_series(
            owner_id, source_type, source_id, pattern_id, is_active
        )

        metadata = {"changedFields": sorted(changed_fields)} if changed_fields else None
        entry = await self.change_logs.record(
            owner_id,
            source_type,
            source_id,
            action,
            scope=scope,
            series_id=series_id,
            metadata=metadata,
        )

        return RecurrenceBinding(
            recurrence_pattern_id=pattern_id,
            series_id=series_id,
            recurrence_rule=rule,
            fingerprint=recurrence_fingerprint(pattern_input),
            description=describe_recurrence(state),
            change_log_id=entry.id,
        )
