"""Tests for RecurrenceService against the SQLite repositories."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest

from recurrence_engine.models import RecurrenceState, SchedulingMetadata
from recurrence_engine.services import (
    ChangeLogService,
    PatternService,
    RecurrenceService,
    SeriesService,
)
from recurrence_engine.utils.fingerprint import recurrence_fingerprint

OWNER_ID = "user-owner-001"
MONDAY = date(2025, 1, 6)


@pytest.fixture
def service(pattern_repo, series_repo, change_log_repo, clock):
    return RecurrenceService(
        PatternService(pattern_repo, clock=clock),
        SeriesService(series_repo, clock=clock),
        ChangeLogService(change_log_repo, clock=clock),
        default_timezone="Europe/Berlin",
    )


def _count(db, table: str) -> int:
    return db.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


class TestBuildPatternInput:
    def test_defaults_come_from_state_and_service(self, service):
        state = RecurrenceState(unit="week", interval=2, by_day=[1])

        pattern = service.build_pattern_input("RRULE:FREQ=WEEKLY;INTERVAL=2;BYDAY=MO", state)

        assert pattern.frequency == "biweekly"
        assert pattern.timezone == "Europe/Berlin"
        assert pattern.end_date is None

    def test_on_date_end_becomes_sidecar_end_date(self, service):
        state = RecurrenceState(
            unit="day", interval=1, end_condition="on_date", end_date="2025-03-31"
        )

        pattern = service.build_pattern_input("RRULE:FREQ=DAILY;INTERVAL=1", state)

        assert pattern.recurrence_rule == "RRULE:FREQ=DAILY;INTERVAL=1"
        assert pattern.end_date == date(2025, 3, 31)

    def test_schedule_values_win(self, service):
        state = RecurrenceState(
            unit="day", interval=1, end_condition="on_date", end_date="2025-03-31"
        )
        schedule = SchedulingMetadata(
            frequency="weekly",
            end_date=date(2025, 12, 31),
            timezone="Asia/Tokyo",
            preferred_days=[5, 1],
            recovery_policy="recover",
        )

        pattern = service.build_pattern_input("RRULE:FREQ=DAILY;INTERVAL=1", state, schedule)

        assert pattern.frequency == "weekly"
        assert pattern.end_date == date(2025, 12, 31)
        assert pattern.timezone == "Asia/Tokyo"
        assert pattern.preferred_days == [5, 1]
        assert pattern.recovery_policy == "recover"


class TestApplyRecurrence:
    @pytest.mark.asyncio
    async def test_state_is_encoded_stored_and_logged(self, service, pattern_repo, series_repo, db):
        state = RecurrenceState(preset="weekly_on_day", unit="week", interval=1, by_day=[1])

        binding = await service.apply_recurrence(
            OWNER_ID,
            "habit",
            "habit-1",
            state=state,
            changed_fields=["recurrenceRule", "frequency"],
        )

        assert binding.recurrence_rule == "RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO"
        assert binding.description == "Weekly on Monday"

        pattern = await pattern_repo.get(OWNER_ID, binding.recurrence_pattern_id)
        assert pattern.recurrence_rule == binding.recurrence_rule
        assert pattern.frequency == "weekly"
        assert pattern.timezone == "Europe/Berlin"
        assert pattern.fingerprint == binding.fingerprint

        series = await series_repo.get(OWNER_ID, binding.series_id)
        assert series.source_habit_id == "habit-1"
        assert series.recurrence_pattern_id == binding.recurrence_pattern_id

        row = db.execute(
            "SELECT * FROM change_logs WHERE id = ?", (binding.change_log_id,)
        ).fetchone()
        assert row["entity_type"] == "habit"
        assert row["entity_id"] == "habit-1"
        assert row["action"] == "recurrence_updated"
        assert row["scope"] == "series"
        assert row["series_id"] == binding.series_id
        assert row["metadata"] == '{"changedFields":["frequency","recurrenceRule"]}'

    @pytest.mark.asyncio
    async def test_owner_without_profile_row(self, service, db, mocker):
        mocker.patch(
            "recurrence_engine.adapters.sqlite.user_manager.get_system_timezone",
            return_value="UTC",
        )

        binding = await service.apply_recurrence(
            "owner-from-auth", "habit", "habit-1", recurrence_rule="RRULE:FREQ=DAILY;INTERVAL=1"
        )

        assert binding.series_id
        assert binding.change_log_id
        assert _count(db, "users") == 3

    @pytest.mark.asyncio
    async def test_reapplying_reuses_pattern_and_series(self, service, db):
        rule = "RRULE:FREQ=DAILY;INTERVAL=1"

        first = await service.apply_recurrence(OWNER_ID, "task", "task-1", recurrence_rule=rule)
        second = await service.apply_recurrence(OWNER_ID, "task", "task-1", recurrence_rule=rule)

        assert first.recurrence_pattern_id == second.recurrence_pattern_id
        assert first.series_id == second.series_id
        assert _count(db, "recurrence_patterns") == 1
        assert _count(db, "work_item_series") == 1
        assert _count(db, "change_logs") == 2

    @pytest.mark.asyncio
    async def test_items_with_same_recurrence_share_a_pattern(self, service, db):
        rule = "RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO,WE,FR"

        first = await service.apply_recurrence(OWNER_ID, "habit", "habit-1", recurrence_rule=rule)
        second = await service.apply_recurrence(OWNER_ID, "habit", "habit-2", recurrence_rule=rule)

        assert first.recurrence_pattern_id == second.recurrence_pattern_id
        assert first.series_id != second.series_id
        assert _count(db, "recurrence_patterns") == 1

    @pytest.mark.asyncio
    async def test_changing_rule_rebinds_existing_series(self, service, series_repo):
        first = await service.apply_recurrence(
            OWNER_ID, "habit", "habit-1", recurrence_rule="RRULE:FREQ=DAILY;INTERVAL=1"
        )
        second = await service.apply_recurrence(
            OWNER_ID,
            "habit",
            "habit-1",
            recurrence_rule="RRULE:FREQ=MONTHLY;INTERVAL=1",
            is_active=False,
        )

        assert second.series_id == first.series_id
        assert second.recurrence_pattern_id != first.recurrence_pattern_id
        series = await series_repo.get(OWNER_ID, first.series_id)
        assert series.recurrence_pattern_id == second.recurrence_pattern_id
        assert series.is_active is False

    @pytest.mark.asyncio
    async def test_legacy_frequency_fallback(self, service, pattern_repo):
        binding = await service.apply_recurrence(
            OWNER_ID, "habit", "habit-1", legacy_frequency="biweekly"
        )

        assert binding.recurrence_rule == "RRULE:FREQ=WEEKLY;INTERVAL=2"
        pattern = await pattern_repo.get(OWNER_ID, binding.recurrence_pattern_id)
        assert pattern.frequency == "biweekly"

    @pytest.mark.asyncio
    async def test_rule_string_is_stored_as_given(self, service, pattern_repo):
        rule = "RRULE:FREQ=WEEKLY;BYDAY=TU"

        binding = await service.apply_recurrence(
            OWNER_ID, "task", "task-1", recurrence_rule=rule, reference_date=MONDAY
        )

        pattern = await pattern_repo.get(OWNER_ID, binding.recurrence_pattern_id)
        assert pattern.recurrence_rule == rule
        assert binding.description == "Weekly on Tuesday"

    @pytest.mark.asyncio
    async def test_fingerprint_covers_schedule(self, service):
        schedule = SchedulingMetadata(preferred_days=[3, 1], timezone="UTC")
        binding = await service.apply_recurrence(
            OWNER_ID,
            "habit",
            "habit-1",
            recurrence_rule="RRULE:FREQ=DAILY;INTERVAL=1",
            schedule=schedule,
        )

        expected = recurrence_fingerprint(
            service.build_pattern_input(
                "RRULE:FREQ=DAILY;INTERVAL=1",
                RecurrenceState(unit="day", interval=1),
                schedule,
            )
        )
        assert binding.fingerprint == expected

    @pytest.mark.asyncio
    async def test_no_changed_fields_means_no_metadata(self, service, db):
        binding = await service.apply_recurrence(
            OWNER_ID, "task", "task-1", recurrence_rule="RRULE:FREQ=DAILY;INTERVAL=1"
        )

        row = db.execute(
            "SELECT metadata FROM change_logs WHERE id = ?", (binding.change_log_id,)
        ).fetchone()
        assert row["metadata"] is None


def test_from_storage_wires_repositories():
    storage = MagicMock()

    service = RecurrenceService.from_storage(
        storage, default_timezone="UTC", max_attempts=5
    )

    assert service.patterns.repository is storage.pattern_repository
    assert service.patterns.max_attempts == 5
    assert service.series.repository is storage.series_repository
    assert service.series.max_attempts == 5
    assert service.change_logs.repository is storage.change_log_repository
    assert service.default_timezone == "UTC"
