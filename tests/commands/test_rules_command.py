"""Unit tests for the rule codec commands."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from recurrence_engine.main import app

runner = CliRunner()


class TestEncode:
    def test_weekly_days(self):
        result = runner.invoke(
            app, ["encode", "--unit", "week", "--day", "fr", "--day", "mo", "--day", "3"]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO,WE,FR"

    def test_count(self):
        result = runner.invoke(app, ["encode", "-u", "day", "-i", "3", "--count", "4"])

        assert result.exit_code == 0
        assert result.output.strip() == "RRULE:FREQ=DAILY;INTERVAL=3;COUNT=4"

    def test_until_is_not_part_of_rule(self):
        result = runner.invoke(app, ["encode", "-u", "month", "--until", "2025-06-30"])

        assert result.exit_code == 0
        assert result.output.strip() == "RRULE:FREQ=MONTHLY;INTERVAL=1"

    def test_count_and_until_conflict(self):
        result = runner.invoke(app, ["encode", "--count", "2", "--until", "2025-06-30"])

        assert result.exit_code == 2
        assert "either --count or --until" in result.output

    @pytest.mark.parametrize(
        "args",
        [
            ["encode", "--day", "xx"],
            ["encode", "--unit", "year"],
            ["encode", "--interval", "0"],
        ],
    )
    def test_invalid_arguments(self, args):
        result = runner.invoke(app, args)
        assert result.exit_code == 2


class TestDecodeAndDescribe:
    def test_decode_json(self):
        result = runner.invoke(app, ["decode", "RRULE:FREQ=DAILY;INTERVAL=2", "-o", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["unit"] == "day"
        assert data["interval"] == 2
        assert data["preset"] == "custom"
        assert data["description"] == "Every 2 days"

    def test_decode_empty_rule_uses_legacy_and_date(self):
        result = runner.invoke(
            app, ["decode", "--legacy", "biweekly", "--date", "2025-01-09", "-o", "json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["interval"] == 2
        assert data["by_day"] == [4]

    def test_describe(self):
        result = runner.invoke(
            app, ["describe", "RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO,TU,WE,TH,FR"]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "Every weekday"

    def test_legacy_projection(self):
        result = runner.invoke(app, ["legacy", "RRULE:FREQ=WEEKLY;INTERVAL=3;BYDAY=MO"])

        assert result.exit_code == 0
        assert result.output.strip() == "biweekly"


class TestPresets:
    def test_presets_for_date(self):
        result = runner.invoke(app, ["presets", "--date", "2025-01-06", "-o", "json"])

        assert result.exit_code == 0
        rows = json.loads(result.output)
        assert [row["label"] for row in rows] == [
            "Daily",
            "Weekly on Monday",
            "Every weekday (Mon–Fri)",
            "Biweekly",
            "Monthly",
        ]
        assert rows[3]["rule"] == "RRULE:FREQ=WEEKLY;INTERVAL=2;BYDAY=MO"


class TestTopLevel:
    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_typo_suggests_command(self):
        result = runner.invoke(app, ["encod"])

        assert result.exit_code == 1
        assert "encode" in result.output
