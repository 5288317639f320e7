"""Rule codec commands: encode, decode, describe, presets and legacy."""

from datetime import date, datetime

import typer

from recurrence_engine.models import RecurrenceState
from recurrence_engine.utils import exit_codes
from recurrence_engine.utils.recurrence import (
    BYDAY_TOKENS,
    decode_recurrence_rule,
    encode_recurrence_state,
    recurrence_state_to_legacy_frequency,
)
from recurrence_engine.utils.recurrence_presets import (
    build_contextual_presets,
    describe_recurrence,
    detect_preset,
)
from recurrence_engine.utils.ui.console import get_console
from recurrence_engine.utils.ui.formatters import format_output

from .decorators import AppError, command_wrapper

console = get_console()

DATE_FORMATS = ["%Y-%m-%d"]


def parse_day(value: str) -> int:
    """Accept a weekday token (``mo``) or number (``1``, 0 = Sunday)."""
    token = value.strip().upper()
    if token.isdigit() and int(token) <= 6:
        return int(token)
    if token in BYDAY_TOKENS:
        return BYDAY_TOKENS.index(token)
    raise AppError(f"Unknown weekday: {value}", exit_codes.ERROR_INVALID_ARGS)


def reference_date(value: datetime | None) -> date:
    return value.date() if value is not None else date.today()


@command_wrapper
def encode(
    unit: str = typer.Option("week", "--unit", "-u", help="day, week or month"),
    interval: int = typer.Option(1, "--interval", "-i", help="Repeat every N units"),
    days: list[str] = typer.Option(
        [], "--day", "-d", help="Weekday token or number (repeatable)"
    ),
    count: int | None = typer.Option(None, "--count", help="End after N occurrences"),
    until: datetime | None = typer.Option(
        None, "--until", formats=DATE_FORMATS, help="End date (kept as metadata)"
    ),
) -> None:
    """Encode a recurrence into its canonical rule string."""
    if unit not in ("day", "week", "month"):
        raise AppError(f"Unknown unit: {unit}", exit_codes.ERROR_INVALID_ARGS)
    if interval < 1:
        raise AppError("Interval must be at least 1", exit_codes.ERROR_INVALID_ARGS)
    if count is not None and until is not None:
        raise AppError(
            "Use either --count or --until, not both", exit_codes.ERROR_INVALID_ARGS
        )

    by_day = [parse_day(d) for d in days]
    end_condition = "never"
    if count is not None:
        end_condition = "after_count"
    elif until is not None:
        end_condition = "on_date"

    state = RecurrenceState(
        preset=detect_preset(unit, interval, by_day),
        interval=interval,
        unit=unit,
        by_day=by_day,
        end_condition=end_condition,
        end_count=count,
        end_date=until.date().isoformat() if until else None,
    )
    console.print(encode_recurrence_state(state), highlight=False)


@command_wrapper
def decode(
    rule: str = typer.Argument("", help="Rule string, e.g. RRULE:FREQ=DAILY"),
    legacy: str | None = typer.Option(
        None, "--legacy", help="Legacy frequency used when the rule is empty"
    ),
    on: datetime | None = typer.Option(
        None, "--date", formats=DATE_FORMATS, help="Reference date for defaults"
    ),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Decode a rule string into an editable recurrence state."""
    state = decode_recurrence_rule(rule, legacy, reference_date=reference_date(on))
    data = state.model_dump()
    data["description"] = describe_recurrence(state)
    format_output(data, output)


@command_wrapper
def describe(rule: str = typer.Argument(..., help="Rule string")) -> None:
    """Print a human-readable description of a rule."""
    console.print(describe_recurrence(decode_recurrence_rule(rule)), highlight=False)


@command_wrapper
def legacy(rule: str = typer.Argument(..., help="Rule string")) -> None:
    """Print the legacy frequency a rule projects onto."""
    state = decode_recurrence_rule(rule)
    console.print(recurrence_state_to_legacy_frequency(state), highlight=False)


@command_wrapper
def presets(
    on: datetime | None = typer.Option(
        None, "--date", formats=DATE_FORMATS, help="Reference date"
    ),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """List the picker presets for a reference date."""
    rows = [
        {
            "value": option.value,
            "label": option.label,
            "rule": encode_recurrence_state(option.state),
        }
        for option in build_contextual_presets(reference_date(on))
    ]
    format_output(rows, output)
