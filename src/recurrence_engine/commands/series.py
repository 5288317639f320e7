"""Series commands - bind a task or habit to a recurrence."""

import typer

from recurrence_engine.models import SchedulingMetadata
from recurrence_engine.services.config_service import get_config_service
from recurrence_engine.services.recurrence_service import RecurrenceService
from recurrence_engine.utils import exit_codes
from recurrence_engine.utils.recurrence import parse_supported_rule
from recurrence_engine.utils.ui.formatters import format_output

from .decorators import AppError, command_wrapper
from .rules import parse_day


@command_wrapper
async def apply(
    source_type: str = typer.Argument(..., help="habit or task"),
    source_id: str = typer.Argument(..., help="ID of the habit or task"),
    rule: str = typer.Argument(..., help="Rule string, e.g. RRULE:FREQ=DAILY"),
    inactive: bool = typer.Option(False, "--inactive", help="Bind without producing occurrences"),
    timezone: str | None = typer.Option(None, "--timezone", help="IANA timezone"),
    preferred_days: list[str] = typer.Option(
        [], "--preferred-day", help="Preferred weekday (repeatable)"
    ),
    window_start: str | None = typer.Option(None, "--window-start", help="HH:MM"),
    window_end: str | None = typer.Option(None, "--window-end", help="HH:MM"),
    recovery: str | None = typer.Option(None, "--recovery", help="skip or recover"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Bind a habit or task to the deduplicated pattern for RULE."""
    if source_type not in ("habit", "task"):
        raise AppError(
            f"Source type must be habit or task, got {source_type}",
            exit_codes.ERROR_INVALID_ARGS,
        )
    if recovery not in (None, "skip", "recover"):
        raise AppError(
            f"Recovery policy must be skip or recover, got {recovery}",
            exit_codes.ERROR_INVALID_ARGS,
        )

    # Reject rules the scheduler cannot expand before anything is written.
    parse_supported_rule(rule)

    schedule = SchedulingMetadata(
        recovery_policy=recovery,
        preferred_window_start=window_start,
        preferred_window_end=window_end,
        preferred_days=[parse_day(d) for d in preferred_days] or None,
        timezone=timezone,
    )

    config_service = get_config_service()
    config = config_service.config
    service = RecurrenceService.from_storage(
        config_service.storage_strategy_context,
        default_timezone=config.default_timezone,
        max_attempts=config.storage.max_write_attempts,
    )

    binding = await service.apply_recurrence(
        config_service.get_owner_id(),
        source_type,
        source_id,
        recurrence_rule=rule,
        schedule=schedule,
        is_active=not inactive,
        changed_fields=["recurrenceRule"],
    )
    format_output(binding.model_dump(), output or config.output.format)
