"""Decorators for command functions."""

import asyncio
import functools
import time
import traceback
from collections.abc import Callable

import typer

from recurrence_engine.models.exceptions import (
    ConcurrentWriteError,
    RecordNotFoundError,
    RecurrenceEngineError,
    UnsupportedRecurrenceError,
)
from recurrence_engine.utils import exit_codes
from recurrence_engine.utils.logger import get_logger
from recurrence_engine.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = exit_codes.ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def _to_app_error(error: RecurrenceEngineError) -> AppError:
    if isinstance(error, UnsupportedRecurrenceError):
        return AppError(str(error), exit_codes.ERROR_INVALID_ARGS)
    if isinstance(error, RecordNotFoundError):
        return AppError(str(error), exit_codes.ERROR_NOT_FOUND)
    if isinstance(error, ConcurrentWriteError):
        return AppError(str(error), exit_codes.ERROR_CONFLICT)
    return AppError(str(error))


def command_wrapper(func: Callable):
    """Run a sync or async command with logging and error reporting."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            try:
                if asyncio.iscoroutinefunction(func):
                    result = asyncio.run(func(*args, **kwargs))
                else:
                    result = func(*args, **kwargs)
            except RecurrenceEngineError as e:
                raise _to_app_error(e) from e

            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except AppError as e:
            elapsed = time.monotonic() - start
            logger.error("command failed: %s (%.3fs) - %s", cmd, elapsed, str(e))
            format_error(str(e))
            raise typer.Exit(code=e.exit_code) from e

        except typer.Exit:
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=exit_codes.ERROR_GENERAL) from e

    return wrapper
