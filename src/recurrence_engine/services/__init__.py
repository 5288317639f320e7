"""Service layer for the recurrence engine."""

from .change_log_service import ChangeLogService, changed_fields
from .pattern_service import PatternService
from .recurrence_service import RecurrenceService
from .series_service import SeriesService

__all__ = [
    "ChangeLogService",
    "PatternService",
    "RecurrenceService",
    "SeriesService",
    "changed_fields",
]
