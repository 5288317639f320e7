"""Recurrence engine domain models.

This package contains Pydantic models for the editable recurrence state, the
persisted recurrence patterns and series, and the append-only change log.
"""

from .config_models import AppConfig, OutputConfig, StorageConfig
from .core import (
    ChangeLogActor,
    ChangeLogCreate,
    ChangeLogEntry,
    RecurrenceBinding,
    RecurrencePattern,
    RecurrencePatternInput,
    SchedulingMetadata,
    WorkItemSeries,
    WorkItemSeriesCreate,
)
from .recurrence import ParsedRule, PresetOption, RecurrenceState

__all__ = [
    # Recurrence editor models
    "RecurrenceState",
    "PresetOption",
    "ParsedRule",
    # Persisted models
    "RecurrencePatternInput",
    "RecurrencePattern",
    "SchedulingMetadata",
    "WorkItemSeries",
    "WorkItemSeriesCreate",
    "ChangeLogActor",
    "ChangeLogCreate",
    "ChangeLogEntry",
    "RecurrenceBinding",
    # Config
    "AppConfig",
    "OutputConfig",
    "StorageConfig",
]
