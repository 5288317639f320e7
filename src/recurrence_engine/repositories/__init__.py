"""Repository interfaces for the recurrence engine.

This package contains abstract base classes (ABCs) that define the contracts
for persistence. Implementations live in recurrence_engine.adapters.sqlite.
"""

from .repository import (
    ChangeLogRepository,
    RecurrencePatternRepository,
    WorkItemSeriesRepository,
)

__all__ = [
    "RecurrencePatternRepository",
    "WorkItemSeriesRepository",
    "ChangeLogRepository",
]
