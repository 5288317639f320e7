"""Repository abstraction layer for the recurrence engine.

This module defines the abstract base classes (interfaces) for pattern, series
and change log persistence, following the ports & adapters pattern. Every
method is scoped to a single owner; implementations must never read or write
rows belonging to another owner.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from recurrence_engine.models import (
    ChangeLogCreate,
    ChangeLogEntry,
    RecurrencePattern,
    RecurrencePatternInput,
    WorkItemSeries,
    WorkItemSeriesCreate,
)
from recurrence_engine.models.core import SourceType


class RecurrencePatternRepository(ABC):
    """Abstract base class for recurrence pattern persistence."""

    @abstractmethod
    async def get(self, owner_id: str, pattern_id: str) -> RecurrencePattern:
        """Get a pattern by ID.

        Raises:
            RecordNotFoundError: If the owner has no such pattern
        """
        raise NotImplementedError(
            "RecurrencePatternRepository.get() must be implemented by adapter"
        )

    @abstractmethod
    async def get_by_fingerprint(
        self, owner_id: str, fingerprint: str
    ) -> RecurrencePattern | None:
        """Find the owner's pattern with the given fingerprint, if any."""
        raise NotImplementedError(
            "RecurrencePatternRepository.get_by_fingerprint() must be implemented by adapter"
        )

    @abstractmethod
    async def create(
        self,
        owner_id: str,
        fingerprint: str,
        pattern_data: RecurrencePatternInput,
        now: datetime,
    ) -> RecurrencePattern:
        """Insert a new pattern row.

        Args:
            owner_id: Owning user ID
            fingerprint: Precomputed fingerprint of *pattern_data*
            pattern_data: Full specification to store
            now: Creation timestamp

        Returns:
            Created RecurrencePattern

        Raises:
            DuplicateRecordError: If the owner already has this fingerprint
        """
        raise NotImplementedError(
            "RecurrencePatternRepository.create() must be implemented by adapter"
        )

    @abstractmethod
    async def touch(self, owner_id: str, pattern_id: str, now: datetime) -> None:
        """Set ``updated_at`` on an existing pattern and nothing else."""
        raise NotImplementedError(
            "RecurrencePatternRepository.touch() must be implemented by adapter"
        )


class WorkItemSeriesRepository(ABC):
    """Abstract base class for work item series persistence."""

    @abstractmethod
    async def get(self, owner_id: str, series_id: str) -> WorkItemSeries:
        """Get a series by ID.

        Raises:
            RecordNotFoundError: If the owner has no such series
        """
        raise NotImplementedError(
            "WorkItemSeriesRepository.get() must be implemented by adapter"
        )

    @abstractmethod
    async def get_by_source(
        self, owner_id: str, source_type: SourceType, source_id: str
    ) -> WorkItemSeries | None:
        """Find the series bound to a task or habit, if any."""
        raise NotImplementedError(
            "WorkItemSeriesRepository.get_by_source() must be implemented by adapter"
        )

    @abstractmethod
    async def create(
        self, owner_id: str, series_data: WorkItemSeriesCreate, now: datetime
    ) -> WorkItemSeries:
        """Insert a new series with all scheduling cursors unset.

        Raises:
            DuplicateRecordError: If the source item already has a series
        """
        raise NotImplementedError(
            "WorkItemSeriesRepository.create() must be implemented by adapter"
        )

    @abstractmethod
    async def update_binding(
        self,
        owner_id: str,
        series_id: str,
        recurrence_pattern_id: str,
        is_active: bool,
        now: datetime,
    ) -> None:
        """Patch the pattern binding, active flag and ``updated_at``."""
        raise NotImplementedError(
            "WorkItemSeriesRepository.update_binding() must be implemented by adapter"
        )


class ChangeLogRepository(ABC):
    """Abstract base class for the append-only change log."""

    @abstractmethod
    async def append(
        self, owner_id: str, entry_data: ChangeLogCreate, timestamp: datetime
    ) -> ChangeLogEntry:
        """Append an immutable entry stamped with *timestamp*."""
        raise NotImplementedError(
            "ChangeLogRepository.append() must be implemented by adapter"
        )
