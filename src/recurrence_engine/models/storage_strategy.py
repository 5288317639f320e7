"""
Strategy Pattern: Storage Strategy Container

The StorageStrategyContext holds the repositories for the configured backend
and injects them into services, so services never know which storage they use.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from recurrence_engine.repositories import (
    ChangeLogRepository,
    RecurrencePatternRepository,
    WorkItemSeriesRepository,
)


class StorageStrategy(ABC):
    """
    Abstract base class for storage strategies.

    A strategy encapsulates all repository implementations for one backend.
    """

    @abstractmethod
    def get_pattern_repository(self) -> RecurrencePatternRepository:
        """Get recurrence pattern repository implementation."""

    @abstractmethod
    def get_series_repository(self) -> WorkItemSeriesRepository:
        """Get work item series repository implementation."""

    @abstractmethod
    def get_change_log_repository(self) -> ChangeLogRepository:
        """Get change log repository implementation."""

    @property
    @abstractmethod
    def storage_type(self) -> str:
        """Get storage type identifier (for logging/debugging)."""


class LocalStorageStrategy(StorageStrategy):
    """
    Local SQLite storage strategy.

    All repositories share the process-wide SQLite connection for *db_path*.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

        # Import here to avoid circular dependencies
        from recurrence_engine.adapters.sqlite import (
            SqliteChangeLogRepository,
            SqliteRecurrencePatternRepository,
            SqliteWorkItemSeriesRepository,
        )

        self._pattern_repo = SqliteRecurrencePatternRepository(db_path=db_path)
        self._series_repo = SqliteWorkItemSeriesRepository(db_path=db_path)
        self._change_log_repo = SqliteChangeLogRepository(db_path=db_path)

    def get_pattern_repository(self) -> RecurrencePatternRepository:
        return self._pattern_repo

    def get_series_repository(self) -> WorkItemSeriesRepository:
        return self._series_repo

    def get_change_log_repository(self) -> ChangeLogRepository:
        return self._change_log_repo

    @property
    def storage_type(self) -> str:
        return "local"


class StorageStrategyContext:
    """Holds the active strategy and exposes its repositories."""

    def __init__(self, strategy: StorageStrategy):
        self._strategy = strategy

    @property
    def strategy(self) -> StorageStrategy:
        return self._strategy

    @property
    def pattern_repository(self) -> RecurrencePatternRepository:
        return self._strategy.get_pattern_repository()

    @property
    def series_repository(self) -> WorkItemSeriesRepository:
        return self._strategy.get_series_repository()

    @property
    def change_log_repository(self) -> ChangeLogRepository:
        return self._strategy.get_change_log_repository()
