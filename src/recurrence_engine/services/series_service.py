"""Series service - one work item series per recurring source item."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from recurrence_engine.models import WorkItemSeriesCreate
from recurrence_engine.models.core import SourceType
from recurrence_engine.models.exceptions import ConcurrentWriteError, DuplicateRecordError
from recurrence_engine.repositories import WorkItemSeriesRepository
from recurrence_engine.utils.logger import get_logger
from recurrence_engine.utils.time_utils import utc_now


class SeriesService:
    """Keeps each task or habit bound to its current recurrence pattern."""

    def __init__(
        self,
        series_repository: WorkItemSeriesRepository,
        *,
        max_attempts: int = 3,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = series_repository
        self.max_attempts = max_attempts
        self.clock = clock
        self.logger = get_logger()

    async def ensure_series(
        self,
        owner_id: str,
        source_type: SourceType,
        source_id: str,
        recurrence_pattern_id: str,
        is_active: bool,
    ) -> str:
        """Create or re-bind the series for a source item.

        An existing series is patched only when its pattern or active flag
        differs. New series start with every scheduling cursor unset.

        Args:
            owner_id: Owning user ID
            source_type: "task" or "habit"
            source_id: ID of the task or habit
            recurrence_pattern_id: Pattern the series should follow
            is_active: Whether the series should produce occurrences

        Returns:
            Series ID

        Raises:
            ConcurrentWriteError: If every attempt lost an insert race
        """
        for attempt in range(1, self.max_attempts + 1):
            existing = await self.repository.get_by_source(owner_id, source_type, source_id)
            if existing is not None:
                if (
                    existing.recurrence_pattern_id != recurrence_pattern_id
                    or existing.is_active != is_active
                ):
                    await self.repository.update_binding(
                        owner_id,
                        existing.id,
                        recurrence_pattern_id,
                        is_active,
                        self.clock(),
                    )
                    self.logger.info(
                        "series patched: owner=%s series=%s pattern=%s active=%s",
                        owner_id,
                        existing.id,
                        recurrence_pattern_id,
                        is_active,
                    )
                return existing.id

            try:
                created = await self.repository.create(
                    owner_id,
                    WorkItemSeriesCreate(
                        source_type=source_type,
                        source_id=source_id,
                        recurrence_pattern_id=recurrence_pattern_id,
                        is_active=is_active,
                    ),
                    self.clock(),
                )
            except DuplicateRecordError:
                self.logger.info(
                    "series insert conflict: owner=%s %s=%s attempt=%d",
                    owner_id,
                    source_type,
                    source_id,
                    attempt,
                )
                continue

            self.logger.info(
                "series created: owner=%s series=%s %s=%s",
                owner_id,
                created.id,
                source_type,
                source_id,
            )
            return created.id

        raise ConcurrentWriteError(
            f"Could not store series for {source_type} {source_id} "
            f"after {self.max_attempts} attempts"
        )
