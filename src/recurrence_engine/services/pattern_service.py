"""Pattern service - deduplicated recurrence pattern storage."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from recurrence_engine.models import RecurrencePatternInput
from recurrence_engine.models.exceptions import ConcurrentWriteError, DuplicateRecordError
from recurrence_engine.repositories import RecurrencePatternRepository
from recurrence_engine.utils.fingerprint import recurrence_fingerprint
from recurrence_engine.utils.logger import get_logger
from recurrence_engine.utils.time_utils import utc_now


class PatternService:
    """Resolves a pattern specification to one stored row per owner.

    A specification that matches a stored fingerprint reuses that row; the
    row's fields are never rewritten, only ``updated_at`` is touched.
    """

    def __init__(
        self,
        pattern_repository: RecurrencePatternRepository,
        *,
        max_attempts: int = 3,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the pattern service.

        Args:
            pattern_repository: RecurrencePatternRepository implementation
            max_attempts: Lookup-then-insert attempts when inserts collide
            clock: Source of timestamps
        """
        self.repository = pattern_repository
        self.max_attempts = max_attempts
        self.clock = clock
        self.logger = get_logger()

    async def ensure_pattern(self, owner_id: str, pattern: RecurrencePatternInput) -> str:
        """Find or create the owner's pattern for a specification.

        Args:
            owner_id: Owning user ID
            pattern: Pattern specification; the rule is stored as given

        Returns:
            ID of the existing or newly created pattern

        Raises:
            ConcurrentWriteError: If every attempt lost an insert race
        """
        fingerprint = recurrence_fingerprint(pattern)

        for attempt in range(1, self.max_attempts + 1):
            existing = await self.repository.get_by_fingerprint(owner_id, fingerprint)
            if existing is not None:
                await self.repository.touch(owner_id, existing.id, self.clock())
                self.logger.debug(
                    "pattern dedup hit: owner=%s pattern=%s", owner_id, existing.id
                )
                return existing.id

            try:
                created = await self.repository.create(
                    owner_id, fingerprint, pattern, self.clock()
                )
            except DuplicateRecordError:
                self.logger.info(
                    "pattern insert conflict: owner=%s attempt=%d", owner_id, attempt
                )
                continue

            self.logger.info(
                "pattern created: owner=%s pattern=%s rule=%s",
                owner_id,
                created.id,
                created.recurrence_rule,
            )
            return created.id

        raise ConcurrentWriteError(
            f"Could not store recurrence pattern after {self.max_attempts} attempts"
        )
