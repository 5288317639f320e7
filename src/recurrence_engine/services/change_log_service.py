"""Change log service - append-only audit trail for mutations."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from recurrence_engine.models import ChangeLogCreate, ChangeLogEntry
from recurrence_engine.models.core import ChangeLogEntityType, EditScope
from recurrence_engine.repositories import ChangeLogRepository
from recurrence_engine.utils.logger import get_logger
from recurrence_engine.utils.time_utils import utc_now


def changed_fields(before: Mapping[str, Any], after: Mapping[str, Any]) -> list[str]:
    """Sorted names of keys whose values differ between two snapshots."""
    keys = set(before) | set(after)
    return sorted(key for key in keys if before.get(key) != after.get(key))


class ChangeLogService:
    """Records one immutable entry per mutation. Write-only by contract."""

    def __init__(
        self,
        change_log_repository: ChangeLogRepository,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = change_log_repository
        self.clock = clock
        self.logger = get_logger()

    async def record(
        self,
        owner_id: str,
        entity_type: ChangeLogEntityType,
        entity_id: str,
        action: str,
        *,
        scope: EditScope | None = None,
        event_id: str | None = None,
        series_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        timestamp: datetime | None = None,
    ) -> ChangeLogEntry:
        """Append a change log entry.

        Args:
            owner_id: User performing the change
            entity_type: Kind of entity changed
            entity_id: ID of the changed entity
            action: Free-form verb, e.g. "updated"
            scope: Portion of a recurring entity the edit applied to
            event_id: Linked calendar event, if any
            series_id: Linked series, if any
            metadata: Extra details such as ``{"changedFields": [...]}``
            timestamp: When the change happened; defaults to now

        Returns:
            The stored ChangeLogEntry
        """
        entry = await self.repository.append(
            owner_id,
            ChangeLogCreate(
                entity_type=entity_type,
                entity_id=entity_id,
                action=action,
                scope=scope,
                event_id=event_id,
                series_id=series_id,
                metadata=metadata,
            ),
            timestamp if timestamp is not None else self.clock(),
        )
        self.logger.debug(
            "change logged: owner=%s %s=%s action=%s scope=%s",
            owner_id,
            entity_type,
            entity_id,
            action,
            scope,
        )
        return entry
