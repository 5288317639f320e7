"""SQLite adapter module - local database storage implementation."""

from recurrence_engine.adapters.sqlite.change_log_repository import (
    SqliteChangeLogRepository,
)
from recurrence_engine.adapters.sqlite.pattern_repository import (
    SqliteRecurrencePatternRepository,
)
from recurrence_engine.adapters.sqlite.series_repository import (
    SqliteWorkItemSeriesRepository,
)
from recurrence_engine.adapters.sqlite.user_manager import (
    ensure_user,
    get_or_create_local_user,
    get_system_timezone,
)

__all__ = [
    "SqliteRecurrencePatternRepository",
    "SqliteWorkItemSeriesRepository",
    "SqliteChangeLogRepository",
    "ensure_user",
    "get_or_create_local_user",
    "get_system_timezone",
]
