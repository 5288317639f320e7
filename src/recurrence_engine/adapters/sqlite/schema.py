"""Database schema definitions for the local SQLite store.

Uniqueness of patterns per fingerprint and of series per source item is
enforced with unique indexes; the services retry on conflicts.
"""

from __future__ import annotations

# Users table - local owner profile
CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    name TEXT,
    timezone TEXT DEFAULT 'UTC',
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
)
"""

# Recurrence patterns - immutable apart from updated_at
CREATE_RECURRENCE_PATTERNS_TABLE = """
CREATE TABLE IF NOT EXISTS recurrence_patterns (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    fingerprint TEXT NOT NULL,
    recurrence_rule TEXT NOT NULL,

    -- Legacy fields
    frequency TEXT,
    repeats_per_period INTEGER,
    recovery_policy TEXT NOT NULL DEFAULT 'skip',

    -- Scheduling metadata
    start_date DATE,
    end_date DATE,
    preferred_window_start TEXT,
    preferred_window_end TEXT,
    preferred_days TEXT,  -- JSON array, sorted
    timezone TEXT,

    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
)
"""

# Work item series - one per recurring task or habit
CREATE_WORK_ITEM_SERIES_TABLE = """
CREATE TABLE IF NOT EXISTS work_item_series (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    source_type TEXT NOT NULL CHECK (source_type IN ('task', 'habit')),
    source_task_id TEXT,
    source_habit_id TEXT,
    recurrence_pattern_id TEXT NOT NULL,
    is_active BOOLEAN NOT NULL DEFAULT 1,

    -- Cursors written only by the occurrence generator
    anchor_start DATETIME,
    horizon_cursor DATETIME,
    last_occurrence_at DATETIME,

    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    CHECK ((source_task_id IS NULL) <> (source_habit_id IS NULL)),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
    FOREIGN KEY (recurrence_pattern_id) REFERENCES recurrence_patterns(id)
)
"""

# Change logs - append only
CREATE_CHANGE_LOGS_TABLE = """
CREATE TABLE IF NOT EXISTS change_logs (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    entity_type TEXT NOT NULL CHECK (entity_type IN ('task', 'habit', 'event', 'occurrence')),
    entity_id TEXT NOT NULL,
    action TEXT NOT NULL,
    scope TEXT CHECK (scope IS NULL OR scope IN ('single', 'following', 'series')),
    event_id TEXT,
    series_id TEXT,
    actor_type TEXT NOT NULL DEFAULT 'user',
    actor_id TEXT NOT NULL,
    metadata TEXT,  -- JSON object
    timestamp DATETIME NOT NULL,
    created_at DATETIME NOT NULL,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
)
"""

CREATE_PATTERN_INDEXES = [
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_patterns_user_fingerprint "
    "ON recurrence_patterns(user_id, fingerprint)",
]

CREATE_SERIES_INDEXES = [
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_series_user_habit "
    "ON work_item_series(user_id, source_habit_id)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_series_user_task "
    "ON work_item_series(user_id, source_task_id)",
    "CREATE INDEX IF NOT EXISTS idx_series_pattern "
    "ON work_item_series(recurrence_pattern_id)",
]

CREATE_CHANGE_LOG_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_change_logs_entity "
    "ON change_logs(user_id, entity_type, entity_id, timestamp)",
]

# All table creation statements in order
ALL_TABLES = [
    CREATE_USERS_TABLE,
    CREATE_RECURRENCE_PATTERNS_TABLE,
    CREATE_WORK_ITEM_SERIES_TABLE,
    CREATE_CHANGE_LOGS_TABLE,
]

# All index creation statements
ALL_INDEXES = CREATE_PATTERN_INDEXES + CREATE_SERIES_INDEXES + CREATE_CHANGE_LOG_INDEXES
