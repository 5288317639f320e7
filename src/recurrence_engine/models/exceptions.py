"""Custom exceptions for the recurrence engine."""


class RecurrenceEngineError(Exception):
    """Base exception for all recurrence engine errors."""


class UnsupportedRecurrenceError(RecurrenceEngineError):
    """Raised when a rule uses a frequency the engine cannot schedule."""


class RecordNotFoundError(RecurrenceEngineError):
    """Raised when a persisted pattern or series does not exist for the owner."""


class DuplicateRecordError(RecurrenceEngineError):
    """Raised when an insert collides with a unique index.

    Another writer created the same logical row first; callers should look the
    row up again instead of inserting.
    """


class ConcurrentWriteError(RecurrenceEngineError):
    """Raised when a lookup-then-insert keeps losing to concurrent writers."""
