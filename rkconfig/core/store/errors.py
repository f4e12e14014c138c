"""Storage error taxonomy.

Reads never raise for absence; a missing row is `None` or an empty list.
Every error carries the underlying exception as `cause` (and as `__cause__`).
"""

from __future__ import annotations


class StorageError(Exception):
    """Base class for configuration store failures."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        base = super().__str__()
        if self.cause is None:
            return base
        return f"{base}: {self.cause}"


class SchemaError(StorageError):
    """DDL failed for a reason other than the expected duplicate column."""


class StorageIOError(StorageError):
    """The handle is unavailable or the backing file failed."""


class SerializationError(StorageError):
    """A stored config blob could not be turned back into a KeyboardConfig."""
