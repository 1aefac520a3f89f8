"""
Exception hierarchy for tasklog.

Expected conditions (missing rows, duplicate names, invalid input) are raised as
subclasses of TaskLogError so callers can report them without crashing.
"""

from typing import Any


class TaskLogError(Exception):
    """Base exception for task logging operations."""

    pass


class NotFoundError(TaskLogError):
    """Raised when a task name, task id or sequence number does not exist."""

    pass


class AlreadyExistsError(TaskLogError):
    """Raised when registering a task name that is already registered."""

    pass


class TaskValidationError(TaskLogError, ValueError):
    """Raised when a task would violate its invariants."""

    pass


class ParseError(TaskValidationError):
    """Raised when a time or date string cannot be parsed."""

    def __init__(self, message: str, value: Any) -> None:
        super().__init__(f"{message}: {value!r}")
        self.value = value


class StorageError(TaskLogError):
    """Raised when the underlying SQLite database fails."""

    pass
