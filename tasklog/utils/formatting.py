"""
Utility functions for formatting times and durations.

This module provides consistent "HH:MM" formatting for the task tables and summaries.
"""

from datetime import timedelta
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..db.models import TaskTime


def format_duration_hhmm(duration: timedelta) -> str:
    """
    Format a timedelta as a signed "HH:MM" string.

    Args:
        duration: The timedelta to format, possibly negative

    Returns:
        Formatted duration string (e.g., "01:14", "-01:14", "26:05")
    """
    minutes = int(duration.total_seconds() / 60)
    sign = "-" if minutes < 0 else ""
    hours, rest = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{rest:02d}"


def format_optional_time(time: Optional["TaskTime"]) -> str:
    """Format a task time as "HH:MM", or an empty string when it is missing."""
    return time.to_string_hhmm() if time is not None else ""
