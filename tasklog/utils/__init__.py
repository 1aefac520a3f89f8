"""Utility functions for tasklog."""

from .formatting import format_duration_hhmm, format_optional_time
from .time_parsing import parse_date, parse_time_hm

__all__ = [
    "format_duration_hhmm",
    "format_optional_time",
    "parse_date",
    "parse_time_hm",
]
