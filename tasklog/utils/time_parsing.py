"""
Time and date input parsing for tasklog.

This module turns user supplied strings such as "0930", "9:30", "2021-01-01" or
"20210101" into validated integer components.
"""

import re
from typing import Tuple

from ..exceptions import ParseError

TIME_PATTERN = re.compile(r"^([0-2][0-9]|[0-9]):?([0-5][0-9])$")
DATE_PATTERN = re.compile(r"^(?P<year>[0-9]{4})-?(?P<month>[0-9]{2})-?(?P<day>[0-9]{2})$")


def parse_time_hm(value: str) -> Tuple[int, int]:
    """
    Parse an "HHMM" or "HH:MM" style string.

    Args:
        value: Time string, hour with one or two digits

    Returns:
        Tuple of (hour, minute)

    Raises:
        ParseError: If the string is malformed or out of range
    """
    match = TIME_PATTERN.match(value.strip())
    if match is None:
        raise ParseError("invalid time format", value)

    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ParseError("invalid time range", value)

    return hour, minute


def parse_date(value: str) -> Tuple[int, int, int]:
    """
    Parse a "YYYY-MM-DD" or "YYYYMMDD" style string.

    Days are only checked against 1-31, not against the length of the month.

    Args:
        value: Date string

    Returns:
        Tuple of (year, month, day)

    Raises:
        ParseError: If the string is malformed or out of range
    """
    match = DATE_PATTERN.match(value.strip())
    if match is None:
        raise ParseError("invalid date format", value)

    year = int(match.group("year"))
    month = int(match.group("month"))
    day = int(match.group("day"))
    if not (1 <= month <= 12 and 1 <= day <= 31):
        raise ParseError("invalid date range", value)

    return year, month, day
