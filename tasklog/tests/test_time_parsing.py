"""
Tests for time and date input parsing (tasklog.utils.time_parsing).
"""

import pytest

from tasklog.exceptions import ParseError, TaskValidationError
from tasklog.utils.time_parsing import parse_date, parse_time_hm

pytestmark = pytest.mark.unit


class TestParseTimeHm:
    """Test cases for parse_time_hm."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("0000", (0, 0)),
            ("0930", (9, 30)),
            ("930", (9, 30)),
            ("09:30", (9, 30)),
            ("9:30", (9, 30)),
            ("2359", (23, 59)),
            (" 1200 ", (12, 0)),
        ],
    )
    def test_valid_times(self, value: str, expected: tuple) -> None:
        """Test accepted clock time forms."""
        assert parse_time_hm(value) == expected

    @pytest.mark.parametrize("value", ["2400", "2960", "12:60", "12345", "ab:cd", "", "12-30"])
    def test_invalid_times(self, value: str) -> None:
        """Test rejected clock times."""
        with pytest.raises(ParseError):
            parse_time_hm(value)

    def test_error_carries_value(self) -> None:
        """Test that the offending input is reported."""
        with pytest.raises(ParseError) as exc_info:
            parse_time_hm("2500")

        assert exc_info.value.value == "2500"
        assert "'2500'" in str(exc_info.value)
        assert isinstance(exc_info.value, TaskValidationError)


class TestParseDate:
    """Test cases for parse_date."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2021-01-02", (2021, 1, 2)),
            ("20210102", (2021, 1, 2)),
            ("2021-12-31", (2021, 12, 31)),
        ],
    )
    def test_valid_dates(self, value: str, expected: tuple) -> None:
        """Test accepted date forms."""
        assert parse_date(value) == expected

    def test_day_is_not_checked_against_month_length(self) -> None:
        """Test that the grammar only bounds days to 1-31."""
        assert parse_date("2021-02-31") == (2021, 2, 31)

    @pytest.mark.parametrize(
        "value", ["2021-13-01", "2021-00-10", "2021-01-00", "2021-01-32", "21-01-01", "2021/01/01", "2021-01-0"]
    )
    def test_invalid_dates(self, value: str) -> None:
        """Test rejected dates."""
        with pytest.raises(ParseError):
            parse_date(value)
