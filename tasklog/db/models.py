"""
Database models for tasklog.

This module defines the Pydantic models for task times, working dates, logged tasks
and the current-task pointer.
"""

from datetime import date, datetime, timedelta
from functools import total_ordering
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import ParseError, TaskValidationError
from ..utils.formatting import format_duration_hhmm
from ..utils.time_parsing import parse_date, parse_time_hm

# Storage format for task times
ISO8601_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Storage and display format for working dates
DATE_FORMAT = "%Y-%m-%d"

# Tasks started before this hour belong to the previous working date
DAY_START_HOUR = 5

# Longest accepted task name
MAX_NAME_LENGTH = 255


@total_ordering
class TaskTime(BaseModel):
    """A local point in time truncated to whole minutes."""

    model_config = ConfigDict(frozen=True)

    value: datetime = Field(..., description="Local naive datetime, seconds zeroed")

    @field_validator("value")
    @classmethod
    def truncate_to_minute(cls, v: datetime) -> datetime:
        """Drop seconds, microseconds and timezone information."""
        return v.replace(second=0, microsecond=0, tzinfo=None)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "TaskTime":
        """Create a TaskTime from a datetime."""
        return cls(value=dt)

    @classmethod
    def now(cls) -> "TaskTime":
        """Create a TaskTime from the current local time."""
        return cls(value=datetime.now())

    @classmethod
    def from_hm(cls, hour: int, minute: int) -> "TaskTime":
        """Create a TaskTime for today's local date at the given hour and minute."""
        today = date.today()
        return cls(value=datetime(today.year, today.month, today.day, hour, minute))

    @classmethod
    def parse_from_str_hhmm(cls, s: str) -> "TaskTime":
        """Create a TaskTime for today from an "HHMM" or "HH:MM" string."""
        hour, minute = parse_time_hm(s)
        return cls.from_hm(hour, minute)

    @classmethod
    def parse_from_string_iso8601(cls, s: str) -> "TaskTime":
        """Create a TaskTime from a "YYYY-MM-DDTHH:MM:SS" string, ignoring seconds."""
        try:
            return cls(value=datetime.strptime(s, ISO8601_FORMAT))
        except ValueError as e:
            raise ParseError("invalid timestamp", s) from e

    def to_string_hhmm(self) -> str:
        """Format the time of day as "HH:MM"."""
        return self.value.strftime("%H:%M")

    def __str__(self) -> str:
        return self.value.strftime(ISO8601_FORMAT)

    def __lt__(self, other: "TaskTime") -> bool:
        if not isinstance(other, TaskTime):
            return NotImplemented
        return self.value < other.value

    def __sub__(self, other: "TaskTime") -> timedelta:
        if not isinstance(other, TaskTime):
            return NotImplemented
        return self.value - other.value


@total_ordering
class WorkDate(BaseModel):
    """The working day a task belongs to."""

    model_config = ConfigDict(frozen=True)

    value: date = Field(..., description="Calendar date of the working day")

    @classmethod
    def from_task_time(cls, task_time: TaskTime) -> "WorkDate":
        """
        Derive the working date of a task time.

        Times before 05:00 belong to the previous calendar date.
        """
        day = task_time.value.date()
        if task_time.value.hour < DAY_START_HOUR:
            day -= timedelta(days=1)
        return cls(value=day)

    @classmethod
    def today(cls) -> "WorkDate":
        """Working date of the current local time."""
        return cls.from_task_time(TaskTime.now())

    @classmethod
    def parse_from_str(cls, s: str) -> "WorkDate":
        """Create a WorkDate from a "YYYY-MM-DD" or "YYYYMMDD" string."""
        year, month, day = parse_date(s)
        try:
            return cls(value=date(year, month, day))
        except ValueError as e:
            raise ParseError("invalid date", s) from e

    def at(self, hour: int, minute: int) -> TaskTime:
        """
        Get the task time of a clock time within this working date.

        Clock times before 05:00 fall on the following calendar date.
        """
        day = self.value
        if hour < DAY_START_HOUR:
            day += timedelta(days=1)
        return TaskTime(value=datetime(day.year, day.month, day.day, hour, minute))

    def __str__(self) -> str:
        return self.value.strftime(DATE_FORMAT)

    def __lt__(self, other: "WorkDate") -> bool:
        if not isinstance(other, WorkDate):
            return NotImplemented
        return self.value < other.value


class Task(BaseModel):
    """Model for one logged task interval."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(None, description="Row id, None before the task is stored")
    name: str = Field(
        ..., min_length=1, max_length=MAX_NAME_LENGTH, description="Name of the task"
    )
    start_time: TaskTime = Field(..., description="Task start time")
    end_time: Optional[TaskTime] = Field(
        None, description="Task end time (None for the open task)"
    )
    is_break_time: bool = Field(
        default=False, description="Whether the interval is a break"
    )

    @field_validator("end_time")
    @classmethod
    def validate_end_time(cls, v: Optional[TaskTime], info: Any) -> Optional[TaskTime]:
        """Validate that end_time is not before start_time."""
        if v is not None and info.data.get("start_time") is not None:
            if v < info.data["start_time"]:
                raise ValueError("End time must not be before start time")
        return v

    @classmethod
    def start(cls, name: str, time: TaskTime, is_break_time: bool = False) -> "Task":
        """Create a new open task starting at the given time."""
        return cls._build(
            id=None, name=name, start_time=time, end_time=None, is_break_time=is_break_time
        )

    @classmethod
    def _build(cls, **fields: Any) -> "Task":
        try:
            return cls(**fields)
        except ValidationError as e:
            message = "; ".join(str(error["msg"]) for error in e.errors())
            raise TaskValidationError(message) from e

    def _replace(self, **changes: Any) -> "Task":
        fields: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "is_break_time": self.is_break_time,
        }
        fields.update(changes)
        return self._build(**fields)

    def end(self, time: TaskTime) -> "Task":
        """Return the task closed at the given time."""
        return self._replace(end_time=time)

    def with_name(self, name: str) -> "Task":
        """Return the task renamed."""
        return self._replace(name=name)

    def with_start_time(self, time: TaskTime) -> "Task":
        """Return the task with a new start time."""
        return self._replace(start_time=time)

    def with_end_time(self, time: Optional[TaskTime]) -> "Task":
        """Return the task with a new (or cleared) end time."""
        return self._replace(end_time=time)

    def with_id(self, task_id: int) -> "Task":
        """Return the task with its stored row id."""
        return self._replace(id=task_id)

    @property
    def working_date(self) -> WorkDate:
        """Working date derived from the start time."""
        return WorkDate.from_task_time(self.start_time)

    @property
    def is_open(self) -> bool:
        """Whether the task has not been ended yet."""
        return self.end_time is None

    @property
    def duration(self) -> Optional[timedelta]:
        """Get task duration. Returns None for open tasks."""
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    def duration_hhmm(self) -> str:
        """Duration as "HH:MM", empty for open tasks."""
        duration = self.duration
        return format_duration_hhmm(duration) if duration is not None else ""


class CurrentTask(BaseModel):
    """Snapshot of the current-task pointer row."""

    task_id: Optional[int] = Field(None, description="Id of the open task")
    task_name: Optional[str] = Field(None, description="Name of the open task")
    start_time: Optional[TaskTime] = Field(None, description="Start of the open task")

    @property
    def is_idle(self) -> bool:
        """Whether no task is currently open."""
        return self.task_id is None
