"""
Daily task summaries for tasklog.

This module reduces the tasks of one working date into start/end, total duration,
per-task durations and break intervals.
"""

from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from ..db.models import Task, TaskTime


class TaskSummary(BaseModel):
    """Model for the summary of one working date."""

    start: TaskTime = Field(..., description="Earliest start time")
    end: TaskTime = Field(..., description="Latest end time, or start of an open task")
    duration_total: timedelta = Field(
        timedelta(0), description="Total duration of closed working tasks"
    )
    duration_by_name: Dict[str, timedelta] = Field(
        default_factory=dict, description="Summed duration per working task name"
    )
    break_times: List[Task] = Field(
        default_factory=list, description="Break tasks in input order"
    )


class TaskList:
    """A collection of tasks that can be summarized."""

    def __init__(self, tasks: Iterable[Task]):
        self.tasks = list(tasks)

    def summary(self) -> Optional[TaskSummary]:
        """
        Summarize the tasks.

        Open tasks count their start as their end for the overall span and add
        nothing to durations. Break tasks are kept apart from the totals.

        Returns:
            The summary, or None when there are no tasks
        """
        if not self.tasks:
            return None

        start = min(task.start_time for task in self.tasks)
        end = max(task.end_time or task.start_time for task in self.tasks)

        working = [task for task in self.tasks if not task.is_break_time]
        breaks = [task for task in self.tasks if task.is_break_time]

        duration_total = timedelta(0)
        duration_by_name: Dict[str, timedelta] = {}
        for task in working:
            duration_by_name.setdefault(task.name, timedelta(0))
            if task.duration is not None:
                duration_total += task.duration
                duration_by_name[task.name] += task.duration

        return TaskSummary(
            start=start,
            end=end,
            duration_total=duration_total,
            duration_by_name=duration_by_name,
            break_times=breaks,
        )
