"""
Core task logging functionality for tasklog.

This module contains the TaskLogger class that drives the current-task state
machine: starting a task always ends the open one, ending clears the pointer.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from ..db.models import MAX_NAME_LENGTH, CurrentTask, Task, TaskTime, WorkDate
from ..db.repository import TaskNameRepository, TaskRepository
from ..db.schema import DatabaseManager, OpenMode
from ..exceptions import TaskValidationError
from ..utils.time_parsing import parse_time_hm
from .summary import TaskList, TaskSummary

logger = logging.getLogger(__name__)

# Name given to tasks started as a break
DEFAULT_BREAK_TIME_NAME = "break time"


class UpdateTarget(str, Enum):
    """Field of a logged task that can be edited."""

    NAME = "name"
    START = "start"
    END = "end"


class TaskLogger:
    """Main task logging service that coordinates names, tasks and the pointer."""

    def __init__(
        self,
        db_path: Path,
        mode: OpenMode = OpenMode.READ_WRITE,
        break_time_name: str = DEFAULT_BREAK_TIME_NAME,
    ):
        """
        Initialize TaskLogger with the given database file.

        Args:
            db_path: Path of the SQLite database file
            mode: How to open the database
            break_time_name: Task name used for break intervals
        """
        self.db_path = Path(db_path)
        self.break_time_name = break_time_name

        self.db_manager = DatabaseManager(self.db_path, mode)
        self.name_repo = TaskNameRepository(self.db_manager)
        self.task_repo = TaskRepository(self.db_manager)

    def is_initialized(self) -> bool:
        """Check whether the database tables exist."""
        return self.db_manager.is_initialized()

    def initialize(self, force: bool = False) -> bool:
        """
        Create the database tables.

        Args:
            force: Recreate the tables even if they already exist

        Returns:
            True if the tables were (re)created, False if they already existed
        """
        if self.db_manager.is_initialized() and not force:
            logger.info(f"Database {self.db_path} already initialized")
            return False

        self.db_manager.initialize()
        return True

    # Task name registry

    def register_name(self, name: str) -> None:
        """Register a task name."""
        self.name_repo.register_name(self._clean_name(name))

    def unregister_name(self, name: str) -> None:
        """Remove a registered task name."""
        self.name_repo.unregister_name(name.strip())

    def list_names(self) -> List[Tuple[int, str]]:
        """Get all registered names with their numbers."""
        return self.name_repo.list_names()

    # Current task state machine

    def start_task(
        self,
        task_number: Optional[int] = None,
        is_break_time: bool = False,
        time: Optional[TaskTime] = None,
    ) -> Tuple[Optional[Task], Task]:
        """
        Start a task, ending the open task at the same time.

        Args:
            task_number: Number of a registered task name
            is_break_time: Start a break instead of a named task
            time: Start time, now if omitted

        Returns:
            Tuple of (ended task or None, started task)

        Raises:
            TaskValidationError: If neither a task number nor a break is given, or
                the open task started after the new start time
            NotFoundError: If the task number is not registered
        """
        start_time = time or TaskTime.now()

        if is_break_time:
            name = self.break_time_name
        elif task_number is not None:
            name = self.name_repo.get_name_by_seq(task_number)
        else:
            raise TaskValidationError("Task number was not provided")

        new_task = Task.start(name, start_time, is_break_time=is_break_time)
        ended, task_id = self.task_repo.switch_task(new_task)
        return ended, new_task.with_id(task_id)

    def end_task(self, time: Optional[TaskTime] = None) -> Optional[Task]:
        """
        End the open task.

        Returns:
            The ended task, or None if no task was open

        Raises:
            TaskValidationError: If the end time is before the task's start time
        """
        ended = self.task_repo.end_current_task(time or TaskTime.now())
        if ended is None:
            logger.info("No open task to end")
        return ended

    def get_current_task(self) -> CurrentTask:
        """Get the current-task pointer."""
        return self.task_repo.get_current_task()

    def reset_current_task(self) -> None:
        """Clear the current-task pointer without ending the open task."""
        self.task_repo.reset_pointer()

    # Task log

    def list_tasks(
        self, working_date: Optional[WorkDate] = None, show_all: bool = False
    ) -> List[Tuple[int, Task]]:
        """
        Get logged tasks with their per-day numbers.

        Args:
            working_date: Date to list, today's working date if omitted
            show_all: List every working date instead
        """
        if show_all:
            return self.task_repo.list_tasks()
        return self.task_repo.list_tasks(working_date or WorkDate.today())

    def summarize(self, working_date: Optional[WorkDate] = None) -> Optional[TaskSummary]:
        """Summarize one working date, or None if it has no tasks."""
        tasks = self.list_tasks(working_date)
        return TaskList(task for _, task in tasks).summary()

    def get_task_by_seq(
        self, task_number: int, working_date: Optional[WorkDate] = None
    ) -> Task:
        """Get a task by its per-day number."""
        _, task = self._find_task(task_number, working_date)
        return task

    def update_task(
        self,
        task_number: int,
        target: UpdateTarget,
        value: str,
        working_date: Optional[WorkDate] = None,
    ) -> Task:
        """
        Edit one field of a logged task.

        Start and end values are "HHMM" clock times within the task's working date.
        A changed start time renumbers the working date in the same transaction.

        Returns:
            The updated task

        Raises:
            NotFoundError: If the task number does not exist
            TaskValidationError: If the value is malformed or breaks start <= end
        """
        task_id, task = self._find_task(task_number, working_date)
        target = UpdateTarget(target)

        if target is UpdateTarget.NAME:
            updated = task.with_name(self._clean_name(value))
        else:
            hour, minute = parse_time_hm(value)
            new_time = task.working_date.at(hour, minute)
            if target is UpdateTarget.START:
                updated = task.with_start_time(new_time)
            else:
                updated = task.with_end_time(new_time)

        if updated.start_time != task.start_time:
            self.task_repo.move_task(task_id, updated)
        else:
            self.task_repo.update_task(task_id, updated)

        logger.info(f"Updated {target.value} of task {task_id}")
        return updated

    def delete_task(self, task_number: int, working_date: Optional[WorkDate] = None) -> Task:
        """Delete a task by its per-day number and return it."""
        task_id, _ = self._find_task(task_number, working_date)
        return self.task_repo.delete_task(task_id)

    def _clean_name(self, name: str) -> str:
        name = name.strip()
        if not name:
            raise TaskValidationError("Task name must not be empty")
        if len(name) > MAX_NAME_LENGTH:
            raise TaskValidationError(
                f"Task name must be at most {MAX_NAME_LENGTH} characters"
            )
        return name

    def _find_task(
        self, task_number: int, working_date: Optional[WorkDate]
    ) -> Tuple[int, Task]:
        task_id = self.task_repo.get_task_id_by_seq(
            task_number, working_date or WorkDate.today()
        )
        return task_id, self.task_repo.get_task(task_id)
