"""
Database repositories for tasklog.

This module provides the data access layer for registered task names, the task log
and the current-task pointer. Every mutation that changes sequence numbers or the
pointer runs inside a single transaction.
"""

import logging
import sqlite3
from typing import Iterable, List, Optional, Tuple

from ..exceptions import AlreadyExistsError, NotFoundError
from .models import CurrentTask, Task, TaskTime, WorkDate
from .schema import MANAGER_ROW_ID, DatabaseManager

logger = logging.getLogger(__name__)


def _assign_seq_nums(conn: sqlite3.Connection, table: str, ordered_ids: Iterable[int]) -> None:
    """Write dense 1-based sequence numbers following the given id order."""
    conn.executemany(
        f"UPDATE {table} SET seq_num = ? WHERE id = ?",
        [(seq_num, row_id) for seq_num, row_id in enumerate(ordered_ids, start=1)],
    )


class TaskNameRepository:
    """Repository for the registry of task names."""

    def __init__(self, db_manager: DatabaseManager):
        """Initialize repository with database manager."""
        self.db_manager = db_manager

    def register_name(self, name: str) -> None:
        """
        Register a task name and renumber all names.

        Raises:
            AlreadyExistsError: If the name is already registered
        """
        with self.db_manager.transaction() as conn:
            if self._find_name_id(conn, name) is not None:
                raise AlreadyExistsError(f"Task name '{name}' already exists")

            conn.execute("INSERT INTO tasknames (task_name) VALUES (?)", (name,))
            self._renumber(conn)

        logger.info(f"Registered task name '{name}'")

    def unregister_name(self, name: str) -> None:
        """
        Remove a registered task name and renumber the remaining names.

        Raises:
            NotFoundError: If the name is not registered
        """
        with self.db_manager.transaction() as conn:
            name_id = self._find_name_id(conn, name)
            if name_id is None:
                raise NotFoundError(f"Task name '{name}' does not exist")

            conn.execute("DELETE FROM tasknames WHERE id = ?", (name_id,))
            self._renumber(conn)

        logger.info(f"Unregistered task name '{name}'")

    def get_name_by_seq(self, seq_num: int) -> str:
        """
        Get a registered task name by its sequence number.

        Raises:
            NotFoundError: If no name has that number
        """
        with self.db_manager.get_connection() as conn:
            cursor = conn.execute(
                "SELECT task_name FROM tasknames WHERE seq_num = ?", (seq_num,)
            )
            row = cursor.fetchone()

        if row is None:
            raise NotFoundError(f"Task number {seq_num} does not exist")
        return str(row["task_name"])

    def list_names(self) -> List[Tuple[int, str]]:
        """Get all registered names as (sequence number, name) pairs."""
        with self.db_manager.get_connection() as conn:
            cursor = conn.execute(
                "SELECT seq_num, task_name FROM tasknames ORDER BY seq_num ASC"
            )
            rows = cursor.fetchall()

        return [(row["seq_num"], row["task_name"]) for row in rows]

    def _find_name_id(self, conn: sqlite3.Connection, name: str) -> Optional[int]:
        cursor = conn.execute("SELECT id FROM tasknames WHERE task_name = ?", (name,))
        row = cursor.fetchone()
        return row["id"] if row else None

    def _renumber(self, conn: sqlite3.Connection) -> None:
        rows = conn.execute("SELECT id, task_name FROM tasknames").fetchall()
        ordered = sorted(rows, key=lambda row: row["task_name"])
        _assign_seq_nums(conn, "tasknames", (row["id"] for row in ordered))
        logger.debug(f"Renumbered {len(ordered)} task names")


class TaskRepository:
    """Repository for the task log and the current-task pointer."""

    def __init__(self, db_manager: DatabaseManager):
        """Initialize repository with database manager."""
        self.db_manager = db_manager

    def append_task(self, task: Task) -> int:
        """
        Store a new task and make it the current task.

        The insert, the renumbering of the task's working date and the pointer
        update happen in one transaction.

        Returns:
            Id of the stored task
        """
        with self.db_manager.transaction() as conn:
            task_id = self._append(conn, task)

        logger.info(f"Appended task {task_id} '{task.name}' at {task.start_time}")
        return task_id

    def switch_task(self, task: Task) -> Tuple[Optional[Task], int]:
        """
        Close the open task at the new task's start time, then append the new task.

        Returns:
            Tuple of (closed task or None, id of the new task)

        Raises:
            TaskValidationError: If the open task started after the new task
        """
        with self.db_manager.transaction() as conn:
            closed = None
            current_id = self._pointer_task_id(conn)
            if current_id is not None:
                closed = self._close(conn, current_id, task.start_time)
            task_id = self._append(conn, task)

        if closed is not None:
            logger.info(f"Ended task {closed.id} '{closed.name}' at {closed.end_time}")
        logger.info(f"Started task {task_id} '{task.name}' at {task.start_time}")
        return closed, task_id

    def end_current_task(self, end_time: TaskTime) -> Optional[Task]:
        """
        Close the open task and clear the pointer.

        Returns:
            The closed task, or None if no task was open

        Raises:
            TaskValidationError: If end_time is before the task's start time
        """
        with self.db_manager.transaction() as conn:
            current_id = self._pointer_task_id(conn)
            if current_id is None:
                return None
            closed = self._close(conn, current_id, end_time)
            self._clear_pointer(conn)

        logger.info(f"Ended task {closed.id} '{closed.name}' at {end_time}")
        return closed

    def get_task(self, task_id: int) -> Task:
        """
        Get a task by its id.

        Raises:
            NotFoundError: If the task does not exist
        """
        with self.db_manager.get_connection() as conn:
            return self._fetch_task(conn, task_id)

    def get_current_task_id(self) -> Optional[int]:
        """Get the id of the open task, or None."""
        with self.db_manager.get_connection() as conn:
            return self._pointer_task_id(conn)

    def get_current_task(self) -> CurrentTask:
        """Get the full current-task pointer row."""
        with self.db_manager.get_connection() as conn:
            cursor = conn.execute(
                "SELECT task_id, task_name, start_time FROM manager WHERE id = ?",
                (MANAGER_ROW_ID,),
            )
            row = cursor.fetchone()

        if row is None:
            return CurrentTask()
        return CurrentTask(
            task_id=row["task_id"],
            task_name=row["task_name"],
            start_time=(
                TaskTime.parse_from_string_iso8601(row["start_time"])
                if row["start_time"]
                else None
            ),
        )

    def get_task_id_by_seq(self, seq_num: int, working_date: WorkDate) -> int:
        """
        Get a task id by its per-day sequence number.

        Raises:
            NotFoundError: If the working date has no task with that number
        """
        with self.db_manager.get_connection() as conn:
            cursor = conn.execute(
                "SELECT id FROM tasks WHERE seq_num = ? AND working_date = ?",
                (seq_num, str(working_date)),
            )
            row = cursor.fetchone()

        if row is None:
            raise NotFoundError(f"Task {seq_num} does not exist on {working_date}")
        return int(row["id"])

    def list_tasks(self, working_date: Optional[WorkDate] = None) -> List[Tuple[int, Task]]:
        """
        Get logged tasks as (per-day sequence number, task) pairs.

        Args:
            working_date: Restrict to one working date; None lists all history

        Returns:
            Pairs ordered by working date, then sequence number
        """
        with self.db_manager.get_connection() as conn:
            if working_date is None:
                cursor = conn.execute(
                    "SELECT * FROM tasks ORDER BY working_date ASC, seq_num ASC"
                )
            else:
                cursor = conn.execute(
                    "SELECT * FROM tasks WHERE working_date = ? ORDER BY seq_num ASC",
                    (str(working_date),),
                )
            rows = cursor.fetchall()

        return [(row["seq_num"], self._row_to_task(row)) for row in rows]

    def update_task(self, task_id: int, task: Task) -> None:
        """
        Overwrite a stored task in place.

        Sequence numbers are not recomputed; use move_task for an edit that moves
        a task in time. When the edited task is the open one, the pointer follows
        the new name and start time, and is cleared if the task now has an end
        time.

        Raises:
            NotFoundError: If the task does not exist
        """
        with self.db_manager.transaction() as conn:
            self._update(conn, task_id, task)

        logger.info(f"Updated task {task_id}")

    def move_task(self, task_id: int, task: Task) -> None:
        """
        Overwrite a stored task and renumber the working dates it left and joined.

        The update and the renumbering happen in one transaction.

        Raises:
            NotFoundError: If the task does not exist
        """
        with self.db_manager.transaction() as conn:
            old_working_date = self._fetch_task(conn, task_id).working_date
            self._update(conn, task_id, task)
            self._renumber_day(conn, old_working_date)
            if task.working_date != old_working_date:
                self._renumber_day(conn, task.working_date)

        logger.info(f"Moved task {task_id} to {task.start_time}")

    def delete_task(self, task_id: int) -> Task:
        """
        Delete a task and renumber the rest of its working date.

        Returns:
            The deleted task

        Raises:
            NotFoundError: If the task does not exist
        """
        with self.db_manager.transaction() as conn:
            task = self._fetch_task(conn, task_id)
            conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            self._renumber_day(conn, task.working_date)

            if self._pointer_task_id(conn) == task_id:
                self._clear_pointer(conn)

        logger.info(f"Deleted task {task_id} '{task.name}'")
        return task

    def reset_pointer(self) -> None:
        """Clear the current-task pointer without closing any task."""
        with self.db_manager.transaction() as conn:
            self._clear_pointer(conn)

        logger.warning("Current task pointer has been reset")

    def _append(self, conn: sqlite3.Connection, task: Task) -> int:
        cursor = conn.execute(
            """
            INSERT INTO tasks (name, working_date, start_time, end_time, is_break_time)
            VALUES (?, ?, ?, ?, ?)
        """,
            (
                task.name,
                str(task.working_date),
                str(task.start_time),
                str(task.end_time) if task.end_time else "",
                int(task.is_break_time),
            ),
        )
        task_id = int(cursor.lastrowid)
        self._renumber_day(conn, task.working_date)
        self._set_pointer(conn, task_id, task.name, task.start_time)
        return task_id

    def _update(self, conn: sqlite3.Connection, task_id: int, task: Task) -> None:
        cursor = conn.execute(
            """
            UPDATE tasks
            SET name = ?, working_date = ?, start_time = ?, end_time = ?,
                is_break_time = ?
            WHERE id = ?
        """,
            (
                task.name,
                str(task.working_date),
                str(task.start_time),
                str(task.end_time) if task.end_time else "",
                int(task.is_break_time),
                task_id,
            ),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"Task with ID {task_id} not found")

        if self._pointer_task_id(conn) == task_id:
            if task.end_time is None:
                self._set_pointer(conn, task_id, task.name, task.start_time)
            else:
                self._clear_pointer(conn)

    def _close(self, conn: sqlite3.Connection, task_id: int, end_time: TaskTime) -> Task:
        closed = self._fetch_task(conn, task_id).end(end_time)
        conn.execute(
            "UPDATE tasks SET end_time = ? WHERE id = ?", (str(end_time), task_id)
        )
        return closed

    def _fetch_task(self, conn: sqlite3.Connection, task_id: int) -> Task:
        cursor = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
        row = cursor.fetchone()
        if row is None:
            raise NotFoundError(f"Task with ID {task_id} not found")
        return self._row_to_task(row)

    def _renumber_day(self, conn: sqlite3.Connection, working_date: WorkDate) -> None:
        rows = conn.execute(
            "SELECT id, start_time FROM tasks WHERE working_date = ?",
            (str(working_date),),
        ).fetchall()
        ordered = sorted(rows, key=lambda row: (row["start_time"], row["id"]))
        _assign_seq_nums(conn, "tasks", (row["id"] for row in ordered))
        logger.debug(f"Renumbered {len(ordered)} tasks on {working_date}")

    def _pointer_task_id(self, conn: sqlite3.Connection) -> Optional[int]:
        cursor = conn.execute(
            "SELECT task_id FROM manager WHERE id = ?", (MANAGER_ROW_ID,)
        )
        row = cursor.fetchone()
        return row["task_id"] if row else None

    def _set_pointer(
        self, conn: sqlite3.Connection, task_id: int, name: str, start_time: TaskTime
    ) -> None:
        conn.execute(
            "UPDATE manager SET task_id = ?, task_name = ?, start_time = ? WHERE id = ?",
            (task_id, name, str(start_time), MANAGER_ROW_ID),
        )

    def _clear_pointer(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            "UPDATE manager SET task_id = NULL, task_name = NULL, start_time = NULL "
            "WHERE id = ?",
            (MANAGER_ROW_ID,),
        )

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        """Convert a database row to a Task model."""
        return Task(
            id=row["id"],
            name=row["name"],
            start_time=TaskTime.parse_from_string_iso8601(row["start_time"]),
            end_time=(
                TaskTime.parse_from_string_iso8601(row["end_time"])
                if row["end_time"]
                else None
            ),
            is_break_time=bool(row["is_break_time"]),
        )
