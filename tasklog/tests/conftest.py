"""
Pytest configuration and fixtures for tasklog tests.

This module provides shared fixtures and configuration for all test modules.
"""

import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Generator, Optional

import pytest

from tasklog.core.task_logger import TaskLogger
from tasklog.db.models import Task, TaskTime
from tasklog.db.repository import TaskNameRepository, TaskRepository
from tasklog.db.schema import DatabaseManager


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def test_db_path(temp_dir: Path) -> Path:
    """Provide a test database path."""
    return temp_dir / "test_tasklog.db"


@pytest.fixture
def db_manager(test_db_path: Path) -> DatabaseManager:
    """Provide an initialized test database manager."""
    manager = DatabaseManager(test_db_path)
    manager.initialize()
    return manager


@pytest.fixture
def name_repository(db_manager: DatabaseManager) -> TaskNameRepository:
    """Provide a test task name repository."""
    return TaskNameRepository(db_manager)


@pytest.fixture
def task_repository(db_manager: DatabaseManager) -> TaskRepository:
    """Provide a test task repository."""
    return TaskRepository(db_manager)


@pytest.fixture
def task_logger(db_manager: DatabaseManager, test_db_path: Path) -> TaskLogger:
    """Provide a task logger on an initialized database."""
    return TaskLogger(test_db_path)


@pytest.fixture
def make_time() -> Callable[..., TaskTime]:
    """Build task times from date and clock components."""

    def _make_time(
        year: int = 2021, month: int = 1, day: int = 2, hour: int = 9, minute: int = 0
    ) -> TaskTime:
        return TaskTime.from_datetime(datetime(year, month, day, hour, minute))

    return _make_time


@pytest.fixture
def make_task(make_time: Callable[..., TaskTime]) -> Callable[..., Task]:
    """Build tasks on 2021-01-02 from "HH:MM" clock strings."""

    def _make_task(
        name: str,
        start: str,
        end: Optional[str] = None,
        is_break_time: bool = False,
        day: int = 2,
    ) -> Task:
        start_h, start_m = (int(part) for part in start.split(":"))
        task = Task.start(
            name, make_time(day=day, hour=start_h, minute=start_m), is_break_time
        )
        if end is not None:
            end_h, end_m = (int(part) for part in end.split(":"))
            task = task.end(make_time(day=day, hour=end_h, minute=end_m))
        return task

    return _make_task

