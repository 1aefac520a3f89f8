"""
Database schema definition for tasklog.

This module contains the SQL schema, the open modes and the connection and
transaction handling for the SQLite database.
"""

import logging
import sqlite3
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Generator

from ..exceptions import StorageError

logger = logging.getLogger(__name__)

# Tables that must exist for the database to be usable
REQUIRED_TABLES = ("tasks", "tasknames", "manager")

# Id of the single current-task pointer row
MANAGER_ROW_ID = 0

DROP_TABLES = [
    "DROP TABLE IF EXISTS tasks;",
    "DROP TABLE IF EXISTS tasknames;",
    "DROP TABLE IF EXISTS manager;",
]

# SQL for creating tables
CREATE_TASKS_TABLE = """
CREATE TABLE tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    working_date TEXT NOT NULL,  -- YYYY-MM-DD
    seq_num INTEGER,  -- 1-based rank by start_time within working_date
    start_time TEXT NOT NULL,  -- YYYY-MM-DDTHH:MM:SS
    end_time TEXT NOT NULL DEFAULT '',  -- empty string for the open task
    is_break_time INTEGER NOT NULL DEFAULT 0
);
"""

CREATE_TASKNAMES_TABLE = """
CREATE TABLE tasknames (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    task_name TEXT NOT NULL UNIQUE,
    seq_num INTEGER  -- 1-based rank by task_name
);
"""

CREATE_MANAGER_TABLE = """
CREATE TABLE manager (
    id INTEGER PRIMARY KEY,
    task_id INTEGER,  -- NULL when no task is open
    task_name TEXT,
    start_time TEXT
);
"""

SEED_MANAGER_ROW = "INSERT INTO manager (id) VALUES (?);"

# Indexes for better query performance
CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_working_date ON tasks(working_date, seq_num);",
    "CREATE INDEX IF NOT EXISTS idx_tasknames_seq_num ON tasknames(seq_num);",
]


class OpenMode(str, Enum):
    """How the database file is opened."""

    READ_ONLY = "ro"
    READ_WRITE = "rw"
    READ_WRITE_CREATE = "rwc"


class DatabaseManager:
    """Manages database connections and schema operations."""

    def __init__(self, db_path: Path, mode: OpenMode = OpenMode.READ_WRITE_CREATE):
        """Initialize database manager with the given database path and open mode."""
        self.db_path = Path(db_path)
        self.mode = OpenMode(mode)
        if self.mode is OpenMode.READ_WRITE_CREATE:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        uri = f"{self.db_path.resolve().as_uri()}?mode={self.mode.value}"
        try:
            conn = sqlite3.connect(uri, uri=True, isolation_level=None)
        except sqlite3.Error as e:
            logger.error(f"Could not open database {self.db_path} ({self.mode.value}): {e}")
            raise StorageError(f"Could not open database {self.db_path}: {e}") from e

        logger.debug(f"Opened database {self.db_path} ({self.mode.value})")
        try:
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            logger.error(f"Database error on {self.db_path}: {e}")
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Run a block of statements as one atomic transaction.

        The transaction is committed when the block exits normally and rolled back
        when it raises.
        """
        with self.get_connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def is_initialized(self) -> bool:
        """Check whether all required tables exist."""
        with self.get_connection() as conn:
            placeholders = ", ".join("?" for _ in REQUIRED_TABLES)
            cursor = conn.execute(
                f"""
                SELECT count(name) FROM sqlite_master
                WHERE type = 'table' AND name IN ({placeholders})
            """,
                REQUIRED_TABLES,
            )
            return cursor.fetchone()[0] == len(REQUIRED_TABLES)

    def initialize(self) -> None:
        """Drop and recreate all tables, leaving an empty current-task pointer."""
        with self.transaction() as conn:
            for drop_sql in DROP_TABLES:
                conn.execute(drop_sql)
            self._create_tables(conn)
            conn.execute(SEED_MANAGER_ROW, (MANAGER_ROW_ID,))

        logger.info(f"Initialized database {self.db_path}")

    def _create_tables(self, conn: sqlite3.Connection) -> None:
        """Create all database tables."""
        conn.execute(CREATE_TASKS_TABLE)
        conn.execute(CREATE_TASKNAMES_TABLE)
        conn.execute(CREATE_MANAGER_TABLE)

        for index_sql in CREATE_INDEXES:
            conn.execute(index_sql)
