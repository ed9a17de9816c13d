"""SQLite-backed student store implementation."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from pathlib import Path
from threading import Lock
from types import TracebackType

from ..core.config import StorageSettings
from ..core.interfaces import CommitConflict, StudentStore
from ..core.models import Student

LOGGER = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS student (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    first_mid_name TEXT NOT NULL,
    last_name TEXT NOT NULL
)
"""


class SqliteStudentStore(StudentStore):
    """Persist students using SQLite.

    One connection is shared by every context; access is serialised with a
    lock and each batch is written inside a single transaction.
    """

    def __init__(self, settings: StorageSettings) -> None:
        """Open the database and ensure the schema exists."""
        self._settings = settings
        db_path = Path(settings.db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = sqlite3.connect(db_path, check_same_thread=False)
        self._lock = Lock()
        with self._lock, self._connection:
            self._connection.execute(_CREATE_TABLE)

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> SqliteStudentStore:
        """Enter context manager scope."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Ensure the connection is closed when exiting context manager."""
        self.close()

    # StudentStore API --------------------------------------------------------
    def insert(self, student: Student) -> int:
        """Insert a single student and return its key."""
        return self.insert_many((student,))[0]

    def insert_many(self, students: Sequence[Student]) -> list[int]:
        """Insert every student in one transaction and return their keys."""
        keys: list[int] = []
        with self._lock:
            try:
                with self._connection:
                    for student in students:
                        keys.append(self._insert_row(student))
            except sqlite3.IntegrityError as exc:
                LOGGER.warning("Rejected batch of %d student(s): %s", len(students), exc)
                raise CommitConflict(f"Student key conflict: {exc}") from exc
        return keys

    def count(self) -> int:
        """Return the number of stored students."""
        with self._lock:
            row = self._connection.execute("SELECT COUNT(*) FROM student").fetchone()
        return int(row[0])

    def reset(self) -> None:
        """Drop and recreate the student table."""
        with self._lock, self._connection:
            self._connection.execute("DROP TABLE IF EXISTS student")
            self._connection.execute(_CREATE_TABLE)
        LOGGER.info("Reset student table in %s", self._settings.db_path)

    def close(self) -> None:
        """Close the underlying SQLite connection."""
        with self._lock:
            self._connection.close()

    # Internal helpers --------------------------------------------------------
    def _insert_row(self, student: Student) -> int:
        if student.id is None:
            cursor = self._connection.execute(
                "INSERT INTO student (first_mid_name, last_name) VALUES (?, ?)",
                (student.first_mid_name, student.last_name),
            )
        else:
            cursor = self._connection.execute(
                "INSERT INTO student (id, first_mid_name, last_name) VALUES (?, ?, ?)",
                (student.id, student.first_mid_name, student.last_name),
            )
        return int(cursor.lastrowid)


__all__ = ["SqliteStudentStore"]
