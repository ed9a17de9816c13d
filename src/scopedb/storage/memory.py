"""In-memory student store used by tests and the ``memory`` backend."""

from __future__ import annotations

from collections.abc import Sequence
from threading import Lock

from ..core.interfaces import CommitConflict, StudentStore
from ..core.models import Student


class InMemoryStudentStore(StudentStore):
    """Dictionary-backed store with the same conflict rules as SQLite."""

    def __init__(self) -> None:
        self._rows: dict[int, tuple[str, str]] = {}
        self._next_key = 1
        self._lock = Lock()

    def insert(self, student: Student) -> int:
        return self.insert_many((student,))[0]

    def insert_many(self, students: Sequence[Student]) -> list[int]:
        with self._lock:
            explicit = [student.id for student in students if student.id is not None]
            taken = set(self._rows)
            for key in explicit:
                if key in taken:
                    raise CommitConflict(f"Student key conflict: {key} already exists")
                taken.add(key)

            keys: list[int] = []
            for student in students:
                key = student.id
                if key is None:
                    while self._next_key in taken:
                        self._next_key += 1
                    key = self._next_key
                    taken.add(key)
                self._rows[key] = (student.first_mid_name, student.last_name)
                self._next_key = max(self._next_key, key + 1)
                keys.append(key)
            return keys

    def count(self) -> int:
        with self._lock:
            return len(self._rows)

    def reset(self) -> None:
        with self._lock:
            self._rows.clear()
            self._next_key = 1

    def close(self) -> None:
        return None


__all__ = ["InMemoryStudentStore"]
