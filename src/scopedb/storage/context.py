"""Unit-of-work handle over a student store."""

from __future__ import annotations

import asyncio
import logging
import uuid
from threading import Lock
from types import TracebackType

from ..core.execution import CancellationToken
from ..core.interfaces import CommitConflict, HandleClosed, StudentStore
from ..core.models import Student

LOGGER = logging.getLogger(__name__)


class StudentContext:
    """Track pending students and flush them to the store in one commit.

    A context is not safe for concurrent use. It does not serialise callers;
    it only detects a second commit starting while one is in flight and
    rejects it with ``CommitConflict``. Once committed or closed, every
    further ``add`` or ``commit`` raises ``HandleClosed``.
    """

    def __init__(self, store: StudentStore, commit_latency: float = 0.0) -> None:
        """Open a unit of work against ``store``."""
        self.id = uuid.uuid4().hex
        self._store = store
        self._commit_latency = commit_latency
        self._pending: list[Student] = []
        self._closed = False
        self._operation = Lock()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<StudentContext {self.id[:8]} {state} pending={len(self._pending)}>"

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> StudentContext:
        """Enter context manager scope."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Discard anything left uncommitted."""
        self.close()

    # Handle API --------------------------------------------------------------
    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> tuple[Student, ...]:
        """Students queued for the next commit."""
        return tuple(self._pending)

    def add(self, student: Student) -> None:
        """Queue ``student`` for insertion on commit."""
        self._ensure_open()
        self._pending.append(student)

    def commit(self, token: CancellationToken | None = None) -> int:
        """Flush pending students to the store and close the context.

        Returns the number of students written. Raises ``HandleClosed`` if the
        context was already committed, ``CommitConflict`` if another commit is
        in progress or the store rejects a key, and ``OperationCancelled`` if
        ``token`` fired before anything was written.
        """
        self._ensure_open()
        self._begin_operation()
        try:
            self._ensure_open()
            if token is not None:
                token.raise_if_cancelled()
            return self._apply()
        finally:
            self._operation.release()

    async def commit_async(self, token: CancellationToken | None = None) -> int:
        """Asynchronous ``commit`` that waits for the store acknowledgement.

        Cancellation while waiting leaves the context open with its pending
        students intact; the write itself happens without suspension.
        """
        self._ensure_open()
        self._begin_operation()
        try:
            self._ensure_open()
            await asyncio.sleep(self._commit_latency)
            if token is not None:
                token.raise_if_cancelled()
            # close() or scope disposal may have run during the wait.
            self._ensure_open()
            return self._apply()
        finally:
            self._operation.release()

    def close(self) -> None:
        """Drop pending students and close the context. Safe to call twice."""
        if self._closed:
            return
        if self._pending:
            LOGGER.debug(
                "Discarding %d uncommitted student(s) from context %s",
                len(self._pending),
                self.id,
            )
        self._pending.clear()
        self._closed = True

    # Internal helpers --------------------------------------------------------
    def _ensure_open(self) -> None:
        if self._closed:
            raise HandleClosed(f"Context {self.id} is closed")

    def _begin_operation(self) -> None:
        if not self._operation.acquire(blocking=False):
            self._ensure_open()
            raise CommitConflict(
                f"A second operation started on context {self.id} "
                "before a previous operation completed"
            )

    def _apply(self) -> int:
        batch = tuple(self._pending)
        keys = self._store.insert_many(batch)
        for student, key in zip(batch, keys):
            student.id = key
        self._pending.clear()
        self._closed = True
        LOGGER.debug("Context %s committed %d student(s)", self.id, len(batch))
        return len(batch)


__all__ = ["StudentContext"]
