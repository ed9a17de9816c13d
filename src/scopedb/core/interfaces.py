"""Protocol interfaces and the error taxonomy shared by all components."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .models import Student


class ScopeError(RuntimeError):
    """Base class for errors raised by scopes, handles and stores."""


class HandleClosed(ScopeError):
    """Raised when a handle is used after it was committed or closed."""


class CommitConflict(ScopeError):
    """Raised when a commit collides with another operation or stored key."""


class AlreadyRegistered(ScopeError, KeyError):
    """Raised when a factory name is bound twice."""

    def __str__(self) -> str:
        return RuntimeError.__str__(self)


class NotRegistered(ScopeError, KeyError):
    """Raised when resolving a name that has no registered factory."""

    def __str__(self) -> str:
        return RuntimeError.__str__(self)


class ScopeDisposed(ScopeError):
    """Raised when resolving through a scope that was already disposed."""


class OperationCancelled(ScopeError):
    """Raised when a cancellation token fires before work is applied."""


class AggregatedFailure(ScopeError):
    """Every failure collected from one concurrent run.

    Returned by ``ScopeManager.run_concurrently`` rather than raised, so the
    threaded and asyncio strategies share one result contract. Callers that
    prefer exceptions can ``raise`` the returned value.
    """

    def __init__(self, errors: Sequence[BaseException]) -> None:
        self.errors: tuple[BaseException, ...] = tuple(errors)
        super().__init__(f"{len(self.errors)} worker(s) failed")

    def counts_by_type(self) -> dict[str, int]:
        """Return how many collected errors there are per exception type."""
        counts: dict[str, int] = {}
        for error in self.errors:
            name = type(error).__name__
            counts[name] = counts.get(name, 0) + 1
        return counts


class StudentStore(Protocol):
    """Abstraction for the persistence collaborator behind a handle."""

    def insert(self, student: Student) -> int:
        """Store one student and return its key."""
        raise NotImplementedError

    def insert_many(self, students: Sequence[Student]) -> list[int]:
        """Store every student atomically and return their keys in order."""
        raise NotImplementedError

    def count(self) -> int:
        """Return the number of stored students."""
        raise NotImplementedError

    def reset(self) -> None:
        """Drop and recreate the schema."""
        raise NotImplementedError

    def close(self) -> None:
        """Release underlying resources."""
        raise NotImplementedError


class Handle(Protocol):
    """Unit of work resolved from a scope."""

    id: str

    @property
    def closed(self) -> bool:
        """Whether the handle accepts further mutation."""
        raise NotImplementedError

    def add(self, item: Student) -> None:
        """Queue an item for the next commit."""
        raise NotImplementedError

    def commit(self, token: object | None = None) -> int:
        """Flush queued items and close the handle."""
        raise NotImplementedError

    async def commit_async(self, token: object | None = None) -> int:
        """Asynchronous variant of ``commit``."""
        raise NotImplementedError

    def close(self) -> None:
        """Discard queued items and close the handle."""
        raise NotImplementedError


__all__ = [
    "AggregatedFailure",
    "AlreadyRegistered",
    "CommitConflict",
    "Handle",
    "HandleClosed",
    "NotRegistered",
    "OperationCancelled",
    "ScopeDisposed",
    "ScopeError",
    "StudentStore",
]
