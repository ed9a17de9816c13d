"""Scoped handle registry with per-scope and per-resolution lifetimes."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from types import TracebackType
from typing import Any

from .execution import (
    CancellationToken,
    ExecutionStrategy,
    run_as_tasks,
    run_in_threads,
)
from .interfaces import (
    AggregatedFailure,
    AlreadyRegistered,
    Handle,
    NotRegistered,
    ScopeDisposed,
)
from .models import RunReport

LOGGER = logging.getLogger(__name__)


class LifetimePolicy(str, Enum):
    """Whether resolutions within a scope share one handle."""

    PER_SCOPE = "per_scope"
    PER_RESOLUTION = "per_resolution"


@dataclass(frozen=True, slots=True)
class Registration:
    """Factory bound to a name together with its lifetime."""

    name: str
    factory: Callable[[], Handle]
    policy: LifetimePolicy


class Scope:
    """Logical unit of execution, such as one request, that owns handles.

    Under ``PER_SCOPE`` the first resolution of a name caches the handle and
    every later resolution through this scope returns it. Populating the
    cache is atomic; using the cached handle from several workers is not.
    """

    def __init__(self, manager: ScopeManager) -> None:
        """Create an empty scope owned by ``manager``."""
        self.id = uuid.uuid4().hex
        self.manager = manager
        self._instances: dict[str, Handle] = {}
        self._transients: list[Handle] = []
        self._lock = Lock()
        self._disposed = False

    def __enter__(self) -> Scope:
        """Enter context manager scope."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Dispose the scope and every handle it created."""
        self.dispose()

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def handle_count(self) -> int:
        """Number of open handles this scope will close on dispose."""
        with self._lock:
            handles = [*self._instances.values(), *self._transients]
        return sum(1 for handle in handles if not handle.closed)

    def resolve(self, name: str, token: CancellationToken | None = None) -> Handle:
        """Shortcut for ``self.manager.resolve(self, name, token)``."""
        return self.manager.resolve(self, name, token)

    def cached(self, name: str) -> Handle | None:
        """Return the handle cached under ``name``, if any."""
        with self._lock:
            return self._instances.get(name)

    def dispose(self) -> None:
        """Close every handle created through this scope."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            handles = [*self._instances.values(), *self._transients]
            self._instances.clear()
            self._transients.clear()
        for handle in handles:
            handle.close()
        LOGGER.debug("Disposed scope %s (%d handle(s))", self.id, len(handles))

    def _get_or_create(self, name: str, factory: Callable[[], Handle]) -> Handle:
        with self._lock:
            self._ensure_active()
            instance = self._instances.get(name)
            if instance is None:
                instance = factory()
                self._instances[name] = instance
                LOGGER.debug("Scope %s cached handle for '%s'", self.id, name)
            return instance

    def _create_transient(self, factory: Callable[[], Handle]) -> Handle:
        with self._lock:
            self._ensure_active()
            handle = factory()
            self._transients = [h for h in self._transients if not h.closed]
            self._transients.append(handle)
        return handle

    def _ensure_active(self) -> None:
        if self._disposed:
            raise ScopeDisposed(f"Scope {self.id} has been disposed")


class ScopeManager:
    """Registry mapping names to handle factories and their lifetimes."""

    def __init__(self) -> None:
        """Initialise registry storage."""
        self._registrations: dict[str, Registration] = {}
        self._lock = Lock()

    def register(
        self, name: str, factory: Callable[[], Handle], policy: LifetimePolicy
    ) -> None:
        """Bind ``factory`` to ``name`` under ``policy``."""
        registration = Registration(name, factory, LifetimePolicy(policy))
        with self._lock:
            if name in self._registrations:
                msg = f"Handle '{name}' is already registered"
                raise AlreadyRegistered(msg)
            self._registrations[name] = registration
        LOGGER.debug("Registered '%s' as %s", name, registration.policy.value)

    def registration(self, name: str) -> Registration:
        """Return the binding for ``name``."""
        with self._lock:
            registration = self._registrations.get(name)
        if registration is None:
            msg = f"Handle '{name}' is not registered"
            raise NotRegistered(msg)
        return registration

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._registrations

    def open_scope(self) -> Scope:
        """Create a new scope with no cached handles."""
        return Scope(self)

    def resolve(
        self, scope: Scope, name: str, token: CancellationToken | None = None
    ) -> Handle:
        """Return a handle for ``name`` according to its lifetime policy."""
        registration = self.registration(name)
        self._check_scope(scope)
        if token is not None:
            token.raise_if_cancelled()
        if registration.policy is LifetimePolicy.PER_RESOLUTION:
            return scope._create_transient(registration.factory)  # pylint: disable=protected-access
        return scope._get_or_create(name, registration.factory)  # pylint: disable=protected-access

    def run_concurrently(
        self,
        scope: Scope,
        name: str,
        items: Iterable[Any],
        concurrency: int,
        *,
        strategy: ExecutionStrategy | str = ExecutionStrategy.THREADS,
        token: CancellationToken | None = None,
    ) -> RunReport | AggregatedFailure:
        """Insert every item through a handle resolved per worker.

        Each worker resolves ``name`` from ``scope``, adds its item and
        commits. Failures are collected, never retried, and returned together
        as an ``AggregatedFailure``. The ``tasks`` strategy starts its own
        event loop; use ``run_concurrently_async`` from async code.
        """
        batch = self._prepare(scope, name, items, concurrency)
        strategy = ExecutionStrategy(strategy)
        LOGGER.info(
            "Running %d item(s) for '%s' with %d %s worker(s)",
            len(batch),
            name,
            concurrency,
            strategy.value,
        )
        if strategy is ExecutionStrategy.TASKS:
            committed, errors = asyncio.run(
                run_as_tasks(
                    lambda item: self._insert_one_async(scope, name, item, token),
                    batch,
                    concurrency,
                )
            )
        else:
            committed, errors = run_in_threads(
                lambda item: self._insert_one(scope, name, item, token),
                batch,
                concurrency,
            )
        return self._outcome(name, len(batch), committed, errors)

    async def run_concurrently_async(
        self,
        scope: Scope,
        name: str,
        items: Iterable[Any],
        concurrency: int,
        *,
        token: CancellationToken | None = None,
    ) -> RunReport | AggregatedFailure:
        """Awaitable ``run_concurrently`` using the running event loop."""
        batch = self._prepare(scope, name, items, concurrency)
        committed, errors = await run_as_tasks(
            lambda item: self._insert_one_async(scope, name, item, token),
            batch,
            concurrency,
        )
        return self._outcome(name, len(batch), committed, errors)

    def _check_scope(self, scope: Scope) -> None:
        if scope.manager is not self:
            raise ValueError(f"Scope {scope.id} belongs to a different manager")
        if scope.disposed:
            raise ScopeDisposed(f"Scope {scope.id} has been disposed")

    def _prepare(
        self, scope: Scope, name: str, items: Iterable[Any], concurrency: int
    ) -> list[Any]:
        self.registration(name)
        self._check_scope(scope)
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        return list(items)

    def _insert_one(
        self, scope: Scope, name: str, item: Any, token: CancellationToken | None
    ) -> int:
        handle = self.resolve(scope, name, token)
        handle.add(item)
        return handle.commit(token)

    async def _insert_one_async(
        self, scope: Scope, name: str, item: Any, token: CancellationToken | None
    ) -> int:
        handle = self.resolve(scope, name, token)
        handle.add(item)
        return await handle.commit_async(token)

    @staticmethod
    def _outcome(
        name: str, total: int, committed: int, errors: list[BaseException]
    ) -> RunReport | AggregatedFailure:
        if errors:
            failure = AggregatedFailure(errors)
            LOGGER.warning(
                "%d of %d worker(s) for '%s' failed: %s",
                len(errors),
                total,
                name,
                failure.counts_by_type(),
            )
            return failure
        LOGGER.info("Committed %d item(s) for '%s'", committed, name)
        return RunReport(committed_count=committed)


__all__ = ["LifetimePolicy", "Registration", "Scope", "ScopeManager"]
