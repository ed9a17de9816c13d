"""End-to-end concurrent insert scenario over a configured store."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from .core.config import AppSettings
from .core.container import LifetimePolicy, ScopeManager
from .core.execution import CancellationToken, ExecutionStrategy
from .core.interfaces import AggregatedFailure, StudentStore
from .core.models import RunReport, Student
from .storage import StudentContext, build_store

LOGGER = logging.getLogger(__name__)

HANDLE_NAME = "student"


def sample_students(count: int) -> Iterator[Student]:
    """Yield ``count`` fresh, unsaved students."""
    for index in range(count):
        yield Student(first_mid_name=f"Fname{index}", last_name=f"lname{index}")


def build_manager(
    store: StudentStore, policy: LifetimePolicy, commit_latency: float = 0.0
) -> ScopeManager:
    """Create a manager with the ``student`` context registered under ``policy``."""
    manager = ScopeManager()
    manager.register(
        HANDLE_NAME,
        lambda: StudentContext(store, commit_latency=commit_latency),
        policy,
    )
    return manager


def run_scenario(
    settings: AppSettings,
    policy: LifetimePolicy,
    *,
    strategy: ExecutionStrategy | str | None = None,
    store: StudentStore | None = None,
    token: CancellationToken | None = None,
) -> tuple[RunReport | AggregatedFailure, int]:
    """Reset the store, insert the configured students, and report the result.

    Returns the run outcome and the number of students stored afterwards.
    A store passed in by the caller is left open; one built here is closed.
    """
    demo = settings.demo
    owned = store is None
    active_store = build_store(settings.storage) if store is None else store
    try:
        active_store.reset()
        manager = build_manager(active_store, policy, demo.commit_latency_seconds)
        with manager.open_scope() as scope:
            outcome = manager.run_concurrently(
                scope,
                HANDLE_NAME,
                sample_students(demo.items),
                demo.concurrency,
                strategy=strategy or demo.strategy,
                token=token,
            )
        stored = active_store.count()
    finally:
        if owned:
            active_store.close()
    LOGGER.info("Policy %s stored %d student(s)", policy.value, stored)
    return outcome, stored


__all__ = ["HANDLE_NAME", "build_manager", "run_scenario", "sample_students"]
