"""Scoped versus per-resolution data contexts under concurrent load."""

from .core import CancellationToken, ExecutionStrategy, LifetimePolicy, ScopeManager
from .core.interfaces import AggregatedFailure
from .core.models import RunReport, Student

__all__ = [
    "AggregatedFailure",
    "CancellationToken",
    "ExecutionStrategy",
    "LifetimePolicy",
    "RunReport",
    "ScopeManager",
    "Student",
]
