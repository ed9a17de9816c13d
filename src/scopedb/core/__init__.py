"""Core utilities for configuration, logging, and handle scoping."""

from .config import AppSettings, DemoSettings, StorageSettings, load_app_settings
from .container import LifetimePolicy, Scope, ScopeManager
from .execution import CancellationToken, ExecutionStrategy
from .logging import configure_logging

__all__ = [
    "AppSettings",
    "CancellationToken",
    "DemoSettings",
    "ExecutionStrategy",
    "LifetimePolicy",
    "Scope",
    "ScopeManager",
    "StorageSettings",
    "configure_logging",
    "load_app_settings",
]
