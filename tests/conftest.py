"""Shared fixtures for the scopedb test suite."""

from __future__ import annotations

import pytest

from scopedb.core.config import load_app_settings
from scopedb.storage import InMemoryStudentStore


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    """Ensure each test sees a fresh settings instance."""

    load_app_settings.cache_clear()


@pytest.fixture
def memory_store() -> InMemoryStudentStore:
    return InMemoryStudentStore()

