"""Storage backends and the unit-of-work context."""

from ..core.config import StorageSettings
from ..core.interfaces import StudentStore
from .context import StudentContext
from .memory import InMemoryStudentStore
from .sqlite import SqliteStudentStore


def build_store(settings: StorageSettings) -> StudentStore:
    """Create the store selected by ``settings.backend``."""
    if settings.backend == "memory":
        return InMemoryStudentStore()
    return SqliteStudentStore(settings)


__all__ = [
    "InMemoryStudentStore",
    "SqliteStudentStore",
    "StudentContext",
    "build_store",
]
