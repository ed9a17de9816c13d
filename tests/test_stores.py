"""Tests for the SQLite and in-memory student stores."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from scopedb.core.config import StorageSettings
from scopedb.core.interfaces import CommitConflict
from scopedb.core.models import Student
from scopedb.storage import (
    InMemoryStudentStore,
    SqliteStudentStore,
    build_store,
)


@pytest.fixture(params=["memory", "sqlite"])
def store(request: pytest.FixtureRequest, tmp_path: Path):
    if request.param == "memory":
        yield InMemoryStudentStore()
        return
    sqlite_store = SqliteStudentStore(StorageSettings(db_path=tmp_path / "s.db"))
    yield sqlite_store
    sqlite_store.close()


def test_insert_assigns_sequential_keys(store) -> None:
    first = store.insert(Student("Ada", "Lovelace"))
    second = store.insert(Student("Alan", "Turing"))
    assert second > first
    assert store.count() == 2


def test_duplicate_key_raises_conflict(store) -> None:
    store.insert(Student("Ada", "Lovelace", id=7))
    with pytest.raises(CommitConflict):
        store.insert(Student("Grace", "Hopper", id=7))
    assert store.count() == 1


def test_insert_many_is_atomic(store) -> None:
    store.insert(Student("Ada", "Lovelace", id=3))
    batch = [Student("Alan", "Turing"), Student("Grace", "Hopper", id=3)]
    with pytest.raises(CommitConflict):
        store.insert_many(batch)
    assert store.count() == 1


def test_reset_drops_rows(store) -> None:
    store.insert_many([Student(f"F{i}", f"L{i}") for i in range(5)])
    store.reset()
    assert store.count() == 0
    store.insert(Student("Ada", "Lovelace"))
    assert store.count() == 1


def test_sqlite_rows_visible_to_other_connections(tmp_path: Path) -> None:
    db_path = tmp_path / "students.db"
    with SqliteStudentStore(StorageSettings(db_path=db_path)) as store:
        store.insert(Student("Fname0", "lname0"))

    with sqlite3.connect(db_path) as conn:
        row = conn.execute("SELECT first_mid_name, last_name FROM student").fetchone()
    assert tuple(row) == ("Fname0", "lname0")


def test_build_store_honours_backend(tmp_path: Path) -> None:
    assert isinstance(build_store(StorageSettings(backend="memory")), InMemoryStudentStore)
    sqlite_store = build_store(StorageSettings(db_path=tmp_path / "b.db"))
    assert isinstance(sqlite_store, SqliteStudentStore)
    sqlite_store.close()
