"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from scopedb.core.config import DemoSettings, load_app_settings


def test_defaults_loaded_without_env_file() -> None:
    """Default values should be returned when no overrides are present."""

    settings = load_app_settings(include_environment=False)
    assert settings.storage.backend == "sqlite"
    assert settings.storage.db_path == Path("./scopedb.db")
    assert settings.demo.items == 100
    assert settings.demo.concurrency == 100
    assert settings.demo.strategy == "threads"


def test_env_file_overrides(tmp_path: Path) -> None:
    """Values defined in an env file should override defaults."""

    env_file = tmp_path / "test.env"
    env_file.write_text(
        "SCOPEDB_DEMO__STRATEGY=tasks\n"
        "SCOPEDB_DEMO__ITEMS=12\n"
        "SCOPEDB_LOGGING__STRUCTURED=true\n"
        "OTHER_SETTING=ignored\n",
        encoding="utf-8",
    )

    settings = load_app_settings(env_file=env_file, include_environment=False)
    assert settings.demo.strategy == "tasks"
    assert settings.demo.items == 12
    assert settings.logging.structured is True


def test_environment_wins_over_env_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / "test.env"
    env_file.write_text("SCOPEDB_STORAGE__BACKEND=sqlite\n", encoding="utf-8")
    monkeypatch.setenv("SCOPEDB_STORAGE__BACKEND", "memory")

    settings = load_app_settings(env_file=env_file)
    assert settings.storage.backend == "memory"


def test_invalid_concurrency_rejected() -> None:
    with pytest.raises(ValidationError):
        DemoSettings(concurrency=0)
