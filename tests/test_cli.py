"""Tests for the command-line interface."""

from __future__ import annotations

import pytest

from scopedb.cli import main


@pytest.fixture(autouse=True)
def memory_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCOPEDB_STORAGE__BACKEND", "memory")
    monkeypatch.setenv("SCOPEDB_LOGGING__LEVEL", "WARNING")


def test_info_prints_configuration(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["info"]) == 0
    output = capsys.readouterr().out
    assert "Storage backend: memory" in output


def test_demo_reports_both_policies(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["demo", "--items", "20", "--concurrency", "5"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "[scoped] FAILED" in output
    assert "[transient] OK: committed 20 student(s)" in output
    assert "[transient] students stored: 20" in output


def test_demo_single_policy_with_tasks(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(
        ["demo", "--policy", "transient", "--strategy", "tasks", "--items", "8"]
    )

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "[scoped]" not in output
    assert "committed 8 student(s)" in output


def test_demo_exits_nonzero_when_outcome_unexpected(
    capsys: pytest.CaptureFixture[str],
) -> None:
    # A single item cannot collide with itself, so sharing succeeds.
    exit_code = main(["demo", "--policy", "scoped", "--items", "1"])

    assert exit_code == 1
    assert "[scoped] OK" in capsys.readouterr().out
