"""Core domain models used across the application."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Student:
    """Entity persisted by the demonstration workers."""

    first_mid_name: str
    last_name: str
    id: int | None = None


@dataclass(slots=True, frozen=True)
class RunReport:
    """Outcome summary for a concurrent run where every worker committed."""

    committed_count: int


__all__ = ["RunReport", "Student"]
