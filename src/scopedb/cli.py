"""Command-line entry point for scopedb."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from scopedb.core import (
    AppSettings,
    DemoSettings,
    LifetimePolicy,
    configure_logging,
    load_app_settings,
)
from scopedb.core.interfaces import AggregatedFailure
from scopedb.scenario import run_scenario

POLICY_CHOICES = {
    "scoped": LifetimePolicy.PER_SCOPE,
    "transient": LifetimePolicy.PER_RESOLUTION,
}


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Share one data context across workers, or give each its own."
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="info",
        choices=["info", "demo"],
        help="Operation to execute.",
    )
    parser.add_argument(
        "--policy",
        choices=["scoped", "transient", "both"],
        default="both",
        help="Lifetime policy for the student context (default: both).",
    )
    parser.add_argument(
        "--strategy",
        choices=["threads", "tasks"],
        default=None,
        help="Execution strategy; overrides SCOPEDB_DEMO__STRATEGY.",
    )
    parser.add_argument(
        "--items",
        type=int,
        default=None,
        help="Number of students to insert; overrides SCOPEDB_DEMO__ITEMS.",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Concurrent workers; overrides SCOPEDB_DEMO__CONCURRENCY.",
    )
    return parser


def execute(args: argparse.Namespace, settings: AppSettings) -> int:
    """Execute the requested CLI command and return the exit code."""
    if args.command == "info":
        print("scopedb is ready. Run 'demo' to compare lifetime policies.")
        print(f"Storage backend: {settings.storage.backend}")
        print(f"Database path: {settings.storage.db_path}")
        print(
            f"Demo: {settings.demo.items} item(s), "
            f"{settings.demo.concurrency} worker(s), {settings.demo.strategy}"
        )
        return 0
    return _run_demo(settings, policy=args.policy, strategy=args.strategy)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_app_settings(env_file=args.env_file)
    demo_overrides = {
        key: value
        for key, value in (("items", args.items), ("concurrency", args.concurrency))
        if value is not None
    }
    if demo_overrides:
        demo = DemoSettings.model_validate(
            {**settings.demo.model_dump(), **demo_overrides}
        )
        settings = settings.model_copy(update={"demo": demo})
    configure_logging(settings.logging)
    return execute(args, settings)


def _run_demo(settings: AppSettings, *, policy: str, strategy: str | None) -> int:
    """Run the scenario for each requested policy and report the outcome."""
    selected = ["scoped", "transient"] if policy == "both" else [policy]
    unexpected = 0
    for label in selected:
        outcome, stored = run_scenario(settings, POLICY_CHOICES[label], strategy=strategy)
        if isinstance(outcome, AggregatedFailure):
            summary = ", ".join(
                f"{name} x{count}" for name, count in outcome.counts_by_type().items()
            )
            print(f"[{label}] FAILED: {len(outcome.errors)} worker error(s) ({summary})")
            expected = label == "scoped"
        else:
            print(f"[{label}] OK: committed {outcome.committed_count} student(s)")
            expected = label == "transient"
        print(f"[{label}] students stored: {stored}")
        if not expected:
            unexpected += 1
    return 1 if unexpected else 0


if __name__ == "__main__":
    sys.exit(main())
