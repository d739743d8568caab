#!/usr/bin/env python3
"""Run the lint, format and test gates one after another.

Every gate runs even when an earlier one fails, so a single invocation lists
all problems. ``--fix`` lets Ruff rewrite files instead of only checking them.
"""

from __future__ import annotations

import argparse
import subprocess
from typing import Final

Command = tuple[str, list[str]]

CHECK_COMMANDS: Final[list[Command]] = [
    ("ruff check", ["ruff", "check", "."]),
    ("ruff format --check", ["ruff", "format", "--check", "."]),
    ("pytest", ["pytest", "-q"]),
]

FIX_COMMANDS: Final[list[Command]] = [
    ("ruff check --fix", ["ruff", "check", "--fix", "."]),
    ("ruff format", ["ruff", "format", "."]),
    ("pytest", ["pytest", "-q"]),
]


def run_command(label: str, command: list[str]) -> int:
    """Execute a single gate and report its exit status."""
    print(f"Running {label}...")
    try:
        result = subprocess.run(command, check=False)
    except FileNotFoundError:
        print(f"{label} skipped: {command[0]} is not installed.")
        return 127
    print(f"{label} {'passed' if result.returncode == 0 else 'failed'} with exit code {result.returncode}.")
    return result.returncode


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the callscribe quality gates.")
    parser.add_argument("--fix", action="store_true", help="Apply Ruff fixes and formatting before testing.")
    args = parser.parse_args(argv)

    failures = [
        (label, code)
        for label, command in (FIX_COMMANDS if args.fix else CHECK_COMMANDS)
        if (code := run_command(label, command)) != 0
    ]

    if failures:
        print("\nSummary: some gates failed:")
        for label, code in failures:
            print(f" - {label}: exit code {code}")
        raise SystemExit(1)

    print("\nSummary: all gates passed.")
    raise SystemExit(0)


if __name__ == "__main__":
    main()
