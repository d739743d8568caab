#!/usr/bin/env python3
"""Launcher for the callscribe Typer CLI from a source checkout.

The local ``src`` directory is put on ``sys.path`` first so ``probe`` and
``audit`` run against the working tree rather than an installed copy. All
arguments are forwarded to the Typer application.
"""

from __future__ import annotations

import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    """Invoke the CLI, ensuring the local source tree is importable."""
    project_root = Path(__file__).resolve().parents[1]
    for entry in (project_root / "src", project_root):
        if str(entry) not in sys.path:
            sys.path.insert(0, str(entry))

    from callscribe.cli import app

    app(prog_name="callscribe", args=argv)


if __name__ == "__main__":
    main()
