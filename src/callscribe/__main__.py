from __future__ import annotations

import sys
from pathlib import Path


def _ensure_package_on_path() -> None:
    """Insert the ``src`` directory into ``sys.path`` when run as a script.

    Direct ``python __main__.py`` execution resolves imports as if this file
    lives at the top of ``sys.path``, so ``callscribe`` itself is not importable
    with absolute imports. Adding the parent directory keeps the CLI usable both
    as ``python -m callscribe`` and as a stand-alone script.
    """

    package_dir = Path(__file__).resolve().parent
    project_root = package_dir.parent
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        sys.path.insert(0, project_root_str)


def _load_app():
    _ensure_package_on_path()
    from callscribe.cli import app as cli_app

    return cli_app


app = _load_app()


def main() -> None:
    """Entrypoint for running the CLI application."""

    app()


if __name__ == "__main__":
    main()
