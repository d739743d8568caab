#!/usr/bin/env python3
"""Validate callscribe audit manifests found in the repository.

Each ``*.callscribe.yaml`` file is parsed with the same loader the ``audit``
command uses. With ``--probe`` every listed type is also resolved, which
catches renamed modules before the audit runs in CI.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Iterable
from pathlib import Path

DEFAULT_EXCLUDES = {".git", ".venv", "venv", "build", "dist", "__pycache__"}
MANIFEST_GLOB = "*.callscribe.yaml"


def iter_manifests(root: Path, excludes: set[str]) -> Iterable[Path]:
    """Yield manifest files under *root* while skipping excluded directories."""
    for path in root.rglob(MANIFEST_GLOB):
        if any(part in excludes for part in path.parts):
            continue
        if path.is_file():
            yield path


def validate_manifest(path: Path, probe: bool) -> list[str]:
    """Return the problems found in one manifest; empty when it is valid."""
    from callscribe.audit import load_manifest, probe_type
    from callscribe.recording.errors import ManifestError

    try:
        entries = load_manifest(path)
    except ManifestError as exc:
        return [str(exc)]

    if not probe:
        return []
    return [
        f"{entry.target}: {result.error}"
        for entry in entries
        if (result := probe_type(entry.target, expect=entry.expect)).error is not None
    ]


def main() -> int:
    project_root = Path(__file__).resolve().parent.parent
    parser = argparse.ArgumentParser(description="Validate callscribe audit manifests.")
    parser.add_argument("--root", type=Path, default=project_root, help="Directory to scan for manifests.")
    parser.add_argument(
        "--exclude",
        action="append",
        default=list(DEFAULT_EXCLUDES),
        help="Directories to exclude from the search (can be specified multiple times).",
    )
    parser.add_argument("--probe", action="store_true", help="Also resolve every listed type.")
    args = parser.parse_args()

    for entry in (project_root / "src", project_root):
        if str(entry) not in sys.path:
            sys.path.insert(0, str(entry))

    root = args.root.resolve()
    manifests = sorted(iter_manifests(root, set(args.exclude)))
    if not manifests:
        print("No audit manifests found.")
        return 0

    failures = 0
    for manifest in manifests:
        problems = validate_manifest(manifest, args.probe)
        relative_path = manifest.relative_to(root)
        if not problems:
            print(f"OK: {relative_path}")
            continue
        failures += 1
        print(f"ERROR: {relative_path}")
        for problem in problems:
            print(f"  {problem}")

    if failures:
        print(f"\n{failures} manifest(s) failed validation.")
        return 1

    print(f"\nValidated {len(manifests)} manifest(s).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
