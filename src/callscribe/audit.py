"""Check which collaborator types callscribe can wrap, driven by a YAML manifest.

A manifest lists types as ``module:QualifiedName`` strings, optionally with the
strategy the test author expects::

    types:
      - billing.gateway:PaymentGateway
      - type: billing.ledger:Ledger
        expect: subclass
"""

from __future__ import annotations

import dataclasses
import importlib
from pathlib import Path
from typing import Any

import yaml
from yaml import YAMLError

from callscribe.recording.errors import ManifestError
from callscribe.recording.logging_utils import LoggingManager
from callscribe.recording.strategy import DEFAULT_SELECTOR, ProxyStrategySelector
from callscribe.recording.types import LIMITATION_LABELS, InterceptionLimitation, ProxyStrategy


@dataclasses.dataclass
class ManifestEntry:
    """One type listed in an audit manifest."""

    target: str
    expect: ProxyStrategy | None = None


@dataclasses.dataclass
class TypeProbe:
    """Outcome of inspecting a single type."""

    target: str
    strategy: ProxyStrategy
    limitation: InterceptionLimitation | None = None
    expect: ProxyStrategy | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        if self.error is not None:
            return False
        if self.expect is not None:
            return self.strategy is self.expect
        return self.strategy is not ProxyStrategy.NOT_SUPPORTED

    @property
    def detail(self) -> str:
        if self.error is not None:
            return self.error
        if self.limitation is None:
            return ""
        return LIMITATION_LABELS[self.limitation]


@dataclasses.dataclass
class AuditReport:
    """Aggregate results of auditing a manifest."""

    manifest: str
    probes: list[TypeProbe]
    issues: list[str]

    @property
    def failures(self) -> int:
        return len(self.issues)


def _log_issue(issue: str, logger: LoggingManager | None) -> None:
    """Log an audit issue when a logger is provided."""

    if logger:
        logger.log(f"[FAIL] {issue}")


def resolve_type(target: str) -> Any:
    """Import ``module:QualifiedName`` and return the named object."""

    module_name, sep, qualname = target.partition(":")
    if not sep or not module_name or not qualname:
        raise ManifestError(f"Expected 'module:QualifiedName', got '{target}'")

    obj: Any = importlib.import_module(module_name)
    for part in qualname.split("."):
        obj = getattr(obj, part)
    return obj


def _parse_strategy(value: Any, source: str) -> ProxyStrategy | None:
    if value is None:
        return None
    try:
        return ProxyStrategy(str(value).lower())
    except ValueError as exc:
        allowed = sorted(strategy.value for strategy in ProxyStrategy)
        raise ManifestError(f"{source}: expect should be one of {allowed}, got '{value}'") from exc


def parse_manifest(data: Any, source: str = "<manifest>") -> list[ManifestEntry]:
    """Validate loaded YAML data and return its entries."""

    if not isinstance(data, dict) or not isinstance(data.get("types"), list):
        raise ManifestError(f"{source}: expected a mapping with a 'types' list")

    entries: list[ManifestEntry] = []
    for index, item in enumerate(data["types"]):
        if isinstance(item, str):
            entries.append(ManifestEntry(target=item))
        elif isinstance(item, dict) and isinstance(item.get("type"), str):
            entries.append(ManifestEntry(target=item["type"], expect=_parse_strategy(item.get("expect"), source)))
        else:
            raise ManifestError(f"{source}: entry {index} must be a string or a mapping with a 'type' key")
    return entries


def load_manifest(path: str | Path) -> list[ManifestEntry]:
    """Read and validate an audit manifest file."""

    manifest_path = Path(path)
    try:
        with manifest_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except YAMLError as exc:
        raise ManifestError(f"{manifest_path}: invalid YAML: {exc}") from exc
    except OSError as exc:
        raise ManifestError(f"{manifest_path}: {exc}") from exc
    return parse_manifest(data, str(manifest_path))


def probe_type(
    target: str,
    *,
    expect: ProxyStrategy | None = None,
    selector: ProxyStrategySelector = DEFAULT_SELECTOR,
) -> TypeProbe:
    """Resolve ``target`` and report the interception strategy that applies to it."""

    try:
        type_ = resolve_type(target)
    except (ImportError, AttributeError, ManifestError) as exc:
        return TypeProbe(target=target, strategy=ProxyStrategy.NOT_SUPPORTED, expect=expect, error=str(exc))

    return TypeProbe(
        target=target,
        strategy=selector.select(type_),
        limitation=selector.explain(type_),
        expect=expect,
    )


def audit_manifest(
    path: str | Path,
    *,
    selector: ProxyStrategySelector = DEFAULT_SELECTOR,
    logger: LoggingManager | None = None,
) -> AuditReport:
    """Probe every type in the manifest and collect the ones that need attention."""

    entries = load_manifest(path)
    probes: list[TypeProbe] = []
    issues: list[str] = []

    for entry in entries:
        probe = probe_type(entry.target, expect=entry.expect, selector=selector)
        probes.append(probe)
        if probe.ok:
            continue

        if probe.error is not None:
            issue = f"{entry.target}: cannot be resolved ({probe.error})"
        elif entry.expect is not None and probe.strategy is not entry.expect:
            issue = f"{entry.target}: expected {entry.expect.value}, got {probe.strategy.value}"
        else:
            issue = f"{entry.target}: {probe.detail}"
        issues.append(issue)
        _log_issue(issue, logger)

    if logger and not entries:
        logger.log(f"No types listed in {path}")

    return AuditReport(manifest=str(path), probes=probes, issues=issues)
