"""Render audit reports as rich tables."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from callscribe.audit import AuditReport
from callscribe.recording.types import PROXY_STRATEGY_LABELS


def build_audit_table(report: AuditReport) -> Table:
    """Build a table with one row per probed type."""

    table = Table("Type", "Strategy", "Expected", "Status", "Detail", expand=True)
    for probe in report.probes:
        expected = probe.expect.value if probe.expect is not None else "-"
        status = "[green]OK[/green]" if probe.ok else "[red]FAIL[/red]"
        table.add_row(probe.target, PROXY_STRATEGY_LABELS[probe.strategy], expected, status, probe.detail)
    return table


def print_audit_report(report: AuditReport, console: Console | None = None) -> None:
    """Render and print an audit report to the provided console."""

    output_console = console or Console(force_terminal=False)
    printer = output_console.print

    if not report.probes:
        printer(f"No types listed in {report.manifest}.")
        return

    title = f"callscribe audit: {report.manifest}"
    printer(Panel(build_audit_table(report), title=title, expand=True))
