"""Console entrypoints for the callscribe toolkit."""

import typer
from rich.console import Console

from callscribe.audit import audit_manifest, probe_type
from callscribe.panel import print_audit_report
from callscribe.recording.errors import ManifestError
from callscribe.recording.logging_utils import DEFAULT_LOGGER
from callscribe.recording.strategy import DEFAULT_SELECTOR
from callscribe.recording.types import PROXY_STRATEGY_LABELS, ProxyStrategy


class CallscribeCLI:
    """Object-oriented wrapper for the Typer command-line interface."""

    def __init__(self) -> None:
        self.logger = DEFAULT_LOGGER
        self.selector = DEFAULT_SELECTOR
        self.app = typer.Typer(help="Check how legacy collaborators can be wrapped for call recording.")
        self.app.callback()(self._main)
        self.app.command("probe")(self._probe)
        self.app.command("audit")(self._audit)

    def _main(
        self,
        verbose: bool = typer.Option(
            False,
            "--verbose",
            help="Enable verbose debug logging.",
        ),
        log_file: str | None = typer.Option(
            None,
            "--log-file",
            help="Also append log output to this file.",
        ),
    ) -> None:
        """Configure logging before running a subcommand."""
        self.logger.setup(verbose, log_file)

    def _probe(
        self,
        target: str = typer.Argument(..., help="Type to inspect, as module:QualifiedName."),
    ) -> None:
        """Show which interception strategy applies to a single type."""

        probe = probe_type(target, selector=self.selector)
        if probe.error is not None:
            typer.echo(f"Failed to resolve {target}: {probe.error}", err=True)
            raise typer.Exit(code=1)

        typer.echo(f"{target}: {PROXY_STRATEGY_LABELS[probe.strategy]}")
        typer.echo(probe.detail)
        if probe.strategy is ProxyStrategy.NOT_SUPPORTED:
            raise typer.Exit(code=1)
        raise typer.Exit(code=0)

    def _audit(
        self,
        manifest: str = typer.Argument(..., help="YAML manifest listing the types to audit."),
    ) -> None:
        """Audit every type listed in a manifest and render a summary table."""

        try:
            report = audit_manifest(manifest, selector=self.selector, logger=self.logger)
        except ManifestError as exc:
            typer.echo(f"Failed to load manifest: {exc}", err=True)
            raise typer.Exit(code=1) from exc

        console = Console(force_terminal=False)
        print_audit_report(report, console=console)

        for issue in report.issues:
            typer.echo(f"[FAIL] {issue}", err=True)

        summary = f"Audited {len(report.probes)} types; {report.failures} failures."
        if report.failures:
            typer.echo(summary, err=True)
            raise typer.Exit(code=1)

        typer.echo(summary)
        raise typer.Exit(code=0)

    def run(self) -> None:
        """Invoke the Typer application."""
        self.app()


cli = CallscribeCLI()
app = cli.app


if __name__ == "__main__":
    cli.run()
