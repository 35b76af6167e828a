"""Rich terminal rendering for publication outcomes and verification reports.

Color scheme
------------
- green   : PASS / published and verified
- yellow  : WARNING / published with issues
- red     : FAIL / failed
- magenta : ERROR (source could not be checked)
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from anchorpress.models.events import EventKind, PipelineEvent
from anchorpress.models.publication import ArtifactError, Publication
from anchorpress.models.reports import CheckStatus, OverallStatus, VerificationReport

_CHECK_STYLES: dict[CheckStatus, str] = {
    CheckStatus.PASS: "[green]PASS[/green]",
    CheckStatus.FAIL: "[bold red]FAIL[/bold red]",
    CheckStatus.WARNING: "[yellow]WARNING[/yellow]",
    CheckStatus.ERROR: "[magenta]ERROR[/magenta]",
}

_EVENT_STYLES: dict[EventKind, str] = {
    EventKind.STAGE_STARTED: "dim",
    EventKind.STAGE_SUCCEEDED: "green",
    EventKind.STAGE_DEGRADED: "yellow",
    EventKind.STAGE_FAILED: "bold red",
    EventKind.PUBLICATION_COMPLETED: "bold green",
}


class PublicationRenderer:
    """Renders anchorpress results as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance. A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Publication outcomes
    # ------------------------------------------------------------------

    def render_outcomes(self, outcomes: Sequence[Publication | ArtifactError]) -> Table:
        table = Table(title="Publication Results", header_style="bold cyan", expand=True)
        table.add_column("Artifact", style="cyan", min_width=16)
        table.add_column("Result", justify="center")
        table.add_column("CID / Stage", overflow="fold")
        table.add_column("Document", justify="right")
        table.add_column("Notes", overflow="fold")

        for outcome in outcomes:
            if isinstance(outcome, ArtifactError):
                table.add_row(
                    outcome.name,
                    "[bold red]FAILED[/bold red]",
                    f"[red]{outcome.stage.value}[/red]",
                    "[dim]-[/dim]",
                    f"{outcome.error_type}: {outcome.message}",
                )
                continue

            if outcome.issues:
                result = "[yellow]PUBLISHED*[/yellow]"
                notes = "; ".join(f"{i.kind}: {i.message}" for i in outcome.issues)
            else:
                result = "[green]PUBLISHED[/green]"
                notes = "[dim]pinned, anchored, confirmed[/dim]"
            table.add_row(
                outcome.name,
                result,
                outcome.cid,
                str(outcome.anchor.document_id),
                notes,
            )
        return table

    def print_outcomes(self, outcomes: Sequence[Publication | ArtifactError]) -> None:
        self.console.print(self.render_outcomes(outcomes))

    # ------------------------------------------------------------------
    # Verification report
    # ------------------------------------------------------------------

    def render_report(self, report: VerificationReport) -> Panel:
        table = Table(header_style="bold cyan", expand=True)
        table.add_column("Check", min_width=20)
        table.add_column("Status", justify="center", width=10)
        table.add_column("Message", overflow="fold")

        for check in report.checks:
            table.add_row(
                check.name,
                _CHECK_STYLES.get(check.status, check.status.value),
                check.message,
            )

        summary = report.summary
        overall = (
            "[bold green]VERIFIED[/bold green]"
            if summary.overall_status == OverallStatus.VERIFIED
            else "[bold red]FAILED[/bold red]"
        )
        footer = Text.from_markup(
            "  |  ".join([
                f"[bold]Checks:[/bold] {summary.total}",
                f"[green]Passed:[/green] {summary.passed}",
                f"[red]Failed:[/red] {summary.failed}",
                f"[yellow]Warnings:[/yellow] {summary.warnings}",
                f"[magenta]Errors:[/magenta] {summary.errors}",
                f"[bold]Overall:[/bold] {overall}",
            ])
        )
        return Panel(
            Group(table, Text(""), footer),
            title=f"[bold]Verification[/bold] {report.cid}",
            border_style="green" if report.is_verified else "red",
            padding=(1, 2),
        )

    def print_report(self, report: VerificationReport) -> None:
        self.console.print(self.render_report(report))

    # ------------------------------------------------------------------
    # Event timeline
    # ------------------------------------------------------------------

    def render_events(self, events: Sequence[PipelineEvent]) -> Table:
        table = Table(title="Pipeline Events", header_style="bold cyan", expand=True)
        table.add_column("Time", style="dim", width=10)
        table.add_column("Artifact", style="cyan")
        table.add_column("Stage")
        table.add_column("Event")
        table.add_column("Message", overflow="fold")

        for event in events:
            style = _EVENT_STYLES.get(event.kind, "")
            table.add_row(
                event.timestamp_utc.strftime("%H:%M:%S"),
                event.artifact_name or "-",
                event.stage.value if event.stage else "-",
                Text(event.kind.value, style=style),
                event.message,
            )
        return table
