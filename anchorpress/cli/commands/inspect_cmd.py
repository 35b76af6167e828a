"""Read-only inspection commands for the local backends.

* ``anchorpress pin-status`` — list pin records, or show one CID.
* ``anchorpress anchor DOCUMENT_ID`` — show an anchored document.
* ``anchorpress ledger-check`` — verify the ledger hash chain.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from anchorpress.cli.commands._settings import resolve_settings
from anchorpress.core.backends import open_local_backends
from anchorpress.core.errors import AnchorNotFound, LedgerIntegrityError
from anchorpress.models.artifacts import PinStatus

console = Console()

_DATA_DIR_HELP = "Directory holding the local store, pin registry and ledger."

_PIN_STYLES = {
    PinStatus.PINNED: "[green]pinned[/green]",
    PinStatus.PENDING: "[yellow]pending[/yellow]",
    PinStatus.UNPINNED: "[red]unpinned[/red]",
}


def pin_status_cmd(
    cid: str = typer.Argument(None, help="Show a single CID instead of all pins."),
    status: PinStatus = typer.Option(
        None, "--status", "-s", help="Filter the listing by pin status."
    ),
    data_dir: Path = typer.Option(None, "--data-dir", "-d", help=_DATA_DIR_HELP),
) -> None:
    """Show pin records from the local pin registry."""
    settings = resolve_settings(data_dir)
    pins = open_local_backends(settings).pins

    if cid:
        record = pins.status(cid)
        if record is None:
            console.print(f"[yellow]{cid} is not pinned.[/yellow]")
            raise typer.Exit(code=1)
        records = [record]
    else:
        records = pins.list_pins(status=status)

    if not records:
        console.print("[dim]No pins recorded.[/dim]")
        return

    table = Table(title="Pins", header_style="bold cyan", expand=True)
    table.add_column("CID", overflow="fold")
    table.add_column("Status", justify="center")
    table.add_column("Pinned at", style="dim")
    table.add_column("Name", style="cyan")

    for record in records:
        table.add_row(
            record.cid,
            _PIN_STYLES.get(record.status, record.status.value),
            record.pinned_at.strftime("%Y-%m-%d %H:%M:%S"),
            record.metadata.get("name", "-"),
        )
    console.print(table)


def anchor_cmd(
    document_id: int = typer.Argument(..., help="Ledger document id."),
    data_dir: Path = typer.Option(None, "--data-dir", "-d", help=_DATA_DIR_HELP),
) -> None:
    """Show the ledger entry for an anchored document."""
    settings = resolve_settings(data_dir)
    ledger = open_local_backends(settings).ledger

    try:
        record = ledger.lookup_by_id(document_id)
    except AnchorNotFound as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc

    lines = [
        f"[bold]Name:[/bold]        {record.name}",
        f"[bold]CID:[/bold]         {record.cid}",
        f"[bold]Timestamp:[/bold]   {record.timestamp}",
        f"[bold]Anchored by:[/bold] {record.anchored_by or '-'}",
        f"[bold]Tx ref:[/bold]      {record.transaction_ref}",
        f"[bold]Block:[/bold]       {record.confirmed_at_block}",
    ]
    console.print(
        Panel(
            "\n".join(lines),
            title=f"[bold]Document {record.document_id}[/bold]",
            border_style="cyan",
            padding=(1, 2),
        )
    )


def ledger_check_cmd(
    data_dir: Path = typer.Option(None, "--data-dir", "-d", help=_DATA_DIR_HELP),
) -> None:
    """Verify every hash link in the anchor ledger."""
    settings = resolve_settings(data_dir)
    ledger = open_local_backends(settings).ledger

    try:
        ledger.verify_chain()
    except LedgerIntegrityError as exc:
        console.print(f"[bold red]Ledger integrity FAILED:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    console.print(
        f"[green]Ledger chain intact[/green] ({ledger.count()} documents)"
    )
