"""``anchorpress verify CID`` — re-verify a CID against all three trust sources."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from anchorpress.cli.commands._settings import resolve_settings
from anchorpress.cli.renderer import PublicationRenderer
from anchorpress.core.backends import open_local_backends
from anchorpress.core.verifier import Verifier, save_report

console = Console()


def verify_cmd(
    cid: str = typer.Argument(..., help="Content identifier to verify."),
    json_out: Path = typer.Option(
        None,
        "--json-out",
        "-o",
        help="Write the verification report to this JSON file.",
    ),
    data_dir: Path = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Directory holding the local store, pin registry and ledger.",
    ),
    concurrent: bool = typer.Option(
        None,
        "--concurrent/--sequential",
        help="Run the three checks concurrently (defaults to settings).",
    ),
) -> None:
    """Verify availability, pin durability and ledger anchoring of CID.

    Exits with code 1 unless the overall status is VERIFIED.
    """
    settings = resolve_settings(data_dir, verify_concurrently=concurrent)
    backends = open_local_backends(settings)
    verifier = Verifier(backends.store, backends.pins, backends.ledger, settings)

    report = verifier.verify(cid)

    console.print()
    PublicationRenderer(console=console).print_report(report)

    if json_out is not None:
        save_report(report, json_out)
        console.print(f"[dim]Report written to {json_out}[/dim]")

    if not report.is_verified:
        raise typer.Exit(code=1)
