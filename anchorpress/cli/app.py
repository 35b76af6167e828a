"""Main Typer application — imports and registers all CLI commands.

Entry point: ``anchorpress`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from anchorpress.cli.commands.inspect_cmd import anchor_cmd, ledger_check_cmd, pin_status_cmd
from anchorpress.cli.commands.publish import publish_cmd
from anchorpress.cli.commands.verify import verify_cmd

app = typer.Typer(
    name="anchorpress",
    help="Anchorpress: publish documents to content-addressed storage and anchor them on a ledger.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="publish", help="Upload, pin, verify and anchor files.")(publish_cmd)
app.command(name="verify", help="Re-verify a CID against store, pins and ledger.")(verify_cmd)
app.command(name="pin-status", help="Show pin records.")(pin_status_cmd)
app.command(name="anchor", help="Show an anchored ledger document.")(anchor_cmd)
app.command(name="ledger-check", help="Verify the anchor ledger hash chain.")(ledger_check_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
