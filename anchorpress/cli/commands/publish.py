"""``anchorpress publish FILE...`` — publish files and write the manifest.

Each file goes through upload, pin, integrity check, anchor and
confirmation. Failures are reported per file without stopping the batch.
The session manifest is saved once at the end.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.panel import Panel

from anchorpress.cli.commands._settings import resolve_settings
from anchorpress.cli.renderer import PublicationRenderer
from anchorpress.core.backends import open_local_backends
from anchorpress.core.events import EventDispatcher, EventRecorder, LoggingObserver
from anchorpress.core.publisher import Publisher
from anchorpress.models.artifacts import Artifact
from anchorpress.models.publication import ArtifactError

console = Console()


def publish_cmd(
    files: List[Path] = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Files to publish.",
    ),
    name: str = typer.Option(
        None,
        "--name",
        "-n",
        help="Artifact name (single file only; defaults to the file name).",
    ),
    artifact_type: str = typer.Option(
        "document",
        "--type",
        "-t",
        help="Artifact type recorded in pin metadata.",
    ),
    critical: bool = typer.Option(
        False,
        "--critical",
        help="Mark the artifacts as critical in pin metadata.",
    ),
    manifest: Path = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Manifest output path (defaults to ANCHORPRESS_MANIFEST_PATH).",
    ),
    data_dir: Path = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Directory holding the local store, pin registry and ledger.",
    ),
    no_spacing: bool = typer.Option(
        False,
        "--no-spacing",
        help="Skip the delay between artifacts.",
    ),
    show_events: bool = typer.Option(
        False,
        "--events",
        help="Print the stage event timeline.",
    ),
) -> None:
    """Publish one or more files and save the publication manifest."""
    if name and len(files) > 1:
        console.print("[bold red]--name can only be used with a single file.[/bold red]")
        raise typer.Exit(code=2)

    settings = resolve_settings(data_dir, manifest_path=manifest)
    backends = open_local_backends(settings)
    recorder = EventRecorder()
    publisher = Publisher(
        backends.store,
        backends.pins,
        backends.ledger,
        settings,
        dispatcher=EventDispatcher([LoggingObserver(), recorder]),
    )

    metadata = {"type": artifact_type, "critical": critical}
    artifacts = [
        Artifact.from_path(path, name=name, metadata=metadata) for path in files
    ]

    outcomes = publisher.publish_all(
        artifacts, spacing_seconds=0 if no_spacing else None
    )

    renderer = PublicationRenderer(console=console)
    console.print()
    renderer.print_outcomes(outcomes)
    if show_events:
        console.print(renderer.render_events(recorder.events))

    document = publisher.save_manifest()
    failed = [o for o in outcomes if isinstance(o, ArtifactError)]

    console.print()
    console.print(
        Panel(
            "\n".join([
                f"[bold]Published:[/bold] {document.total_artifacts}/{len(outcomes)}",
                f"[bold]Failed:[/bold]    {len(failed)}",
                f"[bold]Manifest:[/bold]  {settings.manifest_path}",
            ]),
            title=f"[bold]{settings.framework_name}[/bold]",
            border_style="red" if failed else "green",
            padding=(1, 2),
        )
    )

    if failed:
        raise typer.Exit(code=1)
