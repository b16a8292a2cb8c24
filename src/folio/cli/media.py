"""Media CLI commands."""

from __future__ import annotations

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from folio.engine.media_urls import resolve_media_url
from folio.errors import FolioError

app = typer.Typer(help="Media commands")
console = Console()


@app.command()
def resolve(
    value: Annotated[str, typer.Argument(help="Stored media URL or storage key")],
) -> None:
    """Print the URL the site serves a stored media reference from."""
    from folio.main import get_app_context

    ctx = get_app_context()
    console.print(resolve_media_url(value, ctx.config.storage.media_proxy_path))


@app.command()
def slot(
    project_id: Annotated[str, typer.Argument(help="Project ID")],
    content_type: Annotated[
        str,
        typer.Option("--type", "-t", help="MIME type (image/jpeg, image/png, image/webp, image/avif)"),
    ] = "image/jpeg",
    kind: Annotated[
        str,
        typer.Option("--kind", "-k", help="hero or gallery"),
    ] = "gallery",
    slug: Annotated[
        Optional[str],
        typer.Option("--slug", "-s", help="Project slug used in the storage key"),
    ] = None,
) -> None:
    """Issue a presigned upload slot."""
    from folio.cli import run_with_engine
    from folio.main import get_app_context

    ctx = get_app_context()
    try:
        upload = run_with_engine(
            ctx,
            lambda engine: engine.media.create_upload_slot(
                project_id, content_type, kind, project_slug=slug
            ),
        )
    except FolioError as e:
        console.print(f"[red]Error creating upload slot:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(
        Panel(
            f"[bold]Key:[/bold] {upload.key}\n"
            f"[bold]Upload URL:[/bold] {upload.upload_url}\n"
            f"[bold]Public URL:[/bold] {upload.public_url}",
            title="Upload Slot",
            border_style="green",
        )
    )
