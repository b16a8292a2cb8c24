"""Draft management CLI commands.

Payloads for save, publish and unpublish are read from a JSON file holding
the editor form (slug, title, category, location, year, hero_image,
hero_caption, excerpt, description, meta, services, collaborators, gallery).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from folio.engine.documents import ProjectPayload
from folio.engine.views import AdminProject
from folio.errors import FolioError, ProjectValidationError

app = typer.Typer(help="Draft management commands")
console = Console()

STATUS_COLORS = {
    "draft": "yellow",
    "published": "green",
    "archived": "dim",
}

PayloadFile = Annotated[
    Path,
    typer.Argument(
        help="Path to the project payload JSON file",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]
ActorOption = Annotated[
    Optional[str],
    typer.Option("--actor", "-a", help="Acting principal recorded on the change"),
]


def _read_payload(path: Path) -> ProjectPayload:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return ProjectPayload.model_validate(json.load(f))
    except (json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]Invalid payload file:[/red] {e}")
        raise typer.Exit(code=1)


def _report_error(action: str, error: Exception) -> None:
    if isinstance(error, ProjectValidationError):
        console.print(f"[red]Validation failed while trying to {action}:[/red]")
        for detail in error.details:
            console.print(f"  - {detail}")
    else:
        console.print(f"[red]Error trying to {action}:[/red] {error}")


def _run(action: str, operation):
    from folio.cli import run_with_engine
    from folio.main import get_app_context

    ctx = get_app_context()
    try:
        return run_with_engine(ctx, operation)
    except FolioError as e:
        _report_error(action, e)
        raise typer.Exit(code=1)


def _print_project(project: AdminProject, title: str) -> None:
    color = STATUS_COLORS.get(project.status.value, "white")
    panel = Panel(
        f"[bold]ID:[/bold] {project.id}\n"
        f"[bold]Slug:[/bold] {project.slug}\n"
        f"[bold]Title:[/bold] {project.title}\n"
        f"[bold]Status:[/bold] [{color}]{project.status.value}[/{color}]\n"
        f"[bold]Revision:[/bold] {project.revision}\n"
        f"[bold]Gallery:[/bold] {len(project.gallery)} images",
        title=title,
        border_style=color,
    )
    console.print(panel)


@app.command("list")
def list_drafts(
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (table or json)"),
    ] = "table",
) -> None:
    """List all non-deleted projects, most recently edited first."""
    projects = _run("list drafts", lambda engine: engine.publisher.list_drafts())

    if format == "json":
        output = [project.model_dump(mode="json") for project in projects]
        console.print_json(data=output)
        return

    if not projects:
        console.print("[yellow]No projects found[/yellow]")
        return

    table = Table(title="Projects")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Slug")
    table.add_column("Status", style="magenta")
    table.add_column("Rev", justify="right")
    table.add_column("Edited", style="dim")

    for p in projects:
        color = STATUS_COLORS.get(p.status.value, "white")
        table.add_row(
            p.id,
            p.title,
            p.slug,
            f"[{color}]{p.status.value}[/{color}]",
            str(p.revision),
            p.last_edited.strftime("%Y-%m-%d %H:%M") if p.last_edited else "",
        )

    console.print(table)


@app.command()
def show(
    project_id: Annotated[str, typer.Argument(help="Project ID")],
) -> None:
    """Show one draft as JSON."""
    project = _run("load the draft", lambda engine: engine.publisher.get_draft(project_id))
    console.print_json(data=project.model_dump(mode="json"))


@app.command()
def create(actor: ActorOption = None) -> None:
    """Create a placeholder draft."""
    project = _run("create a draft", lambda engine: engine.publisher.create_draft(actor))
    _print_project(project, "Draft Created")


@app.command()
def save(
    project_id: Annotated[str, typer.Argument(help="Project ID")],
    payload_file: PayloadFile,
    actor: ActorOption = None,
) -> None:
    """Save editor changes to a draft."""
    payload = _read_payload(payload_file)
    project = _run(
        "save the draft",
        lambda engine: engine.publisher.save_draft(project_id, payload, actor),
    )
    _print_project(project, "Draft Saved")


@app.command()
def publish(
    project_id: Annotated[str, typer.Argument(help="Project ID")],
    payload_file: PayloadFile,
    actor: ActorOption = None,
) -> None:
    """Validate strictly and publish a draft."""
    payload = _read_payload(payload_file)
    project = _run(
        "publish",
        lambda engine: engine.publisher.publish(project_id, payload, actor),
    )
    _print_project(project, "Project Published")


@app.command()
def unpublish(
    project_id: Annotated[str, typer.Argument(help="Project ID")],
    payload_file: PayloadFile,
    actor: ActorOption = None,
) -> None:
    """Save a draft and take its public snapshot offline."""
    payload = _read_payload(payload_file)
    project = _run(
        "unpublish",
        lambda engine: engine.publisher.unpublish(project_id, payload, actor),
    )
    _print_project(project, "Project Unpublished")


@app.command()
def delete(
    project_id: Annotated[str, typer.Argument(help="Project ID")],
    actor: ActorOption = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the confirmation prompt"),
    ] = False,
) -> None:
    """Archive a project and release its unused media."""
    if not yes:
        typer.confirm(f"Archive project {project_id}?", abort=True)
    project = _run(
        "delete the draft",
        lambda engine: engine.publisher.delete_draft(project_id, actor),
    )
    _print_project(project, "Project Archived")


@app.command()
def duplicate(
    project_id: Annotated[str, typer.Argument(help="Project ID")],
    actor: ActorOption = None,
) -> None:
    """Copy a project into a new draft."""
    project = _run(
        "duplicate",
        lambda engine: engine.publisher.duplicate(project_id, actor),
    )
    _print_project(project, "Draft Duplicated")
