"""Main CLI entry point for Folio.

This module provides the main Typer application with sub-commands for draft
management and media utilities.

Usage:
    folio init-db
    folio drafts create
    folio drafts publish <project-id> payload.json
    folio media resolve "https://pub-123.r2.dev/projects/a/hero.jpg"
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from folio.cli import drafts as drafts_cli
from folio.cli import media as media_cli
from folio.config import FolioConfig, load_config
from folio.database.connection import get_engine, get_session_factory
from folio.database.models import Base
from folio.engine.factory import FolioEngine, build_engine
from folio.logging import new_correlation_id, set_correlation_id, setup_logging
from folio.storage.s3 import S3BlobStore

app = typer.Typer(
    name="folio",
    help="Folio: portfolio content publishing engine",
    no_args_is_help=True,
)

app.add_typer(drafts_cli.app, name="drafts", help="Manage draft projects")
app.add_typer(media_cli.app, name="media", help="Media utilities")

console = Console()


class AppContext:
    """Resources one CLI invocation works with.

    The database engine is created eagerly so that a bad URL fails before any
    command runs; the S3 client is only built on first media call.
    """

    def __init__(self, config: FolioConfig):
        self.config = config
        self.engine = get_engine(config.database)
        self.session_factory = get_session_factory(self.engine)
        self.blob_store = S3BlobStore(config.storage)

    def build_engine(self) -> FolioEngine:
        """Assemble the publishing engine services."""
        return build_engine(self.config, self.session_factory, self.blob_store)


_context: AppContext | None = None


def get_app_context() -> AppContext:
    """Context set up by the root callback for the running command."""
    if _context is None:
        raise RuntimeError("folio CLI context is not set up; run through the folio app")
    return _context


def initialize_context(config: FolioConfig) -> AppContext:
    global _context
    _context = AppContext(config)
    return _context


@app.command("init-db")
def init_db() -> None:
    """Create all tables in the configured database.

    Intended for local development and tests; production schemas are
    managed with Alembic (``alembic upgrade head``).
    """
    ctx = get_app_context()

    async def _create_all() -> None:
        async with ctx.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await ctx.engine.dispose()

    try:
        asyncio.run(_create_all())
    except Exception as e:
        console.print(f"[red]Error creating schema:[/red] {e}")
        raise typer.Exit(code=1)

    console.print("[green]Database schema created[/green]")


@app.callback()
def main_callback(
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (TOML format)",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Load configuration, set up logging and open the database engine."""
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(code=1)

    if verbose:
        config.logging = config.logging.model_copy(update={"level": "DEBUG"})
    setup_logging(config.logging)
    set_correlation_id(new_correlation_id())

    try:
        initialize_context(config)
    except Exception as e:
        console.print(f"[red]Cannot open the database:[/red] {e}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
