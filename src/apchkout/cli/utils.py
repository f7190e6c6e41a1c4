"""Utility functions for the CLI."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from apchkout.config import EnvConfig
from apchkout.core.path_utils import get_django_root, get_project_root
from apchkout.exceptions import ApchkoutError
from apchkout.managers import (
    DatabaseManager,
    GitManager,
    MigrationRunner,
    WorkspaceManager,
)

console = Console()


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG shows every external command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def print_progress(message: str) -> None:
    console.print(f"[cyan]{escape(message)}[/cyan]")


def print_error(error: ApchkoutError) -> None:
    """Print an error and its remediation hint."""
    console.print(f"[red]❌ {escape(error.message)}[/red]")
    output = getattr(error, "output", None)
    if output:
        console.print(f"[dim]{escape(output)}[/dim]")
    if error.hint:
        console.print(f"[yellow]{escape(error.hint)}[/yellow]")


def confirm(prompt: str) -> bool:
    """Ask a yes/no question; only an explicit yes counts as yes."""
    try:
        reply = typer.prompt(f"{prompt} (y/N)", default="", show_default=False)
    except typer.Abort:
        # EOF or Ctrl-C at the prompt
        console.print()
        return False
    return reply.strip().lower() in ("y", "yes")


def build_workspace(start_path: Optional[Path] = None) -> WorkspaceManager:
    """Run preflight checks and wire up a workspace for the current project.

    Checks, in order: git work tree, django-root directory, .env file,
    required settings, database connection. Nothing is mutated until all of
    them pass.

    Raises:
        PreflightError: If any check fails
        DatabaseUnavailable: If the server cannot be reached
    """
    project_root = get_project_root(start_path)
    django_root = get_django_root(project_root)

    config = EnvConfig(project_root)
    config.load()
    settings = config.settings()

    database = DatabaseManager(settings)
    console.print("[dim]Testing database connection...[/dim]")
    database.test_connection()

    return WorkspaceManager(
        config,
        GitManager(project_root),
        database,
        migrations=MigrationRunner(django_root),
        on_progress=print_progress,
    )
