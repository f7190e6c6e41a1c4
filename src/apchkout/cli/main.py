"""Main CLI entry point for apchkout."""

from pathlib import Path
from typing import List, Optional

import typer

from apchkout.cli.dispatcher import Dispatcher
from apchkout.cli.utils import (
    build_workspace,
    configure_logging,
    confirm,
    console,
    print_error,
)
from apchkout.exceptions import ApchkoutError, MissingArgument, UnknownOption
from apchkout.managers.git import GitManager

ALIAS_NAME = "apchkout"
ALIAS_COMMAND = "!apchkout"

EPILOG = """\b
Examples:
  apchkout feature/new-api --with-db           Create branch and database (or switch if exists)
  apchkout feature/existing --with-db --force  Force recreate database with fresh migrations
  apchkout feature/existing                    Just checkout branch
  apchkout --list                              List all databases
  apchkout --clean                             Clean up old databases
  apchkout --drop app_feature_old              Drop specific database
  apchkout --drop --all                        Drop all branched databases
"""

app = typer.Typer(
    name="apchkout",
    help="Git checkout with per-branch database management",
    add_completion=False,
    rich_markup_mode=None,
)


def _usage_error(ctx: typer.Context, error: ApchkoutError) -> None:
    print_error(error)
    console.print()
    console.print(ctx.get_help(), markup=False, highlight=False)
    raise typer.Exit(1)


def _install_alias() -> None:
    git = GitManager(Path.cwd())
    git.set_global_alias(ALIAS_NAME, ALIAS_COMMAND)
    console.print(f"[green]✅ Git alias created: 'git {ALIAS_NAME}'[/green]")


def _uninstall_alias() -> None:
    git = GitManager(Path.cwd())
    if git.get_global_alias(ALIAS_NAME) is None:
        console.print(f"[yellow]Git alias 'git {ALIAS_NAME}' is not set[/yellow]")
        return
    git.unset_global_alias(ALIAS_NAME)
    console.print(f"[green]✅ Git alias 'git {ALIAS_NAME}' removed[/green]")


@app.command(
    epilog=EPILOG,
    context_settings={
        "help_option_names": ["-h", "--help"],
        "ignore_unknown_options": True,
        "allow_extra_args": True,
    },
)
def main(
    ctx: typer.Context,
    target: Optional[str] = typer.Argument(
        None,
        metavar="[BRANCH | DATABASE]",
        help="Branch to check out, or database to drop with --drop",
        show_default=False,
    ),
    list_: bool = typer.Option(False, "--list", help="Show all branch databases"),
    clean: bool = typer.Option(False, "--clean", help="Clean up orphaned databases"),
    drop: bool = typer.Option(
        False, "--drop", help="Drop the named database (or every one with --all)"
    ),
    all_: bool = typer.Option(
        False, "--all", help="With --drop: drop all branch databases"
    ),
    with_db: bool = typer.Option(
        False, "--with-db", help="Create/switch to the branch database"
    ),
    force: bool = typer.Option(
        False, "--force", help="Force recreate the database (use with --with-db)"
    ),
    install_alias: bool = typer.Option(
        False, "--install-alias", help=f"Register the 'git {ALIAS_NAME}' alias"
    ),
    uninstall_alias: bool = typer.Option(
        False, "--uninstall-alias", help=f"Remove the 'git {ALIAS_NAME}' alias"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every external command"
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    """Check out a git branch, optionally with its own database."""
    configure_logging(verbose)

    if version:
        from apchkout import __version__

        typer.echo(f"apchkout version {__version__}")
        raise typer.Exit(0)

    # Unknown options arrive as positional arguments
    extra: List[str] = list(ctx.args)
    unknown = [arg for arg in [target, *extra] if arg and arg.startswith("-")]
    if unknown:
        _usage_error(ctx, UnknownOption(f"Unknown option: {unknown[0]}"))
    if extra:
        _usage_error(ctx, UnknownOption(f"Unexpected argument: {extra[0]}"))
    if drop and all_ and target:
        _usage_error(
            ctx, UnknownOption(f"--drop --all does not take a database name: {target}")
        )

    try:
        if install_alias:
            _install_alias()
            return
        if uninstall_alias:
            _uninstall_alias()
            return

        if not (list_ or clean or drop or target):
            _usage_error(ctx, MissingArgument("No arguments provided"))
        if drop and not all_ and not target:
            raise MissingArgument(
                "Database name is required",
                hint="Usage: apchkout --drop <database_name>",
            )

        workspace = build_workspace()
        dispatcher = Dispatcher(workspace, confirm=confirm, console=console)

        if list_:
            dispatcher.list_databases()
        elif clean:
            dispatcher.clean()
        elif drop:
            if all_:
                dispatcher.drop_all()
            else:
                dispatcher.drop(target)
        else:
            dispatcher.checkout(target, with_db=with_db, force=force)

    except ApchkoutError as e:
        print_error(e)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
