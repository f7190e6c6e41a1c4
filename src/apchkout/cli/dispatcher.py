"""Operation routing and confirmation policy for the CLI."""

from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table as RichTable

from apchkout.exceptions import MissingArgument
from apchkout.managers.workspace import WorkspaceManager
from apchkout.models import CheckoutResult, CheckoutState


class Dispatcher:
    """Runs one operation against a workspace and reports the outcome.

    Destructive operations ask ``confirm`` exactly once; a declined
    confirmation leaves everything untouched and is not an error.
    """

    def __init__(
        self,
        workspace: WorkspaceManager,
        confirm: Callable[[str], bool],
        console: Optional[Console] = None,
    ):
        self.workspace = workspace
        self.confirm = confirm
        self.console = console or Console()

    def list_databases(self) -> None:
        """Show every branch database of the base database."""
        databases = self.workspace.list_branch_databases()
        if not databases:
            self.console.print("[yellow]No branch databases found[/yellow]")
            return

        self.console.print(
            f"[bold]Current Database:[/bold] {self.workspace.active_database}"
        )

        table = RichTable(title="Branch Databases")
        table.add_column("Database", style="cyan")
        table.add_column("Branch", style="yellow")
        table.add_column("Active", style="green")

        for db in databases:
            table.add_row(
                db.name, escape(db.branch_guess), "ACTIVE" if db.is_active else ""
            )

        self.console.print(table)
        self.console.print(f"Total branch databases: {len(databases)}")

    def clean(self) -> None:
        """Drop databases whose branch no longer exists, after one confirmation."""
        if not self.workspace.list_branch_databases():
            self.console.print("[yellow]No branch databases found[/yellow]")
            return

        self.console.print("Checking for databases without corresponding branches...")
        orphans = self.workspace.find_orphans()
        if not orphans:
            self.console.print("[green]✅ No orphaned databases found[/green]")
            return

        for db in orphans:
            self.console.print(
                f"  [red]✗[/red] {db.name} → Branch '{escape(db.branch_guess)}' not found"
            )

        self.console.print("\n[yellow]The following databases will be deleted:[/yellow]")
        for db in orphans:
            self.console.print(f"  - {db.name}")

        if not self.confirm("Do you want to delete these databases?"):
            self.console.print("[yellow]Cleanup cancelled[/yellow]")
            return

        self.workspace.drop_databases([db.name for db in orphans])
        self.console.print("[green]✅ Cleanup completed[/green]")

    def drop(self, name: Optional[str]) -> None:
        """Drop a single named database."""
        if not name:
            raise MissingArgument(
                "Database name is required",
                hint="Usage: apchkout --drop <database_name>",
            )

        self.workspace.check_droppable(name)

        self.console.print(f"[yellow]You are about to drop database: {name}[/yellow]")
        if not self.confirm("Are you sure?"):
            self.console.print("[yellow]Operation cancelled[/yellow]")
            return

        self.workspace.drop_database(name)
        self.console.print(f"[green]✅ Database '{name}' dropped successfully[/green]")

    def drop_all(self) -> None:
        """Drop every branch database behind a single all-or-nothing confirmation.

        Databases that are active or still have a git branch are listed in the
        warning, but accepting drops them too.
        """
        candidates = self.workspace.assess_drop_all()
        if not candidates:
            self.console.print("[yellow]No branch databases found[/yellow]")
            return

        flagged = [c for c in candidates if c.flagged]
        if flagged:
            self.console.print(
                "\n[yellow]The following databases may be in active use or have "
                "matching Git branches:[/yellow]"
            )
            for candidate in flagged:
                for reason in candidate.reasons:
                    self.console.print(f"  • {candidate.name} ({reason})")
            question = "Are you sure you want to delete ALL of them?"
            declined = "Operation aborted."
        else:
            question = "Are you sure you want to delete ALL branch databases?"
            declined = "Operation cancelled."

        if not self.confirm(question):
            self.console.print(f"[yellow]{declined}[/yellow]")
            return

        self.console.print("Deleting ALL branch databases...")
        self.workspace.drop_databases(
            [c.name for c in candidates], include_active=True
        )
        self.console.print("[green]✅ All branch databases deleted.[/green]")

    def checkout(self, branch: str, with_db: bool = False, force: bool = False) -> None:
        """Check out a branch, optionally switching to its database."""
        result = self.workspace.checkout(branch, with_db=with_db, force=force)
        self._report_checkout(result, with_db)

    def _report_checkout(self, result: CheckoutResult, with_db: bool) -> None:
        branch = escape(result.branch)
        env_path = self.workspace.config.env_path

        if result.state == CheckoutState.SWITCHED:
            self.console.print(f"Updated {env_path} with DB_NAME={result.database}")
            self.console.print(
                f"[green]✅ Switched to {branch} branch with base database: "
                f"{result.database}[/green]"
            )
        elif result.state == CheckoutState.PROVISIONED_FRESH:
            self.console.print(f"Updated {env_path} with DB_NAME={result.database}")
            self.console.print(
                f"[green]✅ Database {result.database} created, migrations applied, "
                f"and dev data created successfully![/green]"
            )
            self.console.print(
                f"You can now work on branch {branch} with database {result.database}"
            )
            self.console.print(
                "[yellow]Remember: Run --clean or --drop once you're done with the "
                "branch to avoid cluttering your database server.[/yellow]"
            )
        elif result.state == CheckoutState.PROVISIONED_EXISTING:
            self.console.print(f"Updated {env_path} with DB_NAME={result.database}")
            self.console.print(
                f"[green]✅ Switched to existing branch database: {result.database} "
                f"(use --force to recreate)[/green]"
            )
        elif result.state == CheckoutState.REVERTED:
            self.console.print(f"[green]✅ Checked out branch: {branch}[/green]")
            self.console.print(
                f"[green]✅ Reverted to base database: {result.database}[/green]"
            )
        else:
            self.console.print(f"[green]✅ Checked out branch: {branch}[/green]")
            if not with_db:
                self.console.print(
                    "--with-db not set, no changes to database configuration made."
                )
            self.console.print(f"Using database: {result.database}")
