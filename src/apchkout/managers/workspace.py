"""Branch and database lifecycle for a project workspace."""

import logging
from typing import Callable, List, Optional

from apchkout.config import BASE_NAME_KEY, DB_NAME, DJANGO_SETTINGS_MODULE, EnvConfig
from apchkout.exceptions import (
    ActiveDatabaseProtected,
    MissingSetting,
    NotFound,
)
from apchkout.managers.database import DatabaseManager
from apchkout.managers.git import GitManager
from apchkout.managers.migration import MigrationRunner
from apchkout.models import (
    BranchAction,
    BranchDatabase,
    CheckoutResult,
    CheckoutState,
    DropCandidate,
)
from apchkout.utils.name_codec import (
    MASTER_BRANCH,
    branch_to_db_name,
    db_name_to_branch_guess,
)

logger = logging.getLogger(__name__)


class WorkspaceManager:
    """Couples git branches to per-branch databases.

    Operations here never prompt. Confirmation policy belongs to the caller,
    which decides between inspecting (``list_branch_databases``,
    ``find_orphans``, ``assess_drop_all``) and mutating.
    """

    def __init__(
        self,
        config: EnvConfig,
        git: GitManager,
        database: DatabaseManager,
        migrations: Optional[MigrationRunner] = None,
        on_progress: Optional[Callable[[str], None]] = None,
    ):
        """Initialize workspace manager.

        Args:
            config: Loaded project configuration
            git: Git access for the project repository
            database: Database server access
            migrations: Django command runner, required for provisioning
            on_progress: Receives a line of text before each long-running step
        """
        self.config = config
        self.settings = config.settings()
        self.git = git
        self.database = database
        self.migrations = migrations
        self.on_progress = on_progress or logger.info

    @property
    def base_database(self) -> str:
        return self.settings.base_database

    @property
    def active_database(self) -> str:
        return self.settings.active_database

    def _guess(self, db_name: str) -> str:
        return db_name_to_branch_guess(db_name, self.base_database)

    def list_branch_databases(self) -> List[BranchDatabase]:
        """List every database derived from the base database name."""
        active = self.active_database
        return [
            BranchDatabase(
                name=name, branch_guess=self._guess(name), is_active=name == active
            )
            for name in self.database.list_databases(self.base_database)
        ]

    def find_orphans(self) -> List[BranchDatabase]:
        """Find branch databases whose branch no longer exists.

        The active database is never an orphan, and a database counts as
        orphaned only if its guessed branch name is missing from the live
        branch list.
        """
        databases = [db for db in self.list_branch_databases() if not db.is_active]
        if not databases:
            return []

        branches = set(self.git.list_all_branch_names())
        return [db for db in databases if db.branch_guess not in branches]

    def assess_drop_all(self) -> List[DropCandidate]:
        """List every branch database with its drop-all warning flags."""
        databases = self.list_branch_databases()
        if not databases:
            return []

        branches = set(self.git.list_all_branch_names())
        return [
            DropCandidate(
                name=db.name,
                branch_guess=db.branch_guess,
                is_active=db.is_active,
                has_branch=db.branch_guess in branches,
            )
            for db in databases
        ]

    def check_droppable(self, name: str) -> None:
        """Validate a targeted drop.

        Raises:
            NotFound: If the database does not exist
            ActiveDatabaseProtected: If it is the active database
        """
        if not self.database.exists(name):
            raise NotFound(f"Database '{name}' does not exist")
        self._protect_active(name)

    def _protect_active(self, name: str) -> None:
        if name == self.active_database:
            raise ActiveDatabaseProtected(
                f"Cannot drop the currently active database: {name}",
                hint="Switch to a different database first",
            )

    def drop_database(self, name: str) -> None:
        """Drop one database, refusing the active one."""
        self._protect_active(name)
        self.on_progress(f"Dropping database: {name}")
        self.database.drop(name)

    def drop_databases(self, names: List[str], include_active: bool = False) -> None:
        """Drop several databases.

        Args:
            names: Databases to drop
            include_active: Allow dropping the active database (drop-all only)
        """
        if not include_active:
            for name in names:
                self._protect_active(name)

        for name in names:
            self.on_progress(f"Dropping database: {name}")
            self.database.drop(name)

    def switch_branch(self, branch: str) -> BranchAction:
        """Check out ``branch``, creating it from HEAD if it exists nowhere."""
        if self.git.branch_exists_local(branch):
            self.on_progress(f"Checking out existing branch: {branch}")
            self.git.checkout(branch)
            return BranchAction.CHECKED_OUT

        if self.git.branch_exists_remote(branch):
            self.on_progress(f"Branch exists on remote, checking out: {branch}")
            self.git.checkout(branch)
            return BranchAction.CHECKED_OUT_REMOTE

        self.on_progress(f"Creating new branch: {branch}")
        self.git.create_and_checkout(branch)
        return BranchAction.CREATED

    def checkout(
        self, branch: str, with_db: bool = False, force: bool = False
    ) -> CheckoutResult:
        """Check out a branch and optionally switch to its database.

        Args:
            branch: Branch name
            with_db: Create or switch to the branch database
            force: Drop and recreate an existing branch database (with_db only)

        Returns:
            CheckoutResult describing what changed
        """
        action = self.switch_branch(branch)

        if not with_db:
            return self._checkout_without_database(branch, action)

        base = self.base_database
        if branch == MASTER_BRANCH:
            self.on_progress(f"Switching to base database: {base}")
            self._persist_database(base)
            return CheckoutResult(
                branch=branch,
                branch_action=action,
                state=CheckoutState.SWITCHED,
                database=base,
            )

        target = branch_to_db_name(branch, base)
        state = self._provision(target, force)
        self._persist_database(target)

        migrated = False
        if state == CheckoutState.PROVISIONED_FRESH:
            self._run_migrations(target)
            migrated = True

        return CheckoutResult(
            branch=branch,
            branch_action=action,
            state=state,
            database=target,
            migrated=migrated,
        )

    def _checkout_without_database(
        self, branch: str, action: BranchAction
    ) -> CheckoutResult:
        stored_base = self.config.get(BASE_NAME_KEY)
        if branch == MASTER_BRANCH and stored_base:
            self.config.set_key(DB_NAME, stored_base)
            self.config.save()
            logger.info(f"Reverted {DB_NAME} to {stored_base}")
            return CheckoutResult(
                branch=branch,
                branch_action=action,
                state=CheckoutState.REVERTED,
                database=stored_base,
            )

        return CheckoutResult(
            branch=branch,
            branch_action=action,
            state=CheckoutState.UNCHANGED,
            database=self.config.get(DB_NAME),
        )

    def _provision(self, target: str, force: bool) -> CheckoutState:
        if not self.database.exists(target):
            self.on_progress(f"Creating new branch database: {target}")
            self.database.create(target, self.settings.user)
            return CheckoutState.PROVISIONED_FRESH

        if not force:
            logger.info(f"Database {target} already exists, reusing it")
            return CheckoutState.PROVISIONED_EXISTING

        self.on_progress(
            f"Database {target} already exists - dropping and recreating "
            f"for fresh migrations (--force)"
        )
        self.database.drop(target)
        self.database.create(target, self.settings.user)
        return CheckoutState.PROVISIONED_FRESH

    def _persist_database(self, name: str) -> None:
        """Write DB_NAME, recording the base name the first time."""
        self.config.set_default(BASE_NAME_KEY, self.base_database)
        self.config.set_key(DB_NAME, name)
        self.config.save()
        self.settings = self.config.settings()
        logger.info(f"Updated {self.config.env_path} with {DB_NAME}={name}")

    def _run_migrations(self, target: str) -> None:
        settings_module = self.config.get(DJANGO_SETTINGS_MODULE)
        if not settings_module:
            raise MissingSetting(
                f"{DJANGO_SETTINGS_MODULE} is not set in .env file",
                hint=f"Please add {DJANGO_SETTINGS_MODULE} to your .env file",
            )
        if self.migrations is None:
            raise MissingSetting("No migration runner configured")

        environ = self.config.as_environ()
        self.on_progress(f"Running migrations on {target}")
        self.migrations.migrate(target, environ)
        self.on_progress("Creating development data")
        self.migrations.seed(target, environ)
