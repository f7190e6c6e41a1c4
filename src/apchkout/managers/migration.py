"""Runs Django management commands against a freshly provisioned database."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, Optional

from apchkout.exceptions import MigrationFailed

logger = logging.getLogger(__name__)

MIGRATE_COMMAND = "migrate"
SEED_COMMAND = "createdevdata"


class MigrationRunner:
    """Invokes ``manage.py migrate`` and ``manage.py createdevdata``."""

    def __init__(
        self,
        django_root: Path,
        python: Optional[str] = None,
    ):
        """Initialize migration runner.

        Args:
            django_root: Directory containing manage.py
            python: Interpreter used to run manage.py. If None, uses APCHKOUT_PYTHON env var or ``python``.
        """
        self.django_root = Path(django_root)
        self.python = python or os.environ.get("APCHKOUT_PYTHON", "python")

    def run_step(self, step: str, database: str, environ: Dict[str, str]) -> None:
        """Run one management command.

        Args:
            step: Management command name
            database: Target database, exported as DB_NAME
            environ: Project configuration exported into the child process

        Raises:
            MigrationFailed: If the command exits non-zero
        """
        env = dict(os.environ)
        env.update(environ)
        env["DB_NAME"] = database

        cmd = [self.python, "manage.py", step]
        logger.debug(f"Running: {' '.join(cmd)} (cwd={self.django_root})")
        try:
            result = subprocess.run(cmd, cwd=self.django_root, env=env)
        except FileNotFoundError:
            raise MigrationFailed(
                step,
                database,
                hint=f"Interpreter '{self.python}' not found; set APCHKOUT_PYTHON",
            )

        if result.returncode != 0:
            logger.error(f"manage.py {step} exited with {result.returncode}")
            raise MigrationFailed(
                step,
                database,
                hint=(
                    f"Database '{database}' was created and left in place. "
                    f"Fix the problem and re-run with --force, or drop it."
                ),
            )

    def migrate(self, database: str, environ: Dict[str, str]) -> None:
        """Apply pending migrations."""
        logger.info(f"Running migrations on {database}")
        self.run_step(MIGRATE_COMMAND, database, environ)

    def seed(self, database: str, environ: Dict[str, str]) -> None:
        """Populate development data."""
        logger.info(f"Creating development data in {database}")
        self.run_step(SEED_COMMAND, database, environ)
