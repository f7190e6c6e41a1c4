"""PostgreSQL administration through the psql client."""

import logging
import os
import subprocess
from typing import List

from apchkout.exceptions import (
    AlreadyExists,
    DatabaseUnavailable,
    QueryFailed,
)
from apchkout.models import DatabaseSettings

logger = logging.getLogger(__name__)

ADMIN_DATABASE = "postgres"

# psql exit codes: 1 fatal error, 2 connection lost/refused, 3 script error
_CONNECTION_EXIT_CODES = (2,)
_CONNECTION_ERROR_MARKERS = (
    "could not connect",
    "connection to server",
    "password authentication failed",
    "no pg_hba.conf entry",
    "could not translate host name",
    "connection refused",
)


def quote_identifier(name: str) -> str:
    """Quote a SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """Quote a SQL string literal."""
    return "'" + value.replace("'", "''") + "'"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DatabaseManager:
    """Creates, drops and enumerates databases on the server.

    All statements run against the always-present ``postgres`` database. The
    manager never checks which database is active; callers that must not drop
    the active database check before calling :meth:`drop`.
    """

    def __init__(self, settings: DatabaseSettings, psql: str = "psql"):
        """Initialize database manager.

        Args:
            settings: Connection settings
            psql: psql executable
        """
        self.settings = settings
        self.psql = psql

    def _base_command(self) -> List[str]:
        return [
            self.psql,
            "-h",
            self.settings.host,
            "-p",
            str(self.settings.port),
            "-U",
            self.settings.user,
            "-d",
            ADMIN_DATABASE,
            "-v",
            "ON_ERROR_STOP=1",
            "-X",
        ]

    def _env(self) -> dict:
        env = dict(os.environ)
        if self.settings.password is not None:
            env["PGPASSWORD"] = self.settings.password
        return env

    def _unavailable(self, detail: str = "") -> DatabaseUnavailable:
        s = self.settings
        return DatabaseUnavailable(
            f"Failed to connect to database server "
            f"(Host: {s.host}, Port: {s.port}, User: {s.user})",
            hint="Check the credentials in .env and make sure PostgreSQL is running",
            output=detail or None,
        )

    def _run(self, *args: str) -> str:
        cmd = self._base_command() + list(args)
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, env=self._env()
            )
        except FileNotFoundError:
            raise DatabaseUnavailable(
                f"{self.psql} executable not found",
                hint="Install the PostgreSQL client tools",
            )

        if result.returncode != 0:
            stderr = result.stderr.strip()
            lowered = stderr.lower()
            if result.returncode in _CONNECTION_EXIT_CODES or any(
                marker in lowered for marker in _CONNECTION_ERROR_MARKERS
            ):
                logger.error(f"Connection failed: {stderr}")
                raise self._unavailable(stderr)
            logger.error(f"Statement failed: {stderr}")
            raise QueryFailed(f"Query failed: {stderr or 'unknown error'}", output=stderr)

        return result.stdout

    def _query(self, sql: str) -> List[str]:
        """Run a catalog query and return the rows, one string per row."""
        output = self._run("-tA", "-c", sql)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def _execute(self, sql: str) -> None:
        self._run("-c", sql)

    def test_connection(self) -> None:
        """Verify the server is reachable with the configured credentials.

        Raises:
            DatabaseUnavailable: If the connection fails
        """
        try:
            self._run("-c", "\\q")
        except QueryFailed as e:
            raise self._unavailable(e.output or "")

    def list_databases(self, base: str) -> List[str]:
        """List databases named ``<base>_...``.

        Args:
            base: Base database name

        Returns:
            Database names in ascending order
        """
        pattern = quote_literal(escape_like(f"{base}_") + "%")
        return self._query(
            f"SELECT datname FROM pg_database WHERE datname LIKE {pattern} "
            f"ORDER BY datname;"
        )

    def exists(self, name: str) -> bool:
        rows = self._query(
            f"SELECT 1 FROM pg_database WHERE datname = {quote_literal(name)};"
        )
        return rows == ["1"]

    def create(self, name: str, owner: str) -> None:
        """Create an empty database.

        Raises:
            AlreadyExists: If a database with that name is present
        """
        if self.exists(name):
            raise AlreadyExists(f"Database '{name}' already exists")

        logger.info(f"Creating database {name}")
        self._execute(
            f"CREATE DATABASE {quote_identifier(name)} OWNER {quote_identifier(owner)};"
        )

    def drop(self, name: str, if_exists: bool = True) -> None:
        """Drop a database. With ``if_exists`` a missing database is not an error."""
        logger.info(f"Dropping database {name}")
        clause = "IF EXISTS " if if_exists else ""
        self._execute(f"DROP DATABASE {clause}{quote_identifier(name)};")
