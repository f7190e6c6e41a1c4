"""Error taxonomy for apchkout.

Every error carries a human-readable message and an optional remediation hint
that the CLI prints underneath it.
"""

from typing import Optional


class ApchkoutError(Exception):
    """Base class for all apchkout errors."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


# Preflight: raised before any mutation happens


class PreflightError(ApchkoutError):
    """Environment or configuration is not usable."""

    pass


class NotAGitRepository(PreflightError):
    """Raised when the working directory is not inside a git work tree."""

    pass


class DjangoRootNotFound(PreflightError):
    """Raised when the project has no django-root directory."""

    pass


class ConfigNotFound(PreflightError):
    """Raised when the .env file is missing."""

    pass


class MissingSetting(PreflightError):
    """Raised when a required configuration key is absent."""

    pass


class InvalidSetting(PreflightError):
    """Raised when a configuration value cannot be interpreted."""

    pass


# Validation: the requested operation is rejected, nothing is mutated


class ValidationError(ApchkoutError, ValueError):
    """The requested operation is invalid."""

    pass


class UnknownOption(ValidationError):
    pass


class MissingArgument(ValidationError):
    pass


class NotFound(ValidationError):
    """Raised when a named database does not exist."""

    pass


class ActiveDatabaseProtected(ValidationError):
    """Raised when trying to drop the database referenced by DB_NAME."""

    pass


class AlreadyExists(ValidationError):
    """Raised when creating a database that is already present."""

    pass


# External tools: psql, git, manage.py


class ExternalToolError(ApchkoutError):
    """An external command failed."""

    def __init__(
        self, message: str, hint: Optional[str] = None, output: Optional[str] = None
    ):
        super().__init__(message, hint)
        self.output = output


class DatabaseUnavailable(ExternalToolError):
    """Raised when the database server cannot be reached."""

    pass


class QueryFailed(ExternalToolError):
    """Raised when a statement is rejected by the database server."""

    pass


class GitCommandFailed(ExternalToolError):
    pass


class MigrationFailed(ExternalToolError):
    """Raised when migrate or createdevdata exits non-zero."""

    def __init__(
        self,
        step: str,
        database: str,
        hint: Optional[str] = None,
        output: Optional[str] = None,
    ):
        super().__init__(
            f"'{step}' failed for database '{database}'", hint=hint, output=output
        )
        self.step = step
        self.database = database
