"""apchkout managers."""

from apchkout.managers.database import DatabaseManager
from apchkout.managers.git import GitManager
from apchkout.managers.migration import MigrationRunner
from apchkout.managers.workspace import WorkspaceManager

__all__ = [
    "DatabaseManager",
    "GitManager",
    "MigrationRunner",
    "WorkspaceManager",
]
