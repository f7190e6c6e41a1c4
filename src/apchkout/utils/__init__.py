"""Utility modules for apchkout."""

from apchkout.utils.name_codec import (
    MASTER_BRANCH,
    branch_to_db_name,
    db_name_to_branch_guess,
    sanitize_branch_name,
)

__all__ = [
    "MASTER_BRANCH",
    "branch_to_db_name",
    "db_name_to_branch_guess",
    "sanitize_branch_name",
]
