"""Branch name <-> database name mapping.

The forward mapping is deterministic but many-to-one: branches that differ only
by case or by punctuation land on the same database name (``Feature/X`` and
``feature-x`` both map to ``<base>_feature_x``). That collision is accepted.

The reverse mapping is a best-effort guess used for display and as one side of
a cross-check against live git branches. It must never drive a destructive
action on its own.
"""

import re


MASTER_BRANCH = "master"

# Anything outside this set is replaced with an underscore
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_]")

# Leading branch prefixes restored by the reverse mapping
_PREFIX_GUESSES = (
    ("fix_", "fix/"),
    ("feature_", "feature/"),
)


def sanitize_branch_name(branch: str) -> str:
    """Return the database-safe suffix for a branch name.

    Args:
        branch: Git branch name

    Returns:
        Lowercase string containing only ``[a-z0-9_]``
    """
    return _UNSAFE_CHARS.sub("_", branch).lower()


def branch_to_db_name(branch: str, base: str) -> str:
    """Map a branch name to its database name.

    Args:
        branch: Git branch name
        base: Base database name

    Returns:
        ``base`` for the master branch, otherwise ``base_<sanitized branch>``
    """
    if branch == MASTER_BRANCH:
        return base
    return f"{base}_{sanitize_branch_name(branch)}"


def db_name_to_branch_guess(db_name: str, base: str) -> str:
    """Guess the branch a database was created for.

    Args:
        db_name: Database name
        base: Base database name

    Returns:
        Guessed branch name (not guaranteed to match the original)
    """
    prefix = f"{base}_"
    suffix = db_name[len(prefix):] if db_name.startswith(prefix) else db_name

    for encoded, decoded in _PREFIX_GUESSES:
        if suffix.startswith(encoded):
            suffix = decoded + suffix[len(encoded):]
            break

    return suffix.replace("_", "-")
