"""Path utilities for apchkout."""

import os
from pathlib import Path
from typing import Optional

from apchkout.exceptions import DjangoRootNotFound
from apchkout.managers.git import find_repo_root

DJANGO_ROOT_DIR = "django-root"


def get_project_root(start_path: Optional[Path] = None) -> Path:
    """Find the project root.

    Uses APCHKOUT_PROJECT_DIR if set, otherwise the top of the git work tree
    containing ``start_path``.

    Raises:
        NotAGitRepository: If no project root found
    """
    env_dir = os.environ.get("APCHKOUT_PROJECT_DIR")
    if env_dir:
        return Path(env_dir)
    return find_repo_root(Path(start_path or Path.cwd()))


def get_django_root(project_root: Path) -> Path:
    """Get the directory holding manage.py.

    Raises:
        DjangoRootNotFound: If the directory is missing
    """
    django_root = Path(project_root) / DJANGO_ROOT_DIR
    if not django_root.is_dir():
        raise DjangoRootNotFound(
            f"{DJANGO_ROOT_DIR} directory not found at {django_root}",
            hint="Make sure you're in a Django project with the standard structure",
        )
    return django_root
