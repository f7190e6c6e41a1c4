"""Core apchkout functionality."""

from apchkout.core.path_utils import get_project_root, get_django_root

__all__ = ["get_project_root", "get_django_root"]
