"""apchkout - git checkout with a database per branch."""

from apchkout.utils.name_codec import branch_to_db_name, db_name_to_branch_guess

try:
    from importlib.metadata import version

    __version__ = version("apchkout")
except Exception:
    # Package metadata is not available when running from a source checkout
    __version__ = "0.1.0"

__all__ = ["branch_to_db_name", "db_name_to_branch_guess"]
