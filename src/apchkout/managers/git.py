"""Git access for apchkout."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from apchkout.exceptions import GitCommandFailed, NotAGitRepository

logger = logging.getLogger(__name__)

REMOTE = "origin"


def _run_git(
    args: List[str], cwd: Optional[Path] = None
) -> subprocess.CompletedProcess:
    cmd = ["git", *args]
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        return subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    except FileNotFoundError:
        raise GitCommandFailed(
            "git executable not found", hint="Install git and make sure it is on PATH"
        )


def find_repo_root(start_path: Path) -> Path:
    """Find the root of the git work tree containing ``start_path``.

    Raises:
        NotAGitRepository: If start_path is not inside a work tree
    """
    result = _run_git(["rev-parse", "--show-toplevel"], cwd=start_path)
    root = result.stdout.strip()
    if result.returncode != 0 or not root:
        raise NotAGitRepository(
            "Not in a git repository",
            hint="This command must be run from within a git repository",
        )
    return Path(root)


class GitManager:
    """Branch queries and checkouts in one repository."""

    def __init__(self, repo_dir: Path, remote: str = REMOTE):
        """Initialize git manager.

        Args:
            repo_dir: Path inside the work tree
            remote: Remote consulted for remote branches
        """
        self.repo_dir = Path(repo_dir)
        self.remote = remote

    def _git(self, *args: str) -> str:
        result = _run_git(list(args), cwd=self.repo_dir)
        if result.returncode != 0:
            logger.error(f"git {' '.join(args)} failed: {result.stderr.strip()}")
            raise GitCommandFailed(
                f"git {' '.join(args)} failed", output=result.stderr.strip()
            )
        return result.stdout

    def branch_exists_local(self, name: str) -> bool:
        return bool(self._git("branch", "--list", name).strip())

    def branch_exists_remote(self, name: str) -> bool:
        return bool(
            self._git("branch", "-r", "--list", f"{self.remote}/{name}").strip()
        )

    def checkout(self, name: str) -> None:
        """Check out an existing local or remote-tracking branch."""
        self._git("checkout", name)
        logger.info(f"Checked out {name}")

    def create_and_checkout(self, name: str) -> None:
        """Create ``name`` from the current HEAD and check it out."""
        self._git("checkout", "-b", name)
        logger.info(f"Created branch {name}")

    def list_all_branch_names(self) -> List[str]:
        """List local and remote branch names.

        Remote names have their ``<remote>/`` prefix stripped, so a branch that
        exists in both places is reported once.

        Returns:
            Sorted, de-duplicated branch names
        """
        output = self._git("branch", "-a", "--format=%(refname)")
        names = set()
        local_prefix = "refs/heads/"
        remote_prefix = f"refs/remotes/{self.remote}/"

        for line in output.splitlines():
            ref = line.strip()
            if ref.startswith(local_prefix):
                names.add(ref[len(local_prefix):])
            elif ref.startswith(remote_prefix):
                name = ref[len(remote_prefix):]
                if name != "HEAD":
                    names.add(name)

        return sorted(names)

    def set_global_alias(self, alias: str, command: str) -> None:
        self._git("config", "--global", f"alias.{alias}", command)

    def get_global_alias(self, alias: str) -> Optional[str]:
        result = _run_git(["config", "--global", "--get", f"alias.{alias}"])
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def unset_global_alias(self, alias: str) -> None:
        self._git("config", "--global", "--unset", f"alias.{alias}")
