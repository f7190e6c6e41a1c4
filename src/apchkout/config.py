"""Configuration management for apchkout projects.

The project configuration is the flat ``KEY=VALUE`` .env file at the repository
root. It doubles as the Django project's environment, so the file is edited
line by line: unrelated keys, comments and ordering survive every write.
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from apchkout.exceptions import ConfigNotFound, InvalidSetting, MissingSetting
from apchkout.models import DatabaseSettings, DEFAULT_DB_HOST, DEFAULT_DB_PORT


DB_NAME = "DB_NAME"
DB_USER = "DB_USER"
DB_PASSWORD = "DB_PASSWORD"
DB_HOST = "DB_HOST"
DB_PORT = "DB_PORT"
DJANGO_SETTINGS_MODULE = "DJANGO_SETTINGS_MODULE"
BASE_NAME_KEY = "DEV_APCHKOUT_DB_NAME_BASE"

DEFAULT_ENV_FILE = ".env"


def _parse_line(line: str) -> Optional[tuple]:
    """Split a .env line into (key, value), or None for comments and blanks."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None

    key, value = stripped.split("=", 1)
    key = key.strip()
    if key.startswith("export "):
        key = key[len("export "):].strip()
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return key, value


class EnvConfig:
    """Reads and writes the project .env file."""

    def __init__(self, project_dir: Optional[Path] = None):
        """Initialize config manager.

        Args:
            project_dir: Path to project root. If None, uses APCHKOUT_PROJECT_DIR env var or current directory.
        """
        if project_dir is None:
            env_dir = os.environ.get("APCHKOUT_PROJECT_DIR")
            if env_dir:
                project_dir = Path(env_dir)

        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        env_file = os.environ.get("APCHKOUT_ENV_FILE", DEFAULT_ENV_FILE)
        self.env_path = self.project_dir / env_file
        self._lines: Optional[List[str]] = None
        self._values: Dict[str, str] = {}
        self._dirty = False

    @property
    def exists(self) -> bool:
        """Check if the .env file exists."""
        return self.env_path.exists()

    @property
    def dirty(self) -> bool:
        """Whether there are staged changes not yet saved."""
        return self._dirty

    def load(self, allow_missing: bool = False) -> Dict[str, str]:
        """Load the .env file.

        Args:
            allow_missing: Start from an empty file instead of failing

        Returns:
            Mapping of keys to values, in file order

        Raises:
            ConfigNotFound: If the file is absent and allow_missing is False
        """
        if not self.exists:
            if not allow_missing:
                raise ConfigNotFound(
                    f".env file not found at {self.env_path}",
                    hint="Please create a .env file with database configuration",
                )
            self._lines = []
        else:
            with open(self.env_path, "r") as f:
                self._lines = f.read().splitlines()

        self._values = {}
        for line in self._lines:
            parsed = _parse_line(line)
            if parsed:
                key, value = parsed
                self._values[key] = value

        self._dirty = False
        return dict(self._values)

    def _ensure_loaded(self) -> None:
        if self._lines is None:
            self.load()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a value, or ``default`` if the key is absent."""
        self._ensure_loaded()
        return self._values.get(key, default)

    def has(self, key: str) -> bool:
        self._ensure_loaded()
        return key in self._values

    def set_key(self, key: str, value: str) -> None:
        """Stage ``key=value``.

        Existing ``key=`` lines are rewritten in place; otherwise a new line is
        appended. Nothing is written until :meth:`save`.
        """
        self._ensure_loaded()
        replaced = False
        for i, line in enumerate(self._lines):
            parsed = _parse_line(line)
            if parsed and parsed[0] == key:
                prefix = "export " if line.lstrip().startswith("export ") else ""
                self._lines[i] = f"{prefix}{key}={value}"
                replaced = True

        if not replaced:
            self._lines.append(f"{key}={value}")

        self._values[key] = value
        self._dirty = True

    def set_default(self, key: str, value: str) -> bool:
        """Stage ``key=value`` only if the key is absent.

        Returns:
            True if the key was staged
        """
        if self.has(key):
            return False
        self.set_key(key, value)
        return True

    def save(self) -> None:
        """Write staged changes to disk.

        The new content goes to a temporary file in the same directory which
        then replaces the .env file, so an interrupted write never leaves a
        truncated file behind.
        """
        self._ensure_loaded()
        content = "\n".join(self._lines) + "\n" if self._lines else ""

        self.env_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.env_path.parent, prefix=f"{self.env_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                f.write(content)
            if self.env_path.exists():
                os.chmod(tmp_path, self.env_path.stat().st_mode & 0o777)
            os.replace(tmp_path, self.env_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        self._dirty = False

    def settings(self) -> DatabaseSettings:
        """Build typed database settings from the loaded values.

        Raises:
            MissingSetting: If DB_USER or both DB_NAME and the stored base are absent
            InvalidSetting: If DB_PORT is not a number
        """
        self._ensure_loaded()
        values = self._values

        if not values.get(DB_USER):
            raise MissingSetting(
                f"{DB_USER} is not set in .env file",
                hint=f"Add {DB_USER}=<user> to {self.env_path}",
            )

        if not values.get(DB_NAME) and not values.get(BASE_NAME_KEY):
            raise MissingSetting(
                f"{DB_NAME} is not set in .env file",
                hint=f"Add {DB_NAME}=<database> to {self.env_path}",
            )

        try:
            return DatabaseSettings(
                user=values[DB_USER],
                password=values.get(DB_PASSWORD) or None,
                host=values.get(DB_HOST) or DEFAULT_DB_HOST,
                port=values.get(DB_PORT) or DEFAULT_DB_PORT,
                name=values.get(DB_NAME) or None,
                base_name=values.get(BASE_NAME_KEY) or None,
                settings_module=values.get(DJANGO_SETTINGS_MODULE) or None,
            )
        except PydanticValidationError as e:
            raise InvalidSetting(
                f"Invalid database settings in {self.env_path}: {e.errors()[0]['msg']}"
            )

    def as_environ(self) -> Dict[str, str]:
        """Return the loaded values for exporting into a child process."""
        self._ensure_loaded()
        return dict(self._values)
