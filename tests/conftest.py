"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from apchkout.config import EnvConfig
from apchkout.exceptions import AlreadyExists, MigrationFailed
from apchkout.managers.workspace import WorkspaceManager


class FakeDatabase:
    """In-memory stand-in for DatabaseManager."""

    def __init__(self, databases: Optional[List[str]] = None):
        self.databases = set(databases or [])
        self.calls: List[tuple] = []

    def test_connection(self) -> None:
        self.calls.append(("test_connection",))

    def list_databases(self, base: str) -> List[str]:
        self.calls.append(("list", base))
        return sorted(db for db in self.databases if db.startswith(f"{base}_"))

    def exists(self, name: str) -> bool:
        self.calls.append(("exists", name))
        return name in self.databases

    def create(self, name: str, owner: str) -> None:
        self.calls.append(("create", name, owner))
        if name in self.databases:
            raise AlreadyExists(f"Database '{name}' already exists")
        self.databases.add(name)

    def drop(self, name: str, if_exists: bool = True) -> None:
        self.calls.append(("drop", name))
        self.databases.discard(name)

    @property
    def mutations(self) -> List[tuple]:
        return [c for c in self.calls if c[0] in ("create", "drop")]


class FakeGit:
    """In-memory stand-in for GitManager."""

    def __init__(self, local=None, remote=None):
        self.local = set(local or ["master"])
        self.remote = set(remote or [])
        self.current: Optional[str] = None
        self.calls: List[tuple] = []

    def branch_exists_local(self, name: str) -> bool:
        return name in self.local

    def branch_exists_remote(self, name: str) -> bool:
        return name in self.remote

    def checkout(self, name: str) -> None:
        self.calls.append(("checkout", name))
        self.local.add(name)
        self.current = name

    def create_and_checkout(self, name: str) -> None:
        self.calls.append(("create", name))
        self.local.add(name)
        self.current = name

    def list_all_branch_names(self) -> List[str]:
        return sorted(self.local | self.remote)


class FakeMigrations:
    """Records migrate/seed calls; can be told to fail a step."""

    def __init__(self, fail_on: Optional[str] = None):
        self.fail_on = fail_on
        self.calls: List[tuple] = []

    def _step(self, step: str, database: str, environ: Dict[str, str]) -> None:
        self.calls.append((step, database, environ.get("DJANGO_SETTINGS_MODULE")))
        if step == self.fail_on:
            raise MigrationFailed(step, database)

    def migrate(self, database: str, environ: Dict[str, str]) -> None:
        self._step("migrate", database, environ)

    def seed(self, database: str, environ: Dict[str, str]) -> None:
        self._step("createdevdata", database, environ)


DEFAULT_ENV = """# Local settings
DB_USER=app_user
DB_PASSWORD=secret
DB_NAME=app
DJANGO_SETTINGS_MODULE=project.settings.dev
SECRET_KEY=abc=123
"""


def write_env(project_dir: Path, content: str = DEFAULT_ENV) -> Path:
    env_path = project_dir / ".env"
    env_path.write_text(content)
    return env_path


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep the caller's APCHKOUT_* variables out of tests."""
    for name in ("APCHKOUT_PROJECT_DIR", "APCHKOUT_ENV_FILE", "APCHKOUT_PYTHON"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_dir(tmp_path):
    """A project root with a .env file and a django-root directory."""
    (tmp_path / "django-root").mkdir()
    write_env(tmp_path)
    return tmp_path


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def fake_git():
    return FakeGit()


@pytest.fixture
def fake_migrations():
    return FakeMigrations()


@pytest.fixture
def make_workspace(project_dir, fake_db, fake_git, fake_migrations):
    """Build a WorkspaceManager over the fakes, re-reading .env each time."""

    def _make(**overrides) -> WorkspaceManager:
        config = EnvConfig(project_dir)
        config.load()
        return WorkspaceManager(
            config,
            overrides.get("git", fake_git),
            overrides.get("database", fake_db),
            migrations=overrides.get("migrations", fake_migrations),
            on_progress=lambda message: None,
        )

    return _make


def read_env(project_dir: Path) -> Dict[str, str]:
    return EnvConfig(project_dir).load()
