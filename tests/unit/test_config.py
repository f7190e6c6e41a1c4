"""Tests for .env configuration management."""

from pathlib import Path

import pytest

from apchkout.config import BASE_NAME_KEY, EnvConfig
from apchkout.exceptions import ConfigNotFound, InvalidSetting, MissingSetting

from conftest import DEFAULT_ENV, write_env


class TestEnvConfig:
    """Test loading and editing the .env file."""

    def test_load(self, tmp_path):
        write_env(tmp_path)
        values = EnvConfig(tmp_path).load()

        assert values["DB_USER"] == "app_user"
        assert values["DB_NAME"] == "app"
        assert values["SECRET_KEY"] == "abc=123"
        assert not any(key.startswith("#") for key in values)

    def test_load_strips_quotes_and_export(self, tmp_path):
        write_env(tmp_path, 'export DB_USER="quoted"\nDB_NAME=\'app\'\n\n')
        values = EnvConfig(tmp_path).load()

        assert values == {"DB_USER": "quoted", "DB_NAME": "app"}

    def test_load_nonexistent(self, tmp_path):
        config = EnvConfig(tmp_path)

        assert not config.exists
        with pytest.raises(ConfigNotFound):
            config.load()

    def test_load_allow_missing(self, tmp_path):
        config = EnvConfig(tmp_path)
        assert config.load(allow_missing=True) == {}

        config.set_key("DB_NAME", "app")
        config.save()

        assert (tmp_path / ".env").read_text() == "DB_NAME=app\n"

    def test_get_default(self, tmp_path):
        write_env(tmp_path)
        config = EnvConfig(tmp_path)

        assert config.get("DB_HOST") is None
        assert config.get("DB_HOST", "localhost") == "localhost"

    def test_set_key_in_place(self, tmp_path):
        """Replacing a key keeps its position and every other line."""
        env_path = write_env(tmp_path)
        config = EnvConfig(tmp_path)
        config.load()

        config.set_key("DB_NAME", "app_feature_x")
        config.save()

        expected = DEFAULT_ENV.replace("DB_NAME=app\n", "DB_NAME=app_feature_x\n")
        assert env_path.read_text() == expected

    def test_set_key_appends(self, tmp_path):
        env_path = write_env(tmp_path)
        config = EnvConfig(tmp_path)
        config.load()

        config.set_key(BASE_NAME_KEY, "app")
        config.save()

        lines = env_path.read_text().splitlines()
        assert lines[-1] == f"{BASE_NAME_KEY}=app"
        assert lines[0] == "# Local settings"

    def test_set_key_does_not_touch_commented_key(self, tmp_path):
        env_path = write_env(tmp_path, "#DB_NAME=old\nDB_NAME=app\n")
        config = EnvConfig(tmp_path)
        config.load()

        config.set_key("DB_NAME", "new")
        config.save()

        assert env_path.read_text() == "#DB_NAME=old\nDB_NAME=new\n"

    def test_set_key_keeps_export_prefix(self, tmp_path):
        env_path = write_env(tmp_path, "export DB_NAME=app\nDB_USER=u\n")
        config = EnvConfig(tmp_path)
        config.load()

        config.set_key("DB_NAME", "app_feature_x")
        config.save()

        assert env_path.read_text() == "export DB_NAME=app_feature_x\nDB_USER=u\n"
        assert EnvConfig(tmp_path).load()["DB_NAME"] == "app_feature_x"

    def test_set_default_never_overwrites(self, tmp_path):
        write_env(tmp_path, f"DB_NAME=app\n{BASE_NAME_KEY}=original\n")
        config = EnvConfig(tmp_path)
        config.load()

        assert config.set_default(BASE_NAME_KEY, "other") is False
        assert config.get(BASE_NAME_KEY) == "original"
        assert config.set_default("DB_HOST", "db") is True
        assert config.get("DB_HOST") == "db"

    def test_nothing_written_before_save(self, tmp_path):
        env_path = write_env(tmp_path)
        config = EnvConfig(tmp_path)
        config.load()

        config.set_key("DB_NAME", "changed")

        assert config.dirty
        assert env_path.read_text() == DEFAULT_ENV

    def test_save_leaves_no_temp_files(self, tmp_path):
        write_env(tmp_path)
        config = EnvConfig(tmp_path)
        config.load()
        config.set_key("DB_NAME", "x")
        config.save()

        assert sorted(p.name for p in tmp_path.iterdir()) == [".env"]
        assert not config.dirty

    def test_failed_save_keeps_original(self, tmp_path, monkeypatch):
        env_path = write_env(tmp_path)
        config = EnvConfig(tmp_path)
        config.load()
        config.set_key("DB_NAME", "x")

        def _fail(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("apchkout.config.os.replace", _fail)

        with pytest.raises(OSError, match="disk full"):
            config.save()

        assert env_path.read_text() == DEFAULT_ENV
        assert sorted(p.name for p in tmp_path.iterdir()) == [".env"]
        assert config.dirty

    def test_env_var_project_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("APCHKOUT_PROJECT_DIR", str(tmp_path))

        config = EnvConfig()

        assert config.project_dir == Path(tmp_path)
        assert config.env_path == tmp_path / ".env"

    def test_env_var_env_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("APCHKOUT_ENV_FILE", ".env.local")

        config = EnvConfig(tmp_path)

        assert config.env_path == tmp_path / ".env.local"


class TestSettings:
    """Test the typed settings view."""

    def test_defaults(self, tmp_path):
        write_env(tmp_path)
        settings = EnvConfig(tmp_path).settings()

        assert settings.user == "app_user"
        assert settings.password == "secret"
        assert settings.host == "localhost"
        assert settings.port == 5432
        assert settings.settings_module == "project.settings.dev"

    def test_explicit_host_and_port(self, tmp_path):
        write_env(tmp_path, "DB_USER=u\nDB_NAME=app\nDB_HOST=db.local\nDB_PORT=6543\n")
        settings = EnvConfig(tmp_path).settings()

        assert settings.host == "db.local"
        assert settings.port == 6543

    def test_base_resolution_prefers_stored_base(self, tmp_path):
        write_env(tmp_path, f"DB_USER=u\nDB_NAME=app_feature_x\n{BASE_NAME_KEY}=app\n")
        settings = EnvConfig(tmp_path).settings()

        assert settings.base_database == "app"
        assert settings.active_database == "app_feature_x"

    def test_base_falls_back_to_db_name(self, tmp_path):
        write_env(tmp_path, "DB_USER=u\nDB_NAME=app\n")
        settings = EnvConfig(tmp_path).settings()

        assert settings.base_database == "app"
        assert settings.active_database == "app"

    def test_active_falls_back_to_base(self, tmp_path):
        write_env(tmp_path, f"DB_USER=u\n{BASE_NAME_KEY}=app\n")
        settings = EnvConfig(tmp_path).settings()

        assert settings.active_database == "app"

    def test_missing_user(self, tmp_path):
        write_env(tmp_path, "DB_NAME=app\n")

        with pytest.raises(MissingSetting, match="DB_USER"):
            EnvConfig(tmp_path).settings()

    def test_missing_name_and_base(self, tmp_path):
        write_env(tmp_path, "DB_USER=u\n")

        with pytest.raises(MissingSetting, match="DB_NAME"):
            EnvConfig(tmp_path).settings()

    def test_invalid_port(self, tmp_path):
        write_env(tmp_path, "DB_USER=u\nDB_NAME=app\nDB_PORT=abc\n")

        with pytest.raises(InvalidSetting):
            EnvConfig(tmp_path).settings()
