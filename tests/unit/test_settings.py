"""Tests for settings loading and flat-key access."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.config import Settings, get_config
from src.domain.entities import ADMIN_CONFIG_KEY


class TestFlatEnvMapping:
    """Flat legacy names are folded into the nested groups."""

    def test_flat_database_keys(self):
        s = Settings(database_url="sqlite+aiosqlite:///other.db", database_echo=True)

        assert s.database.url == "sqlite+aiosqlite:///other.db"
        assert s.database.echo is True

    def test_flat_logging_keys(self):
        s = Settings(console_log_level="WARNING", log_file="logs/app.log")

        assert s.logging.console_level == "WARNING"
        assert s.logging.log_file == Path("logs/app.log")

    def test_flat_storage_keys(self):
        s = Settings(storage_backend="database", search_history_limit=5)

        assert s.storage.backend == "database"
        assert s.storage.search_history_limit == 5

    def test_flat_keys_merge_with_nested_values(self):
        s = Settings(database={"echo": True}, database_url="sqlite+aiosqlite:///x.db")

        assert s.database.echo is True
        assert s.database.url == "sqlite+aiosqlite:///x.db"

    def test_nested_env_delimiter(self, monkeypatch):
        monkeypatch.setenv("STORAGE__SEARCH_HISTORY_LIMIT", "7")

        assert Settings().storage.search_history_limit == 7

    def test_search_history_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(search_history_limit=0)


class TestDefaults:
    """Test out-of-the-box storage settings."""

    def test_storage_defaults(self, monkeypatch):
        for var in ("STORAGE_BACKEND", "SEARCH_HISTORY_LIMIT", "STORAGE__BACKEND"):
            monkeypatch.delenv(var, raising=False)

        s = Settings(_env_file=None)

        assert s.storage.backend == "database"
        assert s.storage.search_history_limit == 20
        assert s.storage.admin_config_key == "admin_config"
        assert s.storage.admin_config_key == ADMIN_CONFIG_KEY
        assert s.database.url.startswith("sqlite+aiosqlite://")


class TestGetConfig:
    """Test flat-key lookups on the settings singleton."""

    def test_known_key(self):
        assert get_config("ADMIN_CONFIG_KEY") == "admin_config"

    def test_unknown_key_returns_default(self):
        assert get_config("NOT_A_SETTING", "fallback") == "fallback"
