"""Configuration management using Pydantic Settings.

This module provides type-safe configuration management with automatic
environment variable loading and validation using Pydantic Settings v2.

The configuration is organized into logical groups:
- DatabaseConfig: Database connection and pooling settings
- LoggingConfig: Logging levels, files, and debugging options
- StorageConfig: Storage backend selection and record retention limits
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.domain.entities.admin import ADMIN_CONFIG_KEY


class DatabaseConfig(BaseModel):
    """Database connection and pooling configuration."""

    url: str = "sqlite+aiosqlite:///data/db/moontv.db"
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path = Path("moontv.log")
    real_time_debug: bool = True


class StorageConfig(BaseModel):
    """Storage backend selection and per-user retention limits."""

    backend: str = "database"
    search_history_limit: int = Field(default=20, ge=1)
    admin_config_key: str = ADMIN_CONFIG_KEY


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables can be set using flat naming or nested naming:
    - Flat: DATABASE_URL, CONSOLE_LOG_LEVEL, STORAGE_BACKEND
    - Nested: DATABASE__URL, LOGGING__CONSOLE_LEVEL, STORAGE__BACKEND

    The .env file is automatically loaded for development convenience.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Nested configuration groups
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    storage: StorageConfig = StorageConfig()

    # Top-level settings
    data_dir: Path = Path("data")

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Transform flat environment variables to nested structure.

        Handles flat env vars (DATABASE_URL) and maps them to the
        nested structure expected by the models (database.url).
        """
        if not isinstance(data, dict):
            return data

        transformed: dict[str, dict[str, Any]] = {}

        # Database mappings
        db_mapping = {
            "database_url": "url",
            "database_echo": "echo",
            "database_pool_size": "pool_size",
            "database_max_overflow": "max_overflow",
            "database_pool_timeout": "pool_timeout",
            "database_pool_recycle": "pool_recycle",
        }
        for env_key, field_key in db_mapping.items():
            if env_key in data:
                transformed.setdefault("database", {})[field_key] = data.pop(env_key)

        # Logging mappings
        log_mapping = {
            "console_log_level": "console_level",
            "file_log_level": "file_level",
            "log_file": "log_file",
            "log_real_time_debug": "real_time_debug",
        }
        for env_key, field_key in log_mapping.items():
            if env_key in data:
                transformed.setdefault("logging", {})[field_key] = data.pop(env_key)

        # Storage mappings
        storage_mapping = {
            "storage_backend": "backend",
            "search_history_limit": "search_history_limit",
        }
        for env_key, field_key in storage_mapping.items():
            if env_key in data:
                transformed.setdefault("storage", {})[field_key] = data.pop(env_key)

        # Merge without clobbering nested values supplied the other way
        for section, values in transformed.items():
            existing = data.get(section)
            if isinstance(existing, dict):
                data[section] = {**existing, **values}
            else:
                data[section] = values

        return data


# Singleton instance for application use
settings = Settings()


# =============================================================================
# FLAT KEY ACCESS
# =============================================================================

_LEGACY_KEY_MAP = {
    # Database settings
    "DATABASE_URL": lambda: settings.database.url,
    "DATABASE_ECHO": lambda: settings.database.echo,
    "DATABASE_POOL_SIZE": lambda: settings.database.pool_size,
    "DATABASE_MAX_OVERFLOW": lambda: settings.database.max_overflow,
    "DATABASE_POOL_TIMEOUT": lambda: settings.database.pool_timeout,
    "DATABASE_POOL_RECYCLE": lambda: settings.database.pool_recycle,
    # Logging settings
    "CONSOLE_LOG_LEVEL": lambda: settings.logging.console_level,
    "FILE_LOG_LEVEL": lambda: settings.logging.file_level,
    "LOG_FILE": lambda: settings.logging.log_file,
    "LOG_REAL_TIME_DEBUG": lambda: settings.logging.real_time_debug,
    # Storage settings
    "STORAGE_BACKEND": lambda: settings.storage.backend,
    "SEARCH_HISTORY_LIMIT": lambda: settings.storage.search_history_limit,
    "ADMIN_CONFIG_KEY": lambda: settings.storage.admin_config_key,
    # Application settings
    "DATA_DIR": lambda: settings.data_dir,
}


def get_config(key: str, default=None):
    """Get configuration value by flat key with optional default.

    Maps flat keys to the nested Pydantic settings structure.

    Args:
        key: Configuration key to retrieve
        default: Default value if key not found

    Returns:
        Configuration value or default

    Example:
        >>> limit = get_config("SEARCH_HISTORY_LIMIT", 20)
        >>> db_url = get_config("DATABASE_URL")
    """
    if key in _LEGACY_KEY_MAP:
        return _LEGACY_KEY_MAP[key]()

    return default
