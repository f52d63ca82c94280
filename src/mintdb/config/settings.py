"""mintdb configuration settings."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mintdb.exceptions import ConfigurationError, check_config_keys

CONNECTION_FIELDS = (
    "driver",
    "host",
    "dbname",
    "user",
    "password",
    "port",
    "dsn",
    "filepath",
)


class MintDBSettings(BaseSettings):
    """mintdb configuration settings.

    Settings are loaded with the following precedence (highest to lowest):
    1. Keyword arguments passed to the constructor
    2. Environment variables (prefixed with MINTDB_)
       Example: export MINTDB_DRIVER=postgres
    3. .env file in the current directory
       Example: MINTDB_LOG_LEVEL=DEBUG in .env file
    4. Default values (defined in field declarations below)

    Connection fields are the ones written by ``mintdb.configure()`` and read
    back every time a connection is opened.
    """

    model_config = SettingsConfigDict(
        env_prefix="MINTDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Connection settings
    driver: str = Field(
        default="mariadb",
        description="Database driver (mariadb, mysql, postgres, sqlite, odbc)",
    )
    host: str = Field(default="", description="Database host name or IP address")
    dbname: str = Field(
        default="",
        description="Database name (ignored for SQLite when filepath is set)",
    )
    user: str = Field(default="", description="Username for authentication")
    password: str = Field(
        default="",
        description="Password for authentication (prompted for when empty)",
    )
    port: int | None = Field(
        default=None,
        description="Port number; empty means the driver default",
    )
    dsn: str = Field(default="", description="ODBC data source name")
    filepath: str = Field(default="", description="Path to the SQLite file")

    prompt_password: bool = Field(
        default=True,
        description="Ask for the password when it is empty at connect time",
    )

    # Pool settings
    pool_enabled: bool = Field(
        default=True,
        description="Allow connection pooling when a caller asks for it",
    )
    pool_min_size: int = Field(
        default=1,
        description="Minimum number of pooled connections kept open",
        ge=0,
    )
    pool_max_size: int = Field(
        default=10,
        description="Maximum number of pooled connections",
        ge=1,
    )
    pool_max_idle_time: float = Field(
        default=300.0,
        description="Seconds an idle pooled connection is kept before closing",
        gt=0,
    )
    pool_timeout: float = Field(
        default=30.0,
        description="Seconds to wait for a free pooled connection",
        ge=0.1,
    )
    pool_health_check_interval: float = Field(
        default=60.0,
        description="Seconds between background pool health checks",
        gt=0,
    )

    # Debug settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        pattern="^(?i)(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="console",
        description="Log output format (console, json, structured)",
        pattern="^(?i)(console|json|structured)$",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    @field_validator("port", mode="before")
    @classmethod
    def parse_port(cls, v: Any) -> int | None:
        """Turn empty or non-numeric ports into None."""
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v
        try:
            return int(str(v).strip())
        except ValueError:
            return None

    @field_validator("driver", mode="before")
    @classmethod
    def normalize_driver(cls, v: Any) -> str:
        """Normalize the driver name to lowercase without surrounding blanks."""
        if hasattr(v, "value"):
            v = v.value
        return str(v).strip().lower()

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        """Expand environment variables and ~ in the log file path."""
        if v is None or v == "":
            return None
        if isinstance(v, Path):
            return v.resolve()
        if isinstance(v, str):
            return Path(os.path.expandvars(v)).expanduser().resolve()
        raise ValueError(
            f"log_file must be a string or Path, got {type(v).__name__}: {v!r}"
        )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.upper()
        raise ValueError(f"log_level must be a string, got {type(v).__name__}")

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v: Any) -> str:
        """Normalize log format to lowercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.lower()
        raise ValueError(f"log_format must be a string, got {type(v).__name__}")

    @classmethod
    def from_env(cls) -> MintDBSettings:
        """Create settings from environment variables."""
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> MintDBSettings:
        """Load settings from a configuration file.

        Values in the file take precedence over environment variables.

        Args:
            config_path: Path to configuration file (YAML, TOML, or JSON).

        Returns:
            Settings loaded from the file.

        Raises:
            ConfigurationError: If file format is not supported.
            FileNotFoundError: If config file doesn't exist.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        suffix = config_path.suffix.lower()

        if suffix in {".yml", ".yaml"}:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        elif suffix == ".json":
            with config_path.open(encoding="utf-8") as f:
                data = json.load(f)
        else:
            raise ConfigurationError(
                message=f"Unsupported configuration file format: {suffix}",
                hint="Use one of the supported formats: .yml, .yaml, .toml, or .json",
                details={
                    "file": str(config_path),
                    "detected_format": suffix,
                    "supported_formats": [".yml", ".yaml", ".toml", ".json"],
                },
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                message="Configuration file must contain a mapping of settings",
                details={"file": str(config_path), "type": type(data).__name__},
            )

        check_config_keys(data)

        return cls(**data)

    def connection_fields(self) -> dict[str, Any]:
        """Return only the connection fields, as accepted by ``configure()``."""
        return {name: getattr(self, name) for name in CONNECTION_FIELDS}


# Global settings instance
_settings: MintDBSettings | None = None


def get_settings() -> MintDBSettings:
    """Get the global settings instance.

    The instance is created from the environment on first use and cached.
    Connection parameters are not taken from here when opening a connection;
    ``ConnectionManager.open()`` always re-reads the environment.

    Returns:
        Global MintDBSettings instance.
    """
    global _settings
    if _settings is None:
        _settings = MintDBSettings.from_env()
    return _settings


def set_settings(settings: MintDBSettings) -> None:
    """Set the global settings instance.

    Args:
        settings: Settings instance to use globally.
    """
    global _settings
    _settings = settings


def clear_settings_cache() -> None:
    """Clear the global settings cache.

    This forces get_settings() to re-read from environment variables on the
    next call. Useful for testing when environment variables are changed via
    monkeypatch.
    """
    global _settings
    _settings = None


def reset_settings() -> None:
    """Reset the global settings instance."""
    clear_settings_cache()
