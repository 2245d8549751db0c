"""Configuration management for the DMS query proxy."""

import json
import logging
import os
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _truthy(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class DatabaseConfig:
    """Configuration for the relational store behind the proxy."""

    backend: str = "postgres"  # "postgres" or "duckdb"

    # PostgreSQL settings
    host: str = "127.0.0.1"
    port: int = 5432
    user: str = "postgres"
    password: str = ""
    database: str = "postgres"
    instance_connection_name: str | None = None  # Cloud SQL, connects via /cloudsql/<name>
    min_connections: int = 1
    max_connections: int = 10
    command_timeout: float | None = None

    # Embedded DuckDB settings
    duckdb_path: str = ":memory:"
    duckdb_init_sql: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DatabaseConfig":
        """Create DatabaseConfig from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__annotations__})


@dataclass
class AuthConfig:
    """Configuration for bearer token verification on mutating actions."""

    provider: str = "firebase"  # "firebase", "static" or "none"
    credentials_path: str | None = None  # None means Application Default Credentials
    project_id: str | None = None
    check_revoked: bool = False

    # token -> uid, only used by the static provider
    static_tokens: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthConfig":
        """Create AuthConfig from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__annotations__})


@dataclass
class ProxyConfig:
    """Main configuration for the query proxy."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)

    # Server settings
    server_host: str = "0.0.0.0"
    server_port: int = 3001
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    debug: bool = False

    @classmethod
    def load(cls) -> "ProxyConfig":
        """Load configuration from various sources."""
        config = cls()

        # 1. Load from config file if exists
        config_paths = [Path.home() / ".dmsproxy" / "config.json", Path.cwd() / ".dmsproxy.json", Path.cwd() / "dmsproxy.config.json"]

        for config_path in config_paths:
            if config_path.exists():
                try:
                    with open(config_path) as f:
                        data = json.load(f)
                except (OSError, json.JSONDecodeError) as e:
                    logger.warning(f"Ignoring unreadable config file {config_path}: {e}")
                    continue
                config = cls._merge_config(config, data)
                break

        # 2. Override with environment variables. Earlier entries win when two
        # variables map to the same setting (PORT before LOCAL_API_PORT).
        env_mappings: dict[str, str | tuple[str, Callable[[str], Any]]] = {
            "DMSPROXY_DB_BACKEND": "database.backend",
            "DB_HOST": "database.host",
            "DB_PORT": ("database.port", int),
            "DB_USER": "database.user",
            "DB_PASS": "database.password",
            "DB_NAME": "database.database",
            "INSTANCE_CONNECTION_NAME": "database.instance_connection_name",
            "DB_POOL_MAX": ("database.max_connections", int),
            "DB_COMMAND_TIMEOUT": ("database.command_timeout", float),
            "DMSPROXY_DUCKDB_PATH": "database.duckdb_path",
            "DMSPROXY_DUCKDB_INIT_SQL": "database.duckdb_init_sql",
            "DMSPROXY_AUTH_PROVIDER": "auth.provider",
            "GOOGLE_APPLICATION_CREDENTIALS": "auth.credentials_path",
            "FIREBASE_PROJECT_ID": "auth.project_id",
            "DMSPROXY_HOST": "server_host",
            "PORT": ("server_port", int),
            "LOCAL_API_PORT": ("server_port", int),
            "DMSPROXY_CORS_ORIGINS": ("cors_origins", _split_list),
            "DMSPROXY_DEBUG": ("debug", _truthy),
        }

        applied: set[str] = set()
        for env_var, config_mapping in env_mappings.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            path, converter = config_mapping if isinstance(config_mapping, tuple) else (config_mapping, str)
            if path in applied:
                continue
            config = cls._set_nested(config, path, converter(value))
            applied.add(path)

        return config

    @classmethod
    def _merge_config(cls, config: "ProxyConfig", data: dict[str, Any]) -> "ProxyConfig":
        """Merge configuration data into config object."""
        if isinstance(data.get("database"), dict):
            config.database = DatabaseConfig.from_dict(data["database"])
        if isinstance(data.get("auth"), dict):
            config.auth = AuthConfig.from_dict(data["auth"])

        for key, value in data.items():
            if key in ("database", "auth"):
                continue
            if hasattr(config, key):
                setattr(config, key, value)

        return config

    @classmethod
    def _set_nested(cls, config: "ProxyConfig", path: str, value: Any) -> "ProxyConfig":
        """Set a nested attribute using dot notation."""
        parts = path.split(".")
        obj: Any = config
        for part in parts[:-1]:
            obj = getattr(obj, part)
        setattr(obj, parts[-1], value)
        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary, without secrets."""
        data = asdict(self)
        data["database"]["password"] = "***" if self.database.password else ""
        data["auth"]["static_tokens"] = sorted(self.auth.static_tokens.values())
        return data


# Global config instance
_config: ProxyConfig | None = None


def get_config() -> ProxyConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ProxyConfig.load()
    return _config


def reload_config() -> ProxyConfig:
    """Reload configuration from sources."""
    global _config
    _config = ProxyConfig.load()
    return _config
