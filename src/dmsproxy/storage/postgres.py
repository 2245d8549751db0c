"""PostgreSQL backend on an asyncpg connection pool."""

import json
import logging
from decimal import Decimal
from typing import Any

import asyncpg

from ..config import DatabaseConfig
from ..errors import BackendError
from .base import DatabaseBackend

logger = logging.getLogger(__name__)


def _to_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _to_json(value: Any) -> str:
    # Strings are taken as already-serialized JSON.
    return value if isinstance(value, str) else json.dumps(value)


# Scalar types exchanged in text format, so string values from JSON bodies
# ("2024-01-01", "5") are coerced by the server the way the dashboard expects.
TEXT_CODECS: dict[str, tuple[Any, Any]] = {
    "int2": (_to_text, int),
    "int4": (_to_text, int),
    "int8": (_to_text, int),
    "float4": (_to_text, float),
    "float8": (_to_text, float),
    "numeric": (_to_text, Decimal),
    "bool": (_to_text, lambda value: value == "t"),
    "date": (_to_text, str),
    "time": (_to_text, str),
    "timestamp": (_to_text, str),
    "timestamptz": (_to_text, str),
    "uuid": (_to_text, str),
    "json": (_to_json, json.loads),
    "jsonb": (_to_json, json.loads),
}


async def init_connection(connection: asyncpg.Connection) -> None:
    """Registers the text codecs on a new pool connection."""
    for typename, (encoder, decoder) in TEXT_CODECS.items():
        await connection.set_type_codec(typename, schema="pg_catalog", encoder=encoder, decoder=decoder, format="text")


def parse_status_count(status: str) -> int:
    """Extracts the row count from a command status tag such as `DELETE 3`."""
    try:
        return int(status.split()[-1])
    except (ValueError, IndexError):
        return 0


class PostgresBackend(DatabaseBackend):
    """
    Executes statements on a bounded asyncpg pool.

    Connects over TCP, or through the Cloud SQL unix socket directory
    `/cloudsql/<instance>` when an instance connection name is configured.
    Requests beyond `max_connections` wait inside the pool.
    """

    name = "postgres"

    def __init__(self, config: DatabaseConfig) -> None:
        self.config = config
        self.pool: asyncpg.Pool | None = None

    def connection_params(self) -> dict[str, Any]:
        """Builds the keyword arguments for `asyncpg.create_pool`."""
        params: dict[str, Any] = {
            "user": self.config.user,
            "password": self.config.password,
            "database": self.config.database,
            "min_size": self.config.min_connections,
            "max_size": self.config.max_connections,
            "command_timeout": self.config.command_timeout,
        }
        if self.config.instance_connection_name:
            params["host"] = f"/cloudsql/{self.config.instance_connection_name}"
        else:
            params["host"] = self.config.host
            params["port"] = self.config.port
        return params

    async def start(self) -> None:
        if self.pool is not None:
            return
        params = self.connection_params()
        try:
            self.pool = await asyncpg.create_pool(init=init_connection, **params)
        except (OSError, asyncpg.PostgresError) as e:
            raise BackendError(f"Failed to initialize PostgreSQL connection pool: {e}") from e
        logger.info(f"Connected to PostgreSQL at {params['host']} (pool size {self.config.max_connections})")

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None

    def _require_pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise BackendError("PostgreSQL pool is not started")
        return self.pool

    async def fetch(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        pool = self._require_pool()
        try:
            rows = await pool.fetch(sql, *params)
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise BackendError(str(e)) from e
        return [dict(row) for row in rows]

    async def fetch_value(self, sql: str, params: list[Any]) -> Any:
        pool = self._require_pool()
        try:
            return await pool.fetchval(sql, *params)
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise BackendError(str(e)) from e

    async def execute(self, sql: str, params: list[Any]) -> int:
        pool = self._require_pool()
        try:
            status = await pool.execute(sql, *params)
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise BackendError(str(e)) from e
        return parse_status_count(status)

    def get_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {
            "backend": self.name,
            "database": self.config.database,
            "max_connections": self.config.max_connections,
            "connected": self.pool is not None,
        }
        if self.pool is not None:
            info["pool_size"] = self.pool.get_size()
            info["idle_connections"] = self.pool.get_idle_size()
        return info
