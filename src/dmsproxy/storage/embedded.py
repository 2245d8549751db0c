"""
This module provides an embedded DuckDB backend for the query proxy.

DuckDB accepts the same `$n` placeholders, `ILIKE` and `RETURNING` syntax the
statement builder emits, so the proxy can run against a local file (or an
in-memory database) without a PostgreSQL server. This is used for local
development of the dashboard and for the end-to-end tests.
"""

import asyncio
import contextlib
import logging
from pathlib import Path
from typing import Any

import duckdb

from ..errors import BackendError
from ..my_logging import debug_log
from .base import DatabaseBackend

logger = logging.getLogger(__name__)


class DuckDBBackend(DatabaseBackend):
    """A single DuckDB connection shared by all requests, serialized by a lock."""

    name = "duckdb"

    def __init__(self, database_path: str = ":memory:", init_sql: str | None = None) -> None:
        """
        Initializes the backend.

        Args:
            database_path: A DuckDB file path, or `:memory:`.
            init_sql: Optional path to a SQL script run once after connecting,
                      typically used to create and seed tables.
        """
        self.database_path = database_path
        self.init_sql = init_sql
        self.lock = asyncio.Lock()
        self._connection: duckdb.DuckDBPyConnection | None = None

    async def start(self) -> None:
        if self._connection is not None:
            return
        try:
            self._connection = duckdb.connect(self.database_path)
            if self.init_sql:
                script = Path(self.init_sql).read_text()
                self._connection.execute(script)
                logger.info(f"Ran init script {self.init_sql}")
        except (OSError, duckdb.Error) as e:
            await self.close()
            raise BackendError(f"Failed to open DuckDB database {self.database_path}: {e}") from e
        logger.info(f"Connected to DuckDB database {self.database_path}")

    async def close(self) -> None:
        if self._connection is not None:
            with contextlib.suppress(duckdb.Error):
                self._connection.close()
            self._connection = None

    def _run(self, sql: str, params: list[Any]) -> duckdb.DuckDBPyConnection:
        if self._connection is None:
            raise BackendError("DuckDB connection is not started")
        debug_log("Executing statement", sql=sql, params=params)
        try:
            return self._connection.execute(sql, params)
        except duckdb.Error as e:
            raise BackendError(str(e)) from e

    async def fetch(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        async with self.lock:
            cursor = self._run(sql, params)
            try:
                rows = cursor.fetchall()
            except duckdb.Error as e:
                raise BackendError(str(e)) from e
            columns = [desc[0] for desc in cursor.description] if cursor.description else []
            return [dict(zip(columns, row, strict=False)) for row in rows]

    async def fetch_value(self, sql: str, params: list[Any]) -> Any:
        async with self.lock:
            row = self._run(sql, params).fetchone()
            return row[0] if row else None

    async def execute(self, sql: str, params: list[Any]) -> int:
        async with self.lock:
            # DML without RETURNING yields a single row holding the affected count.
            row = self._run(sql, params).fetchone()
            return int(row[0]) if row and row[0] is not None else 0

    def get_info(self) -> dict[str, Any]:
        return {
            "backend": self.name,
            "database": self.database_path,
            "duckdb_version": duckdb.__version__,
            "connected": self._connection is not None,
        }
