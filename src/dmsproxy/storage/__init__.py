"""Database backends the query proxy executes against."""

from ..config import DatabaseConfig
from .base import DatabaseBackend
from .embedded import DuckDBBackend
from .postgres import PostgresBackend


def create_backend(config: DatabaseConfig) -> DatabaseBackend:
    """Builds the backend selected by `config.backend`."""
    if config.backend == "postgres":
        return PostgresBackend(config)
    if config.backend == "duckdb":
        return DuckDBBackend(config.duckdb_path, init_sql=config.duckdb_init_sql)
    raise ValueError(f"Unknown database backend: {config.backend}")


__all__ = ["DatabaseBackend", "DuckDBBackend", "PostgresBackend", "create_backend"]
