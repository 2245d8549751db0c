"""
This module defines the abstract base class for the proxy's database backends.

The query proxy only ever needs three kinds of round trip: fetch rows, fetch a
single value, and execute a statement for its affected-row count. Each backend
owns its connection resources, which are opened in `start()` during application
startup and released in `close()` at shutdown.
"""

from abc import ABC, abstractmethod
from typing import Any


class DatabaseBackend(ABC):
    """
    An abstract base class for relational stores the proxy can execute against.

    Implementations must accept PostgreSQL-style positional placeholders
    (`$1`, `$2`, ...) and raise `BackendError` for any driver failure.
    """

    name: str = "abstract"

    @abstractmethod
    async def start(self) -> None:
        """Opens connections. Called once at application startup."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Releases connections. Called once at application shutdown."""
        pass

    @abstractmethod
    async def fetch(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        """
        Runs a statement and returns its rows.

        Args:
            sql: The statement text.
            params: Values bound to `$1` .. `$N`.

        Returns:
            The result rows as a list of column-to-value mappings.
        """
        pass

    @abstractmethod
    async def fetch_value(self, sql: str, params: list[Any]) -> Any:
        """Runs a statement and returns the first column of its first row."""
        pass

    @abstractmethod
    async def execute(self, sql: str, params: list[Any]) -> int:
        """Runs a statement that returns no rows and reports how many rows it affected."""
        pass

    @abstractmethod
    def get_info(self) -> dict[str, Any]:
        """Returns a description of the backend for health checks."""
        pass
