"""Pytest configuration and shared fixtures for all tests."""

import sys
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

# Add src to path for all test modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dmsproxy.auth.verifier import StaticTokenVerifier  # noqa: E402
from dmsproxy.config import AuthConfig, DatabaseConfig, ProxyConfig  # noqa: E402
from dmsproxy.server.app import create_app  # noqa: E402
from dmsproxy.storage.base import DatabaseBackend  # noqa: E402
from dmsproxy.storage.embedded import DuckDBBackend  # noqa: E402

SEED_SQL = Path(__file__).parent / "fixtures" / "seed.sql"

VALID_TOKEN = "token-operator"
AUTH_HEADERS = {"Authorization": f"Bearer {VALID_TOKEN}"}


class RecordingBackend(DatabaseBackend):
    """A backend that records every statement and returns canned results."""

    name = "recording"

    def __init__(self, rows: list[dict[str, Any]] | None = None, value: Any = None, affected: int = 0) -> None:
        self.rows = rows if rows is not None else []
        self.value = value
        self.affected = affected
        self.calls: list[tuple[str, str, list[Any]]] = []
        self.started = False

    async def start(self) -> None:
        self.started = True

    async def close(self) -> None:
        self.started = False

    async def fetch(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        self.calls.append(("fetch", sql, list(params)))
        return self.rows

    async def fetch_value(self, sql: str, params: list[Any]) -> Any:
        self.calls.append(("fetch_value", sql, list(params)))
        return self.value

    async def execute(self, sql: str, params: list[Any]) -> int:
        self.calls.append(("execute", sql, list(params)))
        return self.affected

    def get_info(self) -> dict[str, Any]:
        return {"backend": self.name, "connected": self.started}


def make_config() -> ProxyConfig:
    return ProxyConfig(
        database=DatabaseConfig(backend="duckdb", duckdb_path=":memory:", duckdb_init_sql=str(SEED_SQL)),
        auth=AuthConfig(provider="static", static_tokens={VALID_TOKEN: "u-operator"}),
    )


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return dict(AUTH_HEADERS)


@pytest.fixture
def verifier() -> StaticTokenVerifier:
    return StaticTokenVerifier({VALID_TOKEN: "u-operator"})


@pytest.fixture
def recording_backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def recording_client(recording_backend, verifier):
    """A test client whose backend only records statements."""
    app = create_app(make_config(), backend=recording_backend, verifier=verifier, show_banner=False)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def client(verifier):
    """A test client backed by a seeded in-memory DuckDB database."""
    backend = DuckDBBackend(":memory:", init_sql=str(SEED_SQL))
    app = create_app(make_config(), backend=backend, verifier=verifier, show_banner=False)
    with TestClient(app) as test_client:
        yield test_client


# Add pytest markers for different test types
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "server: mark test as server test")


def pytest_collection_modifyitems(config, items):  # noqa: ARG001
    """Modify test items during collection."""
    # Mark tests based on their location
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "server" in str(item.fspath):
            item.add_marker(pytest.mark.server)
