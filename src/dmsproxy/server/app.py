"""
This module configures and initializes the FastAPI application for the proxy.

`create_app` is an application factory: it builds the `ProxyService` (database
backend plus token verifier) explicitly and ties its lifecycle to the
application's lifespan, so no connection is opened at import time and tests can
inject their own backend and verifier.

Key responsibilities include:
- Starting the proxy service on startup and closing its pool on shutdown.
- Configuring middleware for CORS, request logging, and optional debug logging.
- Rendering every `QueryProxyError` as the `{data, error}` envelope with the
  error's status code.
- Including the query and health routers and a root info endpoint.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..auth.verifier import TokenVerifier
from ..banner import print_server_banner
from ..config import ProxyConfig, get_config
from ..errors import QueryProxyError
from ..my_logging import setup_logging
from ..storage import DatabaseBackend
from .middleware.cors import add_cors_middleware
from .middleware.debug_logging import add_debug_logging_middleware
from .middleware.logging import add_logging_middleware
from .routes import health, query
from .state import ProxyService


async def query_proxy_error_handler(_request: Request, exc: QueryProxyError) -> JSONResponse:
    """Renders a proxy error in the envelope format the dashboard expects."""
    return JSONResponse(status_code=exc.status_code, content={"data": None, "error": {"message": exc.message}, "count": None})


def create_app(
    config: ProxyConfig | None = None,
    backend: DatabaseBackend | None = None,
    verifier: TokenVerifier | None = None,
    show_banner: bool = True,
) -> FastAPI:
    """
    Builds the proxy application.

    Args:
        config: Configuration to use; loaded from files and environment if None.
        backend: Database backend; built from `config.database` if None.
        verifier: Token verifier; built from `config.auth` if None.
        show_banner: Print the startup banner when the application starts.

    Returns:
        The configured `FastAPI` application.
    """
    config = config or get_config()
    service = ProxyService(config, backend=backend, verifier=verifier)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage application lifecycle."""
        setup_logging(config.debug)
        await service.start()
        if show_banner:
            print_server_banner(config.server_host, config.server_port, service.backend.name if service.backend else "unknown")
        yield
        await service.shutdown()

    app = FastAPI(
        title="DMS Query Proxy",
        description="Supabase-style JSON queries translated to parameterized SQL",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.proxy_service = service

    # Add middleware
    add_cors_middleware(app, config.cors_origins)
    add_logging_middleware(app)
    add_debug_logging_middleware(app, debug=config.debug)

    app.add_exception_handler(QueryProxyError, query_proxy_error_handler)

    # Include routers
    app.include_router(query.router)
    app.include_router(health.router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic server information."""
        return {
            "name": "DMS Query Proxy",
            "version": __version__,
            "description": "Supabase-style JSON queries translated to parameterized SQL",
            "docs_url": "/docs",
            "health_url": "/health",
        }

    return app
