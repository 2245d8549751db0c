"""
This module configures the Cross-Origin Resource Sharing (CORS) middleware.

The dashboard is served from a different origin than the proxy (a static host
or a local dev server), so the browser needs CORS headers on every response,
including the preflight for `POST /query` with an `Authorization` header.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def add_cors_middleware(app: FastAPI, origins: list[str] | None = None) -> None:
    """
    Adds the CORS middleware to the FastAPI application.

    Args:
        app: The `FastAPI` application instance.
        origins: Allowed origins. Defaults to every origin, matching the
                 original local API; restrict this in production.
                 Credentialed requests are only allowed for an explicit
                 origin list.
    """
    origins = origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
