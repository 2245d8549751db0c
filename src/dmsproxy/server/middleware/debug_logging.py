"""This module provides a debug logging middleware for FastAPI.

When enabled, this middleware intercepts all incoming requests and outgoing
responses to log detailed information to stderr, including headers and bodies.
This is useful for seeing exactly what the dashboard's query adapter sends,
but should be disabled in production due to its overhead and the row data it
writes to the logs. Bearer tokens are redacted.
"""

import json
import sys
import time
from collections.abc import AsyncGenerator, Callable
from typing import Any, cast

from fastapi import FastAPI, Request, Response
from fastapi.responses import StreamingResponse

REDACTED_HEADERS = {"authorization", "cookie"}


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Returns a copy of `headers` with credentials masked."""
    return {key: ("***" if key.lower() in REDACTED_HEADERS else value) for key, value in headers.items()}


def _write_body(label: str, body: bytes) -> None:
    try:
        sys.stderr.write(f"{label}: {json.dumps(json.loads(body), indent=2, default=str)}\n")
    except (json.JSONDecodeError, UnicodeDecodeError):
        sys.stderr.write(f"{label} (raw): {body[:500].decode('utf-8', errors='ignore')}\n")


def add_debug_logging_middleware(app: FastAPI, debug: bool = True) -> None:
    """
    Adds a debug logging middleware to the FastAPI application.

    Args:
        app: The `FastAPI` application instance.
        debug: A boolean to enable or disable the middleware. Defaults to True.
    """
    if not debug:
        return

    @app.middleware("http")
    async def debug_log_requests(request: Request, call_next: Callable[[Request], Any]) -> Response:
        """Middleware function to log request and response details."""
        sys.stderr.write(f"\n{'=' * 60}\n")
        sys.stderr.write(f"REQUEST: {request.method} {request.url.path}\n")
        sys.stderr.write(f"Headers: {redact_headers(dict(request.headers))}\n")
        if request.method == "POST":
            body = await request.body()
            if body:
                _write_body("Body", body)

        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        sys.stderr.write(f"\nRESPONSE: {response.status_code}\n")
        sys.stderr.write(f"Process Time: {process_time:.3f}s\n")

        if not isinstance(response, StreamingResponse):
            sys.stderr.write(f"{'=' * 60}\n")
            return cast(Response, response)

        # Drain the streamed body so it can be logged, then replay it.
        body_chunks: list[bytes] = []
        async for chunk in response.body_iterator:
            if isinstance(chunk, bytes):
                body_chunks.append(chunk)
            elif isinstance(chunk, str):
                body_chunks.append(chunk.encode("utf-8"))
            else:
                body_chunks.append(bytes(chunk))
        _write_body("Body", b"".join(body_chunks))
        sys.stderr.write(f"{'=' * 60}\n")

        async def generate() -> AsyncGenerator[bytes, None]:
            for chunk in body_chunks:
                yield chunk

        return StreamingResponse(generate(), status_code=response.status_code, headers=dict(response.headers), media_type=response.media_type)
