"""
This module defines the Pydantic models for API responses.

Query responses use the same `{data, error, count}` envelope the dashboard's
Supabase-style adapter expects, for both success and failure, so the UI can
treat the proxy exactly like a Supabase client.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    """The `error` member of a failed query response."""

    message: str = Field(..., description="Human-readable error message")


class QueryEnvelope(BaseModel):
    """
    Represents the response to a query request.

    Attributes:
        data: Result rows, `{"deleted": n}` for a delete, or null on error.
        error: Null on success, otherwise an object with a `message`.
        count: The exact match count when a select requested `count: "exact"`.
    """

    data: list[dict[str, Any]] | dict[str, Any] | None = Field(None, description="Result rows")
    error: ErrorBody | None = Field(None, description="Error details, null on success")
    count: int | None = Field(None, description="Exact row count, when requested")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"data": [{"id": 1, "plant": "A", "status": "open"}], "error": None, "count": 42},
                {"data": None, "error": {"message": "Unknown action: upsert"}, "count": None},
            ]
        }
    }


class HealthResponse(BaseModel):
    """
    Represents the response model for the server health check endpoint.

    Attributes:
        status: `healthy`, or `degraded` when the backend is not connected.
        version: The version number of the proxy.
        uptime: The uptime of the server in seconds.
        backend: Details about the database backend.
    """

    status: str = Field(..., description="Server health status")
    version: str = Field(..., description="Proxy version")
    uptime: float | None = Field(None, description="Server uptime in seconds")
    backend: dict[str, Any] | None = Field(None, description="Database backend details")

    model_config = {"json_schema_extra": {"examples": [{"status": "healthy", "version": "0.1.0", "uptime": 3600.5, "backend": {"backend": "postgres"}}]}}
