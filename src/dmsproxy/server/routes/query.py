"""
This module defines the query endpoint of the proxy.

`POST /query` accepts the JSON Query Request built by the dashboard's
Supabase-style adapter and returns the `{data, error, count}` envelope. Errors
raised by the proxy propagate as `QueryProxyError` subclasses and are rendered
by the application's exception handler with their own status code.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from ...errors import BackendError, InvalidRequestError, QueryProxyError
from ..dependencies import get_proxy_service
from ..models.response import QueryEnvelope
from ..state import ProxyService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["query"])


@router.post(
    "/query",
    response_model=QueryEnvelope,
    responses={400: {"model": QueryEnvelope}, 401: {"model": QueryEnvelope}, 500: {"model": QueryEnvelope}},
)
async def execute_query(request: Request, service: ProxyService = Depends(get_proxy_service)) -> Any:
    """
    Executes one Query Request.

    The body is read as raw JSON rather than bound to a model so that a
    missing table or unknown action is reported as a 400 in the envelope
    format, and so that authentication runs before the payload is validated.

    Returns:
        A `QueryEnvelope` with the rows and optional count.

    Raises:
        QueryProxyError: 400 for malformed requests, 401 for missing or
                         invalid credentials, 500 for database errors.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidRequestError("Request body must be valid JSON") from e

    try:
        result = await service.proxy.handle(body, request.headers.get("authorization"))
    except QueryProxyError:
        raise
    except Exception as e:
        logger.exception("Unexpected error while handling query")
        raise BackendError(f"Unexpected error: {e}") from e

    return QueryEnvelope(data=result.data, error=None, count=result.count)
