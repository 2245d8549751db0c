"""
This module defines the health check endpoint for the proxy.

It provides a simple way to verify that the server is running and that its
database backend is connected.
"""

import time
from typing import Any

from fastapi import APIRouter, Depends

from ... import __version__
from ..dependencies import get_proxy_service
from ..models.response import HealthResponse
from ..state import ProxyService

router = APIRouter(tags=["health"])

# Track server start time for uptime calculation
_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(service: ProxyService = Depends(get_proxy_service)) -> Any:
    """
    Provides a health check endpoint for monitoring the server's status.

    Returns:
        A `HealthResponse` object containing the server's status, version,
        uptime and backend details.
    """
    uptime = time.time() - _start_time
    info = service.get_info()
    status = "healthy" if info.get("connected") else "degraded"

    return HealthResponse(status=status, version=__version__, uptime=uptime, backend=info)
