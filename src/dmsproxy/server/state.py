"""
This module defines the service object shared by the proxy's request handlers.

`ProxyService` owns the database backend and token verifier for the lifetime
of the server process. It is constructed explicitly by the application
factory, started in the lifespan startup hook and shut down with the
application, so nothing connects to a database at import time. Handlers reach
it through the `get_proxy_service` dependency.
"""

import logging
from typing import Any

from ..auth.verifier import TokenVerifier, create_verifier
from ..config import ProxyConfig
from ..query.proxy import QueryProxy
from ..storage import DatabaseBackend, create_backend

logger = logging.getLogger(__name__)


class ProxyService:
    """
    Holds the backend, verifier and `QueryProxy` for one application instance.

    A backend or verifier passed to the constructor is used as-is; otherwise
    each is built from the configuration when the service starts.
    """

    def __init__(self, config: ProxyConfig, backend: DatabaseBackend | None = None, verifier: TokenVerifier | None = None) -> None:
        self.config = config
        self.backend = backend
        self.verifier = verifier
        self._proxy: QueryProxy | None = None

    @property
    def started(self) -> bool:
        return self._proxy is not None

    @property
    def proxy(self) -> QueryProxy:
        """The request handler. Only available between `start()` and `shutdown()`."""
        if self._proxy is None:
            raise RuntimeError("Proxy service not started")
        return self._proxy

    async def start(self) -> None:
        """Connects the backend and prepares token verification."""
        if self._proxy is not None:
            return
        if self.backend is None:
            self.backend = create_backend(self.config.database)
        if self.verifier is None:
            self.verifier = create_verifier(self.config.auth)

        await self.backend.start()
        self._proxy = QueryProxy(self.backend, self.verifier)
        logger.info(f"Proxy service started on {self.backend.name} backend")

    async def shutdown(self) -> None:
        """Releases the backend's connections."""
        self._proxy = None
        if self.backend is not None:
            await self.backend.close()
        logger.info("Proxy service stopped")

    def get_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {"started": self.started, "auth_provider": self.config.auth.provider}
        if self.backend is not None:
            info.update(self.backend.get_info())
        return info
