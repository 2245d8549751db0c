"""
This module defines the core request handler of the query proxy.

`QueryProxy` takes a decoded Query Request body and the caller's
`Authorization` header, and turns them into one SQL statement (two for a
counted select) executed on the configured backend. It owns no state between
calls: the backend and token verifier are injected, and every request is
parsed, executed and discarded within a single `handle()` call.
"""

import logging
from dataclasses import dataclass
from typing import Any

from ..auth.verifier import CallerIdentity, TokenVerifier, extract_bearer_token
from ..errors import BackendError
from ..my_logging import debug_log
from ..storage.base import DatabaseBackend
from .builder import build_count, build_delete, build_insert, build_select, build_update
from .models import MUTATING_ACTIONS, DeleteRequest, InsertRequest, SelectRequest, UpdateRequest, parse_query_request, resolve_action

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """
    The outcome of a successful request.

    Attributes:
        data: Result rows, `{"deleted": n}` for a delete that removed rows, or
              an empty list.
        count: The exact match count when the select asked for one, else None.
    """

    data: list[dict[str, Any]] | dict[str, Any]
    count: int | None = None


class QueryProxy:
    """Executes Query Requests against a database backend."""

    def __init__(self, backend: DatabaseBackend, verifier: TokenVerifier) -> None:
        self.backend = backend
        self.verifier = verifier

    async def authenticate(self, authorization: str | None) -> CallerIdentity:
        """Verifies the bearer credential in an `Authorization` header value."""
        token = extract_bearer_token(authorization)
        return await self.verifier.verify(token)

    async def handle(self, body: Any, authorization: str | None = None) -> QueryResult:
        """
        Handles one Query Request.

        The table and action are checked first, then the bearer credential for
        mutating actions, then the full request shape. No SQL is issued until
        all three pass.

        Args:
            body: The decoded JSON request body.
            authorization: The raw `Authorization` header, if any.

        Returns:
            A `QueryResult` with the rows (and count) to send back.

        Raises:
            QueryProxyError: A subclass describing the client, auth or backend
                             failure.
        """
        action = resolve_action(body)
        caller = await self.authenticate(authorization) if action in MUTATING_ACTIONS else None

        request = parse_query_request(body)
        try:
            if isinstance(request, SelectRequest):
                result = await self._select(request)
            elif isinstance(request, InsertRequest):
                result = await self._insert(request)
            elif isinstance(request, UpdateRequest):
                result = await self._update(request)
            else:
                result = await self._delete(request)
        except BackendError as e:
            logger.error(f"Query error on {request.action} {request.table}: {e.message}")
            raise

        if caller is not None:
            logger.info(f"{caller.uid} ran {request.action} on {request.table}")
        return result

    async def _select(self, request: SelectRequest) -> QueryResult:
        count = None
        if request.wants_count:
            statement = build_count(request)
            debug_log("Count query", sql=statement.sql, params=statement.params)
            count = await self.backend.fetch_value(statement.sql, statement.params)

        statement = build_select(request)
        debug_log("Select query", sql=statement.sql, params=statement.params)
        rows = await self.backend.fetch(statement.sql, statement.params)
        return QueryResult(data=rows, count=count)

    async def _insert(self, request: InsertRequest) -> QueryResult:
        statement = build_insert(request)
        debug_log("Insert query", sql=statement.sql, params=statement.params)
        return QueryResult(data=await self.backend.fetch(statement.sql, statement.params))

    async def _update(self, request: UpdateRequest) -> QueryResult:
        statement = build_update(request)
        debug_log("Update query", sql=statement.sql, params=statement.params)
        return QueryResult(data=await self.backend.fetch(statement.sql, statement.params))

    async def _delete(self, request: DeleteRequest) -> QueryResult:
        statement = build_delete(request)
        debug_log("Delete query", sql=statement.sql, params=statement.params)
        deleted = await self.backend.execute(statement.sql, statement.params)
        return QueryResult(data={"deleted": deleted} if deleted else [])
