"""
This package implements the generic query proxy.

It turns the JSON Query Requests sent by the dashboard's Supabase-style
adapter into parameterized SQL: `models` validates the request at the
boundary, `builder` produces the statement text and parameters, and `proxy`
authenticates mutating actions and runs the statements on a backend.
"""

from .builder import Statement, build_count, build_delete, build_insert, build_select, build_statements, build_update, build_where
from .models import DeleteRequest, InsertRequest, QueryRequest, SelectRequest, UpdateRequest, parse_query_request
from .proxy import QueryProxy, QueryResult

__all__ = [
    "DeleteRequest",
    "InsertRequest",
    "QueryProxy",
    "QueryRequest",
    "QueryResult",
    "SelectRequest",
    "Statement",
    "UpdateRequest",
    "build_count",
    "build_delete",
    "build_insert",
    "build_select",
    "build_statements",
    "build_update",
    "build_where",
    "parse_query_request",
]
