"""DMS query proxy - Supabase-style JSON queries over PostgreSQL."""

__version__ = "0.1.0"

from .config import ProxyConfig, get_config
from .errors import QueryProxyError
from .query import QueryProxy, QueryResult, Statement, parse_query_request

__all__ = [
    "ProxyConfig",
    "QueryProxy",
    "QueryProxyError",
    "QueryResult",
    "Statement",
    "get_config",
    "parse_query_request",
]
