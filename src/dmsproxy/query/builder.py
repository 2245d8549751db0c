"""
This module translates validated Query Requests into parameterized SQL.

Each builder returns a `Statement`: one SQL string using PostgreSQL-style
positional placeholders (`$1`, `$2`, ...) and the list of values bound to them.
Values from filters, the not-clause, the or-expression and insert/update
payloads are only ever passed as parameters. Identifiers (the table, column
names, the projection and the order column) are interpolated into the text as
given; they come from the dashboard's fixed vocabulary.

Placeholders are numbered in the order clauses are appended and are never
reused, so a statement with N parameters uses exactly `$1` .. `$N`.
"""

from dataclasses import dataclass, field
from typing import Any

from .models import DeleteRequest, InsertRequest, NotCondition, QueryFilter, SelectRequest, UpdateRequest

# Operators accepted in filters and or-expressions; anything else is equality.
FILTER_OPERATORS = {"eq": "=", "ilike": "ILIKE", "like": "LIKE"}

NOT_OPERATORS = {
    "eq": "=",
    "neq": "<>",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "like": "LIKE",
    "ilike": "ILIKE",
    "is": "IS",
}


@dataclass
class Statement:
    """
    A single SQL statement ready for the driver.

    Attributes:
        sql: The statement text with `$n` placeholders.
        params: The positional parameters, `params[0]` binds `$1`.
    """

    sql: str
    params: list[Any] = field(default_factory=list)


def _bind(params: list[Any], value: Any) -> str:
    params.append(value)
    return f"${len(params)}"


def _filter_clause(column: str, op: str, value: Any, params: list[Any]) -> str:
    operator = FILTER_OPERATORS.get(op.lower(), "=")
    return f"{column} {operator} {_bind(params, value)}"


def _not_clause(condition: NotCondition, params: list[Any]) -> str:
    if condition.op.lower() == "is" and condition.value is None:
        return f"{condition.column} IS NOT NULL"
    operator = NOT_OPERATORS.get(condition.op.lower(), "=")
    return f"NOT ({condition.column} {operator} {_bind(params, condition.value)})"


def _or_group(expression: str, params: list[Any]) -> str | None:
    clauses = []
    for part in (p.strip() for p in expression.split(",")):
        if not part:
            continue
        pieces = part.split(".")
        if len(pieces) < 3:
            continue
        column, op = pieces[0], pieces[1]
        pattern = ".".join(pieces[2:])
        clauses.append(_filter_clause(column, op, pattern, params))
    if not clauses:
        return None
    return "(" + " OR ".join(clauses) + ")"


def build_where(
    filters: list[QueryFilter],
    or_expression: str | None,
    not_condition: NotCondition | None,
    params: list[Any],
) -> str:
    """
    Builds the WHERE clause for a request, appending bound values to `params`.

    Clauses are appended in a fixed order: each filter, then the not-clause,
    then the or-group, all joined with AND. Numbering continues from the
    values already present in `params`.

    Args:
        filters: Column filters, in the order the client added them.
        or_expression: Comma-separated `column.op.pattern` triples, or None.
        not_condition: The negated condition, or None.
        params: The statement's parameter list, extended in place.

    Returns:
        `"WHERE ..."`, or an empty string when there are no clauses.
    """
    clauses = [_filter_clause(f.column, f.type, f.value, params) for f in filters]

    if not_condition is not None:
        clauses.append(_not_clause(not_condition, params))

    if or_expression:
        group = _or_group(or_expression, params)
        if group:
            clauses.append(group)

    if not clauses:
        return ""
    return "WHERE " + " AND ".join(clauses)


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


def build_count(request: SelectRequest) -> Statement:
    """Builds the `COUNT(*)` companion of a select, sharing its WHERE clause."""
    params: list[Any] = []
    where = build_where(request.filters, request.or_expression, request.not_, params)
    return Statement(_join(f"SELECT COUNT(*)::int AS count FROM {request.table}", where), params)


def build_select(request: SelectRequest) -> Statement:
    """
    Builds the main SELECT statement.

    `range` becomes `LIMIT to-from+1 OFFSET from`; a bare `limit` is only used
    when no range is given. Both are rendered as integer literals.
    """
    params: list[Any] = []
    where = build_where(request.filters, request.or_expression, request.not_, params)
    parts = [f"SELECT {request.select} FROM {request.table}", where]

    if request.order is not None and request.order.column:
        direction = "ASC" if request.order.ascending else "DESC"
        parts.append(f"ORDER BY {request.order.column} {direction}")

    if request.range is not None:
        parts.append(f"LIMIT {request.range.limit} OFFSET {request.range.offset}")
    elif request.limit is not None:
        parts.append(f"LIMIT {request.limit}")

    return Statement(_join(*parts), params)


def build_insert(request: InsertRequest) -> Statement:
    """Builds an INSERT for the first payload row only."""
    row = request.row
    params: list[Any] = []
    placeholders = [_bind(params, row[column]) for column in row]
    columns = ",".join(row)
    sql = f"INSERT INTO {request.table} ({columns}) VALUES ({','.join(placeholders)}) RETURNING *"
    return Statement(sql, params)


def build_update(request: UpdateRequest) -> Statement:
    """
    Builds an UPDATE. SET values take the first placeholders; the WHERE clause
    continues the numbering. An empty filter set updates every row.
    """
    params: list[Any] = []
    assignments = [f"{column} = {_bind(params, value)}" for column, value in request.payload.items()]
    where = build_where(request.filters, request.or_expression, request.not_, params)
    return Statement(_join(f"UPDATE {request.table} SET {', '.join(assignments)}", where, "RETURNING *"), params)


def build_delete(request: DeleteRequest) -> Statement:
    """Builds a DELETE. An empty filter set deletes every row."""
    params: list[Any] = []
    where = build_where(request.filters, request.or_expression, request.not_, params)
    return Statement(_join(f"DELETE FROM {request.table}", where), params)


def build_statements(request: SelectRequest | InsertRequest | UpdateRequest | DeleteRequest) -> list[Statement]:
    """Returns every statement a request will run, in execution order."""
    if isinstance(request, SelectRequest):
        statements = [build_count(request)] if request.wants_count else []
        return [*statements, build_select(request)]
    if isinstance(request, InsertRequest):
        return [build_insert(request)]
    if isinstance(request, UpdateRequest):
        return [build_update(request)]
    return [build_delete(request)]
