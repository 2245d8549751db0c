"""
This module defines the Pydantic models for the Query Request accepted by the proxy.

A Query Request mirrors the state object built by the dashboard's Supabase-style
query adapter: a target table, an action, and the filters, ordering and paging
options accumulated by the chained builder calls. The request is modelled as a
discriminated union keyed on `action`, so each action only accepts the payload
shape it can execute:

- `select` ignores any payload.
- `insert` requires a non-empty list of row objects (only the first is used).
- `update` requires a single column-to-value object.
- `delete` takes no payload.

Validation happens at the boundary, before any SQL is built. Field names follow
the wire format, so `or`, `not`, `orRaw` and `range.from` are exposed through
aliases.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..errors import InvalidPayloadError, InvalidRequestError, MissingTableError, UnknownActionError

ACTIONS = ("select", "insert", "update", "delete")
MUTATING_ACTIONS = ("insert", "update", "delete")


class QueryFilter(BaseModel):
    """
    A single `column <op> value` condition.

    Attributes:
        column: The column the condition applies to.
        type: The operator name sent by the client (`eq`, `ilike`, `like`);
              anything else is treated as equality.
        value: The value bound as a parameter.
    """

    model_config = ConfigDict(extra="ignore")

    column: str = Field(..., min_length=1)
    type: str = "eq"
    value: Any = None


class NotCondition(BaseModel):
    """The single negated condition produced by the adapter's `.not()` call."""

    model_config = ConfigDict(extra="ignore")

    column: str = Field(..., min_length=1)
    op: str = "eq"
    value: Any = None


class OrderSpec(BaseModel):
    """Ordering on one column; descending unless `ascending` is set."""

    model_config = ConfigDict(extra="ignore")

    column: str | None = None
    ascending: bool = False


class RangeSpec(BaseModel):
    """
    A zero-based, inclusive row window.

    Attributes:
        start: Index of the first row (`from` on the wire).
        end: Index of the last row (`to` on the wire).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    start: int = Field(..., alias="from", ge=0)
    end: int = Field(..., alias="to", ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "RangeSpec":
        if self.end < self.start:
            raise ValueError("range.to must not be less than range.from")
        return self

    @property
    def limit(self) -> int:
        return self.end - self.start + 1

    @property
    def offset(self) -> int:
        return self.start


class BaseQueryRequest(BaseModel):
    """Fields shared by every action."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    table: str = Field(..., min_length=1, description="Target relation name")
    select: str = Field("*", min_length=1, description="Column projection expression")
    filters: list[QueryFilter] = Field(default_factory=list)
    or_raw: str | None = Field(None, alias="orRaw", description="Alternate-clause expression")
    or_: str | None = Field(None, alias="or", description="Alias of orRaw")
    not_: NotCondition | None = Field(None, alias="not")
    order: OrderSpec | None = None
    range: RangeSpec | None = None
    limit: int | None = Field(None, ge=0)
    single: bool = False
    count: str | None = None

    @field_validator("select", mode="before")
    @classmethod
    def _default_select(cls, value: Any) -> Any:
        # The adapter sends an empty projection as "" or null.
        return value or "*"

    @field_validator("filters", mode="before")
    @classmethod
    def _default_filters(cls, value: Any) -> Any:
        return value or []

    @property
    def or_expression(self) -> str | None:
        """The or-expression, preferring `orRaw` over `or`."""
        return self.or_raw or self.or_ or None


class SelectRequest(BaseQueryRequest):
    """Read rows, optionally counting all matches."""

    action: Literal["select"] = "select"

    @property
    def wants_count(self) -> bool:
        return self.count == "exact"


class InsertRequest(BaseQueryRequest):
    """Insert the first row of `payload`."""

    action: Literal["insert"]
    payload: list[dict[str, Any]] = Field(..., min_length=1)

    @field_validator("payload")
    @classmethod
    def _first_row_has_columns(cls, value: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not value[0]:
            raise ValueError("first payload row has no columns")
        return value

    @property
    def row(self) -> dict[str, Any]:
        return self.payload[0]


class UpdateRequest(BaseQueryRequest):
    """Set the columns in `payload` on every row matched by the filters."""

    action: Literal["update"]
    payload: dict[str, Any] = Field(..., min_length=1)


class DeleteRequest(BaseQueryRequest):
    """Delete every row matched by the filters."""

    action: Literal["delete"]


QueryRequest = Annotated[SelectRequest | InsertRequest | UpdateRequest | DeleteRequest, Field(discriminator="action")]

_MODELS: dict[str, type[BaseQueryRequest]] = {
    "select": SelectRequest,
    "insert": InsertRequest,
    "update": UpdateRequest,
    "delete": DeleteRequest,
}


def resolve_action(body: Any) -> str:
    """
    Performs the cheap checks that must precede authentication.

    Args:
        body: The decoded JSON request body.

    Returns:
        The requested action, defaulting to `select`.

    Raises:
        InvalidRequestError: If the body is not a JSON object.
        MissingTableError: If no table is named.
        UnknownActionError: If the action is not one of `select|insert|update|delete`.
    """
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    if not body.get("table"):
        raise MissingTableError()
    action = body.get("action") or "select"
    if action not in ACTIONS:
        raise UnknownActionError(action)
    return action


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "body"
    return f"Invalid request: {location}: {first['msg']}"


def parse_query_request(body: Any) -> SelectRequest | InsertRequest | UpdateRequest | DeleteRequest:
    """
    Validates a request body into the model for its action.

    Raises:
        InvalidPayloadError: If an insert or update payload has the wrong shape.
        InvalidRequestError: For any other malformed field.
    """
    action = resolve_action(body)
    model = _MODELS[action]
    try:
        return model.model_validate({**body, "action": action})  # type: ignore[return-value]
    except ValidationError as e:
        if action in ("insert", "update") and any(err["loc"][:1] == ("payload",) for err in e.errors()):
            raise InvalidPayloadError(action) from e
        raise InvalidRequestError(_describe(e)) from e
