"""
This module defines the error hierarchy raised while handling a Query Request.

Every error carries the HTTP status code it maps to and a message that is
returned to the caller verbatim inside the `{data, error}` envelope. Errors are
raised where they are detected and translated into a response exactly once, by
the exception handler registered on the FastAPI application.
"""


class QueryProxyError(Exception):
    """Base class for all errors surfaced to a proxy caller."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(QueryProxyError):
    """The request body is not a well-formed Query Request."""

    status_code = 400


class MissingTableError(InvalidRequestError):
    """The request names no target table."""

    def __init__(self, message: str = "Missing table") -> None:
        super().__init__(message)


class InvalidPayloadError(InvalidRequestError):
    """The insert or update payload has the wrong shape."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Invalid payload for {action}")
        self.action = action


class UnknownActionError(InvalidRequestError):
    """The request names an action the proxy does not implement."""

    def __init__(self, action: object) -> None:
        super().__init__(f"Unknown action: {action}")
        self.action = action


class AuthRequiredError(QueryProxyError):
    """A mutating action arrived without a bearer credential."""

    status_code = 401

    def __init__(self, message: str = "Missing Authorization header (Bearer token required)") -> None:
        super().__init__(message)


class AuthInvalidError(QueryProxyError):
    """The bearer credential failed verification."""

    status_code = 401

    def __init__(self, message: str = "Invalid or expired auth token") -> None:
        super().__init__(message)


class BackendError(QueryProxyError):
    """The database driver rejected or failed to run a statement."""

    status_code = 500
