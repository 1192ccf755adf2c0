"""Error taxonomy for query failures.

Every error is terminal for the request that produced it. Nothing is retried.
"""

from typing import Optional


class QueryError(RuntimeError):
    """Base class for all query failures."""


class StatusError(QueryError):
    """Non-200 response. ``reason`` carries the server's status-reason header."""

    def __init__(self, status_code: int, reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        message = f"HTTP {status_code}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidQuery(StatusError):
    """Status 400: malformed filter JSON or an unknown field/value."""


class ServerError(StatusError):
    """Status 500: opaque upstream failure."""


class UnexpectedStatus(StatusError):
    """Any status other than 200, 400 or 500."""


class DecodeError(QueryError):
    """Response bytes are not valid for the declared character encoding."""


class MalformedResponse(QueryError):
    """Body is not JSON or lacks the expected top-level shape."""


class TransportError(QueryError):
    """The HTTP request itself failed (connection, timeout, invalid URL)."""
