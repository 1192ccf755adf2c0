"""Query the PatentsView API and flatten nested results into rows."""

from patentquery.retrieval.client import QueryClient
from patentquery.retrieval.errors import (
    DecodeError,
    InvalidQuery,
    MalformedResponse,
    QueryError,
    ServerError,
    TransportError,
    UnexpectedStatus,
)
from patentquery.retrieval.models import FlatRow, QueryResult, QuerySpec

__version__ = "0.1.0"

__all__ = [
    "DecodeError",
    "FlatRow",
    "InvalidQuery",
    "MalformedResponse",
    "QueryClient",
    "QueryError",
    "QueryResult",
    "QuerySpec",
    "ServerError",
    "TransportError",
    "UnexpectedStatus",
]
