"""PatentsView query client: build, execute, validate, decode, parse, flatten."""

import json
from typing import Any, Dict, List, Mapping, Optional

import requests
from jsonschema import Draft202012Validator, ValidationError

from patentquery.retrieval.errors import (
    DecodeError,
    InvalidQuery,
    MalformedResponse,
    ServerError,
    TransportError,
    UnexpectedStatus,
)
from patentquery.retrieval.flatten import DEFAULT_SEPARATOR, flatten_result
from patentquery.retrieval.models import (
    Endpoint,
    FlatRow,
    QueryRequest,
    QueryResult,
    QuerySpec,
    RawResponse,
    get_endpoint,
)
from patentquery.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.patentsview.org"
DEFAULT_USER_AGENT = "patentquery/0.1"
DEFAULT_REASON_HEADER = "X-Status-Reason"
DEFAULT_ENCODING = "utf-8"


def response_schema(endpoint: Endpoint) -> Dict[str, Any]:
    """JSON schema for the top-level response object of ``endpoint``."""
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "required": [endpoint.records_key, "count", endpoint.total_key],
        "additionalProperties": False,
        "properties": {
            # The API sends null instead of [] when nothing matches
            endpoint.records_key: {"type": ["array", "null"], "items": {"type": "object"}},
            "count": {"type": "integer", "minimum": 0},
            endpoint.total_key: {"type": "integer", "minimum": 0},
        },
    }


def _format_error_path(error: ValidationError) -> str:
    if not error.absolute_path:
        return "$"
    return ".".join(("$", *map(str, error.absolute_path)))


def declared_charset(content_type: Optional[str]) -> Optional[str]:
    """Extract the charset parameter from a Content-Type header value."""
    if not content_type:
        return None
    for param in content_type.split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset":
            value = value.strip().strip("\"'")
            return value or None
    return None


class QueryClient:
    """Single-request client for one PatentsView endpoint.

    Holds only configuration and a ``requests.Session``; calls share no other
    state. No retries, no pagination, no rate limiting.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        endpoint: str = "patents",
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        reason_header: str = DEFAULT_REASON_HEADER,
        default_page_size: int = 25,
        separator: str = DEFAULT_SEPARATOR,
    ):
        """
        Initialize client.

        Args:
            base_url: API root, e.g. https://api.patentsview.org
            endpoint: Registered endpoint name (patents, inventors, ...)
            timeout: Seconds to wait for the server. None waits indefinitely.
            session: Optional requests session (or compatible object with ``get``)
            user_agent: User-Agent header value
            reason_header: Response header carrying the error reason on 400/500
            default_page_size: per_page used by fetch_all when none is given
            separator: Joins nested field names to element keys when flattening
        """
        self.base_url = base_url.rstrip("/")
        self.endpoint = get_endpoint(endpoint)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.user_agent = user_agent
        self.reason_header = reason_header
        self.default_page_size = default_page_size
        self.separator = separator
        self._validator = Draft202012Validator(response_schema(self.endpoint))

    @classmethod
    def from_config(cls, config: Dict[str, Any], **overrides: Any) -> "QueryClient":
        """Build a client from a loaded config dict (see config.loader)."""
        api = config.get("api", {})
        defaults = config.get("defaults", {})
        kwargs: Dict[str, Any] = {
            "base_url": api.get("base_url", DEFAULT_BASE_URL),
            "endpoint": api.get("endpoint", "patents"),
            "timeout": api.get("timeout_seconds"),
            "user_agent": api.get("user_agent", DEFAULT_USER_AGENT),
            "reason_header": api.get("reason_header", DEFAULT_REASON_HEADER),
            "default_page_size": defaults.get("per_page", 25),
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.endpoint.path}"

    def _get_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    def build_request(self, spec: QuerySpec) -> QueryRequest:
        """Encode the spec as q/f/o (and optional s) JSON-string parameters."""
        if len(set(spec.fields)) != len(spec.fields):
            logger.warning(f"Duplicate field names requested: {spec.fields}")
        params = {
            "q": json.dumps(spec.filter),
            "f": json.dumps(spec.fields),
            "o": json.dumps(spec.options),
        }
        if spec.sort:
            params["s"] = json.dumps(spec.sort)
        return QueryRequest(url=self.url, params=params)

    def execute(self, request: QueryRequest) -> RawResponse:
        """
        Issue the GET request once.

        Raises:
            TransportError: If the request fails before a response arrives
        """
        logger.debug(f"GET {request.url} params={request.params}")
        try:
            response = self.session.get(
                request.url,
                params=request.params,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {request.url} failed: {e}")
            raise TransportError(f"Request to {request.url} failed: {e}") from e

        headers = {str(key): str(value) for key, value in (response.headers or {}).items()}
        body = response.content or b""
        raw = RawResponse(
            body=body,
            status_code=response.status_code,
            headers=headers,
            encoding=declared_charset(_lookup_header(headers, "Content-Type")),
        )
        logger.info(f"Received HTTP {raw.status_code} ({len(body)} bytes) from {request.url}")
        return raw

    def validate_status(self, status_code: int, headers: Optional[Mapping[str, str]] = None) -> None:
        """
        Map the status code to success or an error.

        Raises:
            InvalidQuery: On 400
            ServerError: On 500
            UnexpectedStatus: On any other non-200 code
        """
        if status_code == 200:
            return

        reason = _lookup_header(headers or {}, self.reason_header)
        if status_code == 400:
            error = InvalidQuery(status_code, reason)
        elif status_code == 500:
            error = ServerError(status_code, reason)
        else:
            error = UnexpectedStatus(status_code, reason)
        logger.error(f"Query rejected by {self.endpoint.name} endpoint: {error}")
        raise error

    def decode(self, body: bytes, encoding: Optional[str] = None) -> str:
        """
        Decode the body with the declared charset (UTF-8 when none is declared).

        Raises:
            DecodeError: On invalid bytes or an unknown charset
        """
        charset = encoding or DEFAULT_ENCODING
        try:
            return body.decode(charset)
        except LookupError as e:
            raise DecodeError(f"Unknown response encoding: {charset}") from e
        except UnicodeDecodeError as e:
            raise DecodeError(f"Response body is not valid {charset}: {e}") from e

    def parse(self, text: str) -> QueryResult:
        """
        Parse the body and check its top-level shape.

        Raises:
            MalformedResponse: If the text is not JSON or the shape does not match
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedResponse(f"Response body is not valid JSON: {e}") from e

        try:
            self._validator.validate(data)
        except ValidationError as e:
            raise MalformedResponse(
                f"Unexpected response shape at {_format_error_path(e)}: {e.message}"
            ) from e

        records = data[self.endpoint.records_key] or []
        count = int(data["count"])
        total_count = int(data[self.endpoint.total_key])
        if count != len(records):
            logger.warning(f"Response count {count} does not match {len(records)} records received")

        return QueryResult(
            records=records,
            count=count,
            total_count=total_count,
            records_key=self.endpoint.records_key,
            total_key=self.endpoint.total_key,
        )

    def flatten(self, result: QueryResult) -> List[FlatRow]:
        return flatten_result(result, separator=self.separator)

    def query(self, spec: QuerySpec) -> QueryResult:
        """Run build, execute, validate, decode and parse for one request."""
        request = self.build_request(spec)
        raw = self.execute(request)
        self.validate_status(raw.status_code, raw.headers)
        result = self.parse(self.decode(raw.body, raw.encoding))
        logger.info(
            f"Parsed {result.count} of {result.total_count} {self.endpoint.records_key}"
        )
        return result

    def fetch_all(self, spec: QuerySpec, page_size: Optional[int] = None) -> List[FlatRow]:
        """
        Fetch a single page of ``page_size`` records and flatten it.

        Only one request is made. When the server reports more matches than
        fit on the page, a warning is logged and the caller must raise
        ``page_size`` or issue further requests.
        """
        per_page = page_size or self.default_page_size
        result = self.query(spec.with_options(per_page=per_page))
        if not result.is_complete:
            logger.warning(
                f"Returned {result.count} of {result.total_count} matching "
                f"{self.endpoint.records_key}; increase per_page to fetch more"
            )
        return self.flatten(result)


def _lookup_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None
