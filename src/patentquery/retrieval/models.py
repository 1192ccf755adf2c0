"""Query and result models for the PatentsView query API."""

import json
from copy import deepcopy
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# A flattened display row: scalar fields plus expanded nested-collection keys.
FlatRow = Dict[str, Any]


def _ensure_json_compatible(value: Any, label: str) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{label} must be JSON-serializable: {e}") from e
    return deepcopy(value)


class Endpoint(BaseModel):
    """A queryable PatentsView entity and the response keys it uses."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    records_key: str
    total_key: str


ENDPOINTS: Dict[str, Endpoint] = {
    endpoint.name: endpoint
    for endpoint in [
        Endpoint(name="patents", path="patents/query", records_key="patents", total_key="total_patent_count"),
        Endpoint(name="inventors", path="inventors/query", records_key="inventors", total_key="total_inventor_count"),
        Endpoint(name="assignees", path="assignees/query", records_key="assignees", total_key="total_assignee_count"),
        Endpoint(
            name="cpc_subsections",
            path="cpc_subsections/query",
            records_key="cpc_subsections",
            total_key="total_cpc_subsection_count",
        ),
        Endpoint(
            name="uspc_mainclasses",
            path="uspc_mainclasses/query",
            records_key="uspc_mainclasses",
            total_key="total_uspc_mainclass_count",
        ),
        Endpoint(
            name="nber_subcategories",
            path="nber_subcategories/query",
            records_key="nber_subcategories",
            total_key="total_nber_subcategory_count",
        ),
        Endpoint(name="locations", path="locations/query", records_key="locations", total_key="total_location_count"),
    ]
}


def get_endpoint(name: str) -> Endpoint:
    """
    Look up a registered endpoint by name.

    Raises:
        ValueError: If the endpoint is not registered
    """
    try:
        return ENDPOINTS[name]
    except KeyError:
        known = ", ".join(sorted(ENDPOINTS))
        raise ValueError(f"Unknown endpoint: {name} (known: {known})") from None


class QuerySpec(BaseModel):
    """Filter predicate, requested fields and options for a single query."""

    model_config = ConfigDict(frozen=True)

    filter: Dict[str, Any]
    fields: List[str]
    options: Dict[str, Any] = Field(default_factory=dict)
    sort: Optional[List[Dict[str, str]]] = None

    @field_validator("filter")
    @classmethod
    def _check_filter(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        return _ensure_json_compatible(value, "filter")

    @field_validator("options")
    @classmethod
    def _check_options(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        return _ensure_json_compatible(value, "options")

    @field_validator("fields")
    @classmethod
    def _check_fields(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("fields must name at least one field")
        return list(value)

    def with_options(self, **overrides: Any) -> "QuerySpec":
        """Return a copy of this spec with ``overrides`` merged into its options."""
        return QuerySpec(
            filter=self.filter,
            fields=self.fields,
            options={**self.options, **overrides},
            sort=self.sort,
        )


class QueryRequest(BaseModel):
    """A built GET request: endpoint URL plus JSON-encoded query parameters."""

    model_config = ConfigDict(frozen=True)

    url: str
    params: Dict[str, str]


class RawResponse(BaseModel):
    """Undecoded response body with the diagnostics needed to validate it."""

    body: bytes
    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    encoding: Optional[str] = None


class QueryResult(BaseModel):
    """Parsed server response for one query."""

    records: List[Dict[str, Any]]
    count: int
    total_count: int
    records_key: str = "patents"
    total_key: str = "total_patent_count"

    @property
    def is_complete(self) -> bool:
        """True when every matching record was returned in this response."""
        return self.count >= self.total_count

    def as_response(self) -> Dict[str, Any]:
        """Rebuild the top-level response object using the entity's key names."""
        return {
            self.records_key: self.records,
            "count": self.count,
            self.total_key: self.total_count,
        }
