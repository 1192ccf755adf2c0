"""Pytest configuration and fixtures."""

import json
from types import SimpleNamespace

import pytest

from patentquery.retrieval.client import QueryClient


class FakeSession:
    """Stands in for requests.Session: records GET calls, returns one canned response."""

    def __init__(self, status_code=200, body=b"", headers=None, error=None):
        self.status_code = status_code
        self.body = body
        self.headers = headers if headers is not None else {"Content-Type": "application/json"}
        self.error = error
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(status_code=self.status_code, content=self.body, headers=self.headers)


def patents_body(records, total=None, count=None):
    """Encode a patents-endpoint response body."""
    return json.dumps(
        {
            "patents": records,
            "count": len(records) if count is None else count,
            "total_patent_count": len(records) if total is None else total,
        }
    ).encode("utf-8")


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def client(fake_session):
    """Client for the patents endpoint backed by a fake session."""
    return QueryClient("https://api.example.test", session=fake_session, timeout=5)


@pytest.fixture
def make_body():
    return patents_body
