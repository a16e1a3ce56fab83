"""Shared fixtures: a fake Ghost Security API served through httpx.MockTransport."""

import json
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from core.client import GhostSecurityClient
from core.config import Settings
from core.schema import SchemaVersion

BASE_URL = "https://api.test"

Responder = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeApi:
    """Routes requests by (method, path) and records every request it sees.

    A route registered with several responders serves them in order and
    keeps repeating the last one.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Responder]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responders: Responder) -> None:
        self.routes[(method, path)] = list(responders)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responders = self.routes.get((request.method, request.url.path))
        if not responders:
            return httpx.Response(404, json={"detail": "not found"})
        responder = responders.pop(0) if len(responders) > 1 else responders[0]
        return responder(request) if callable(responder) else responder

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and request.url.path == path
        ]


def paged(pages: list[list[dict[str, Any]]], *, endless: bool = False) -> Callable:
    """Responder serving pages keyed by an opaque cursor.

    Page i is reached with cursor "cur/{i}==".  With endless=True the last
    page always claims has_more and keeps handing out new cursors.
    """

    def respond(request: httpx.Request) -> httpx.Response:
        cursor = request.url.params.get("cursor")
        index = int(cursor.split("/")[1].rstrip("=")) if cursor else 0
        items = pages[min(index, len(pages) - 1)]
        has_more = endless or index < len(pages) - 1
        body: dict[str, Any] = {"items": items, "has_more": has_more}
        if has_more:
            body["next_cursor"] = f"cur/{index + 1}=="
        return httpx.Response(200, json=body)

    return respond


def sent_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


def nested_finding(
    finding_id: str,
    *,
    severity: Optional[str] = "high",
    status: Optional[str] = "open",
    title: Optional[str] = "SQL Injection",
    repo: Optional[dict[str, Any]] = None,
    location: Optional[dict[str, Any]] = None,
    **details: Any,
) -> dict[str, Any]:
    """A finding in the v2 (nested details) shape."""
    record: dict[str, Any] = {
        "id": finding_id,
        "status": status,
        "user_status": "",
        "organization_id": "org-1",
        "created_at": "2025-01-02T03:04:05Z",
        "updated_at": "2025-01-03T03:04:05Z",
        "details": {"title": title, "severity": severity, "description": "desc", **details},
    }
    if repo is not None:
        record["repo"] = repo
    if location is not None:
        record["details"]["location"] = location
    return record


def flat_finding(
    finding_id: str,
    *,
    severity: str = "medium",
    status: str = "open",
    finding_class: str = "xss",
    repo_url: Optional[str] = None,
    location: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """A finding in the v1 (flat) shape."""
    record: dict[str, Any] = {
        "id": finding_id,
        "name": f"Finding {finding_id}",
        "severity": severity,
        "status": status,
        "class": finding_class,
        "created_at": "2024-06-01T00:00:00Z",
    }
    if repo_url is not None:
        record["repo_url"] = repo_url
    if location is not None:
        record["location"] = location
    return record


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {"api_key": "test-key", "base_url": BASE_URL}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def make_client(api: FakeApi):
    """Factory for clients wired to the fake API."""

    def _make(**overrides: Any) -> GhostSecurityClient:
        return GhostSecurityClient(
            make_settings(**overrides), transport=httpx.MockTransport(api.handler)
        )

    return _make


@pytest.fixture
def client(make_client) -> GhostSecurityClient:
    return make_client()


@pytest.fixture
def v1_client(make_client) -> GhostSecurityClient:
    return make_client(schema_version=SchemaVersion.V1)
