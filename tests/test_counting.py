"""Tests for finding statistics.

Business behaviour: aggregation is a pure one-pass grouping whose buckets
always add up to the total; the count resolver prefers the dedicated
endpoint and falls back to a bounded walk without ever surfacing the
endpoint's failure.
"""

import random

import httpx
import pytest

from conftest import flat_finding, nested_finding, paged
from core.counting import aggregate, count_all_findings, resolve_counts
from core.errors import MalformedUpstreamResponse, UpstreamRequestFailed
from core.models import CountResult
from core.schema import SchemaVersion


def _mixed_findings() -> list[dict]:
    return [
        nested_finding("f-1", severity="high", status="open", repo={"id": "r-1", "name": "api"}),
        nested_finding("f-2", severity="high", status="resolved", repo={"id": "r-1", "name": "api"}),
        nested_finding("f-3", severity="low", title="XSS", repo={"id": "r-2"}),
        nested_finding("f-4", severity=None, status=None, title=None),
    ]


def _assert_buckets_sum_to_total(counts: CountResult) -> None:
    for buckets in (counts.by_severity, counts.by_status, counts.by_title, counts.by_repo):
        assert sum(buckets.values()) == counts.total_count


class TestAggregate:
    def test_groups_nested_findings(self) -> None:
        counts = aggregate(_mixed_findings())

        assert counts.total_count == 4
        assert counts.by_severity == {"high": 2, "low": 1, "unknown": 1}
        assert counts.by_status == {"open": 2, "resolved": 1, "unknown": 1}
        assert counts.by_title == {"SQL Injection": 2, "XSS": 1, "unknown": 1}
        assert counts.by_repo == {"api": 2, "r-2": 1, "unknown": 1}
        _assert_buckets_sum_to_total(counts)

    def test_groups_flat_findings_by_class_and_repo_url(self) -> None:
        records = [
            flat_finding("a", finding_class="xss", repo_url="https://git/x"),
            flat_finding("b", finding_class="sqli", repo_url="https://git/x"),
            flat_finding("c", finding_class="xss"),
        ]

        counts = aggregate(records, SchemaVersion.V1)

        assert counts.by_title == {"xss": 2, "sqli": 1}
        assert counts.by_repo == {"https://git/x": 2, "unknown": 1}
        _assert_buckets_sum_to_total(counts)

    def test_empty_input(self) -> None:
        assert aggregate([]) == CountResult()

    def test_is_order_independent(self) -> None:
        records = _mixed_findings() * 3
        shuffled = list(records)
        random.Random(7).shuffle(shuffled)

        assert aggregate(records) == aggregate(shuffled)

    def test_non_object_records_still_counted(self) -> None:
        counts = aggregate([nested_finding("f-1"), "junk"])

        assert counts.total_count == 2
        _assert_buckets_sum_to_total(counts)

    def test_carries_completeness_flag(self) -> None:
        assert aggregate([], complete=False).is_complete is False


class TestResolveCounts:
    async def test_uses_count_endpoint_when_well_formed(self, api, client) -> None:
        api.add(
            "GET",
            "/findings/count",
            httpx.Response(200, json={"total_count": 12, "by_severity": {"high": 12}, "by_class": {"xss": 12}}),
        )

        counts = await resolve_counts(client, {"status": "open"})

        assert counts.total_count == 12
        assert counts.by_severity == {"high": 12}
        assert counts.by_title == {"xss": 12}
        assert counts.by_repo == {}
        assert counts.is_complete is True
        assert api.calls("GET", "/findings/count")[0].url.params["status"] == "open"
        assert api.calls("GET", "/findings") == []

    async def test_falls_back_on_server_error_with_tight_ceiling(self, api, client) -> None:
        api.add("GET", "/findings/count", httpx.Response(500, json={"status": 500}))
        page = [nested_finding(f"f-{i}") for i in range(10)]
        api.add("GET", "/findings", paged([page], endless=True))

        counts = await resolve_counts(client)

        walk_calls = api.calls("GET", "/findings")
        assert len(walk_calls) == 10
        assert {call.url.params["size"] for call in walk_calls} == {"10"}
        assert counts.total_count == 100
        assert counts.is_complete is False

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={"count": 3}),
            httpx.Response(200, json=[{"total_count": 3}]),
            httpx.Response(200, json={"total_count": "many"}),
            httpx.Response(200, json={"total_count": 3.7}),
            httpx.Response(200, json={"total_count": True}),
            httpx.Response(200, text="not json"),
            httpx.Response(404),
        ],
    )
    async def test_falls_back_on_unusable_endpoint_response(self, api, client, response) -> None:
        api.add("GET", "/findings/count", response)
        api.add(
            "GET",
            "/findings",
            paged([[nested_finding("f-1"), nested_finding("f-2")], [nested_finding("f-3")]]),
        )

        counts = await resolve_counts(client)

        assert counts.total_count == 3
        assert counts.is_complete is True

    async def test_falls_back_on_transport_error(self, api, client) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        api.add("GET", "/findings/count", refuse)
        api.add("GET", "/findings", paged([[nested_finding("f-1")]]))

        counts = await resolve_counts(client)

        assert counts.total_count == 1

    async def test_fallback_degrades_malformed_pages(self, api, client) -> None:
        api.add("GET", "/findings/count", httpx.Response(500))
        api.add("GET", "/findings", httpx.Response(200, json={"oops": True}))

        counts = await resolve_counts(client)

        assert counts.total_count == 0
        assert len(api.calls("GET", "/findings")) == 1
        assert counts.is_complete is False

    async def test_unreadable_later_page_makes_counts_a_lower_bound(self, api, client) -> None:
        api.add("GET", "/findings/count", httpx.Response(500))
        api.add(
            "GET",
            "/findings",
            httpx.Response(
                200, json={"items": [nested_finding("f-1")], "has_more": True, "next_cursor": "n1"}
            ),
            httpx.Response(200, text="<html>upstream hiccup</html>"),
        )

        counts = await resolve_counts(client)

        assert counts.total_count == 1
        assert counts.is_complete is False

    async def test_fallback_walk_errors_propagate(self, api, client) -> None:
        api.add("GET", "/findings/count", httpx.Response(500))
        api.add("GET", "/findings", httpx.Response(502))

        with pytest.raises(UpstreamRequestFailed):
            await resolve_counts(client)


class TestCountAllFindings:
    async def test_walks_with_large_pages(self, api, client) -> None:
        api.add("GET", "/findings", paged([[nested_finding("f-1")], [nested_finding("f-2")]]))

        counts = await count_all_findings(client, {"repo_id": "r-1"})

        calls = api.calls("GET", "/findings")
        assert counts.total_count == 2
        assert {call.url.params["size"] for call in calls} == {"100"}
        assert {call.url.params["repo_id"] for call in calls} == {"r-1"}
        assert api.calls("GET", "/findings/count") == []

    async def test_stops_at_fifty_pages(self, api, client) -> None:
        api.add("GET", "/findings", paged([[nested_finding("f-1")]], endless=True))

        counts = await count_all_findings(client)

        assert len(api.calls("GET", "/findings")) == 50
        assert counts.total_count == 50
        assert counts.is_complete is False

    async def test_malformed_page_is_an_error(self, api, client) -> None:
        api.add("GET", "/findings", httpx.Response(200, json={"has_more": False}))

        with pytest.raises(MalformedUpstreamResponse):
            await count_all_findings(client)
