# =============================================================================
# core/counting.py  —  Finding statistics (Aggregator + CountResolver)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   aggregate()           one linear pass over a complete record set →
#                         total_count plus counts by severity, status,
#                         title/class and repository.
#   resolve_counts()      the count tool: ask the dedicated /findings/count
#                         endpoint first; if it is missing, failing or
#                         returns an unexpected shape, walk up to
#                         10 pages × 10 findings and aggregate locally.
#   count_all_findings()  count mode on listings: a strict walk of up to
#                         50 pages × 100 findings, then aggregate.
#
# COMPLETENESS:
#   A walk that stops at its page ceiling undercounts.  The resulting
#   CountResult has is_complete=False so the caller can tell a lower bound
#   from an exact total.
# =============================================================================

import logging
from collections import Counter
from typing import Any, Iterable, Optional

import httpx

from core.client import GhostSecurityClient
from core.errors import MalformedUpstreamResponse, UpstreamRequestFailed
from core.models import CountResult, Tolerance
from core.pagination import (
    AGGREGATION_MAX_PAGES,
    AGGREGATION_PAGE_SIZE,
    COUNT_FALLBACK_MAX_PAGES,
    COUNT_FALLBACK_PAGE_SIZE,
    walk_pages,
)
from core.schema import SchemaVersion, to_view

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "unknown"
FINDINGS_PATH = "/findings"
COUNT_PATH = "/findings/count"


def _bucket(value: Optional[Any]) -> str:
    if value is None or value == "":
        return UNKNOWN_LABEL
    return str(value)


def aggregate(
    records: Iterable[Any],
    version: SchemaVersion = SchemaVersion.V2,
    *,
    complete: bool = True,
) -> CountResult:
    """Count findings in total and grouped by each dimension.

    Pure and order-independent.  Records missing a label (or not objects
    at all) are counted under "unknown", so every dimension sums to
    total_count.
    """
    total = 0
    by_severity: Counter[str] = Counter()
    by_status: Counter[str] = Counter()
    by_title: Counter[str] = Counter()
    by_repo: Counter[str] = Counter()

    for record in records:
        total += 1
        view = to_view(record, version) if isinstance(record, dict) else None
        by_severity[_bucket(view and view.severity)] += 1
        by_status[_bucket(view and view.status)] += 1
        by_title[_bucket(view and view.classification)] += 1
        by_repo[_bucket(view and view.repo_label)] += 1

    return CountResult(
        total_count=total,
        by_severity=dict(by_severity),
        by_status=dict(by_status),
        by_title=dict(by_title),
        by_repo=dict(by_repo),
        is_complete=complete,
    )


async def _endpoint_counts(
    client: GhostSecurityClient, filters: dict[str, Any]
) -> Optional[CountResult]:
    """Counts from /findings/count, or None when the endpoint can't be used."""
    try:
        body = await client.request_json("GET", COUNT_PATH, params=filters)
    except (UpstreamRequestFailed, MalformedUpstreamResponse, httpx.HTTPError) as exc:
        logger.warning("Count endpoint unavailable (%s); falling back to page walk", exc)
        return None

    if not isinstance(body, dict) or "total_count" not in body:
        logger.warning("Count endpoint returned an unexpected shape; falling back to page walk")
        return None

    try:
        return CountResult.from_upstream(body)
    except (TypeError, ValueError):
        logger.warning(
            "Count endpoint returned a non-numeric total_count %r; falling back to page walk",
            body.get("total_count"),
        )
        return None


async def resolve_counts(
    client: GhostSecurityClient, filters: Optional[dict[str, Any]] = None
) -> CountResult:
    """Counts for the findings matching filters, never failing on the endpoint.

    Only an error raised by the fallback walk itself propagates.
    """
    filters = dict(filters or {})
    counts = await _endpoint_counts(client, filters)
    if counts is not None:
        return counts

    walk = await walk_pages(
        client,
        FINDINGS_PATH,
        filters,
        max_pages=COUNT_FALLBACK_MAX_PAGES,
        page_size=COUNT_FALLBACK_PAGE_SIZE,
        tolerance=Tolerance.BEST_EFFORT,
    )
    return aggregate(walk.items, client.schema_version, complete=walk.complete)


async def count_all_findings(
    client: GhostSecurityClient, filters: Optional[dict[str, Any]] = None
) -> CountResult:
    """Aggregate counts over a strict walk of every matching finding."""
    walk = await walk_pages(
        client,
        FINDINGS_PATH,
        dict(filters or {}),
        max_pages=AGGREGATION_MAX_PAGES,
        page_size=AGGREGATION_PAGE_SIZE,
        tolerance=Tolerance.STRICT,
    )
    return aggregate(walk.items, client.schema_version, complete=walk.complete)
