# =============================================================================
# core/pagination.py  —  Page fetching and cursor walking
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   fetch_page()  issues exactly one bounded-size listing request and returns
#                 a structurally checked Page.
#   walk_pages()  drives fetch_page() across cursors until the listing is
#                 exhausted or a page ceiling is reached.
#
# BOUNDED COST:
#   The caller's requested size is never trusted as-is.  Every request is
#   clamped to a ceiling chosen by the call site:
#
#     interactive listing        LISTING_SIZE_CAP           5 per page
#     count endpoint fallback    COUNT_FALLBACK_PAGE_SIZE  10 per page, 10 pages
#     full aggregation walk      AGGREGATION_PAGE_SIZE    100 per page, 50 pages
#
#   The count fallback runs inside a synchronous tool call, so it gets the
#   tight ceiling.  The full aggregation walk backs count mode on listings,
#   where completeness matters more than latency.
#
# TOLERANCE:
#   A success response whose body is not an object with an "items" list is
#   either an error (Tolerance.STRICT → MalformedUpstreamResponse) or a
#   DegradedPage (Tolerance.BEST_EFFORT) that is logged and treated as empty.
#   Transport errors and non-2xx statuses always propagate.
#
# Walks are strictly sequential: each request needs the previous page's
# cursor.  The cursor is passed back verbatim and never inspected.
# =============================================================================

import logging
from typing import Any, Optional

from core.client import GhostSecurityClient
from core.errors import MalformedUpstreamResponse
from core.models import DegradedPage, Page, Tolerance, WalkResult

logger = logging.getLogger(__name__)

LISTING_SIZE_CAP = 5
COUNT_FALLBACK_PAGE_SIZE = 10
COUNT_FALLBACK_MAX_PAGES = 10
AGGREGATION_PAGE_SIZE = 100
AGGREGATION_MAX_PAGES = 50

_PAGE_KEYS = ("items", "has_more", "next_cursor")


def clamp_size(requested: Optional[int], cap: int) -> int:
    """Clamp a caller-requested page size to the call site's ceiling."""
    if requested is None or requested < 1:
        return cap
    return min(requested, cap)


def _shape_problem(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return "response is not an object"
    if not isinstance(body.get("items"), list):
        return "response is missing an items array"
    return None


def _degraded(path: str, body: Any, reason: str) -> DegradedPage:
    logger.warning("Degraded page from %s: %s; treating it as empty", path, reason)
    if isinstance(body, dict):
        return DegradedPage(
            items=[],
            has_more=body.get("has_more") is True,
            next_cursor=body.get("next_cursor"),
            reason=reason,
        )
    return DegradedPage(items=[], has_more=False, reason=reason)


async def fetch_page(
    client: GhostSecurityClient,
    path: str,
    params: dict[str, Any],
    *,
    size_cap: int = LISTING_SIZE_CAP,
    tolerance: Tolerance = Tolerance.STRICT,
) -> Page:
    """Fetch one page of a paginated listing.

    Args:
        client: Transport to issue the request with.
        path: Listing path, e.g. "/findings".
        params: Upstream query parameters (cursor, sort, filters, size...).
        size_cap: Per-request ceiling applied to params["size"].
        tolerance: What a structurally invalid body turns into.

    Returns:
        A Page, or a DegradedPage when tolerance is BEST_EFFORT and the
        body failed the shape check.

    Raises:
        UpstreamRequestFailed: Non-2xx response.
        MalformedUpstreamResponse: Invalid body under Tolerance.STRICT.
    """
    query = dict(params)
    query["size"] = clamp_size(query.get("size"), size_cap)
    logger.debug("Fetching %s cursor=%s size=%s", path, query.get("cursor"), query["size"])

    try:
        body = await client.request_json("GET", path, params=query)
    except MalformedUpstreamResponse as exc:
        if tolerance is Tolerance.STRICT:
            raise
        return _degraded(path, None, str(exc))

    problem = _shape_problem(body)
    if problem is not None:
        if tolerance is Tolerance.STRICT:
            raise MalformedUpstreamResponse(f"Invalid API response from {path}: {problem}")
        return _degraded(path, body, problem)

    return Page(
        items=body["items"],
        has_more=body.get("has_more") is True,
        next_cursor=body.get("next_cursor"),
        extra={key: value for key, value in body.items() if key not in _PAGE_KEYS},
    )


async def walk_pages(
    client: GhostSecurityClient,
    path: str,
    params: dict[str, Any],
    *,
    max_pages: int,
    page_size: int,
    tolerance: Tolerance = Tolerance.STRICT,
) -> WalkResult:
    """Accumulate items across pages until exhaustion or max_pages.

    Hitting the ceiling is not an error: the partial accumulation comes back
    with complete=False and a warning is logged.  A walk that included a
    DegradedPage is never complete.

    Raises:
        ValueError: max_pages or page_size below 1.
        UpstreamRequestFailed / MalformedUpstreamResponse: as fetch_page().
    """
    if max_pages < 1 or page_size < 1:
        raise ValueError("max_pages and page_size must both be at least 1")

    items: list[dict[str, Any]] = []
    cursor = params.get("cursor")
    pages_fetched = 0
    has_more = True
    degraded = False

    while has_more and pages_fetched < max_pages:
        page = await fetch_page(
            client,
            path,
            {**params, "cursor": cursor, "size": page_size},
            size_cap=page_size,
            tolerance=tolerance,
        )
        items.extend(page.items)
        pages_fetched += 1
        # A degraded page carries no trustworthy has_more, so the walk may end early.
        degraded = degraded or isinstance(page, DegradedPage)
        has_more = page.has_more
        cursor = page.next_cursor

        if has_more and not cursor:
            logger.warning(
                "%s reported more results without a next_cursor; stopping after %d pages",
                path,
                pages_fetched,
            )
            break

    if has_more and pages_fetched >= max_pages:
        logger.warning(
            "Walk of %s limited to %d pages (%d items); results are incomplete",
            path,
            max_pages,
            len(items),
        )

    return WalkResult(
        items=items, pages_fetched=pages_fetched, complete=not has_more and not degraded
    )
