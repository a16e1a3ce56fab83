# =============================================================================
# core/findings.py  —  Finding operations
# =============================================================================
#
# The operations behind the findings tools.  Each one returns a plain
# JSON-ready value; the tool layer only adds logging, error mapping and
# response shaping on top.
#
#   get_findings()           one clamped page, projected per mode
#                            (count mode → full aggregation walk instead)
#   count_findings()         CountResolver: count endpoint, else bounded walk
#   get_finding()            one raw finding
#   update_finding_status()  the single write path: PATCH {user_status}
# =============================================================================

from typing import Any, Optional
from urllib.parse import quote

from core.client import GhostSecurityClient
from core.counting import count_all_findings, resolve_counts
from core.errors import MissingRequiredParameter
from core.models import QueryParams, ResponseMode, Tolerance
from core.pagination import LISTING_SIZE_CAP, fetch_page
from core.projection import project_items

FINDINGS_PATH = "/findings"


def finding_path(finding_id: Optional[str]) -> str:
    if not finding_id:
        raise MissingRequiredParameter("Finding ID")
    return f"{FINDINGS_PATH}/{quote(str(finding_id), safe='')}"


async def get_findings(client: GhostSecurityClient, params: QueryParams) -> dict[str, Any]:
    """List one page of findings, or their counts in count mode.

    Returns:
        A page dict {items, has_more, next_cursor?, ...} with items
        projected for params.mode, or a CountResult dict in count mode.
    """
    if params.mode is ResponseMode.COUNT:
        counts = await count_all_findings(client, params.filters())
        return counts.to_dict()

    page = await fetch_page(
        client,
        FINDINGS_PATH,
        params.upstream_params(),
        size_cap=LISTING_SIZE_CAP,
        tolerance=Tolerance.STRICT,
    )
    page.items = project_items(page.items, params.mode, params.fields, client.schema_version)
    return page.to_dict()


async def count_findings(
    client: GhostSecurityClient, params: Optional[QueryParams] = None
) -> dict[str, Any]:
    """Statistics for matching findings; always answers unless the fallback walk fails."""
    filters = params.filters() if params is not None else {}
    counts = await resolve_counts(client, filters)
    return counts.to_dict()


async def get_finding(client: GhostSecurityClient, finding_id: str) -> Any:
    return await client.request_json("GET", finding_path(finding_id))


async def update_finding_status(
    client: GhostSecurityClient, finding_id: str, status: str
) -> Any:
    """Set a finding's user_status and return the updated record unprojected."""
    if not status:
        raise MissingRequiredParameter("Status")
    return await client.request_json(
        "PATCH", finding_path(finding_id), json={"user_status": status}
    )
