# =============================================================================
# core/repositories.py  —  Repository operations
# =============================================================================
#
# When GHOST_SECURITY_REPO_ID is configured every repository operation is
# scoped to that repository: listings return just it, and repoId arguments
# become optional (the configured id wins over a supplied one).
# =============================================================================

from dataclasses import replace
from typing import Any, Optional
from urllib.parse import quote

from core.client import GhostSecurityClient
from core.errors import MissingRequiredParameter
from core.findings import get_findings
from core.models import QueryParams, Tolerance
from core.pagination import LISTING_SIZE_CAP, fetch_page

REPOS_PATH = "/repos"


def resolve_repo_id(client: GhostSecurityClient, supplied: Optional[str]) -> str:
    """Pick the configured repository id, else the supplied one.

    Raises:
        MissingRequiredParameter: Neither is set.
    """
    repo_id = client.repository_id or supplied
    if not repo_id:
        raise MissingRequiredParameter(
            "Repository ID",
            "Provide repoId parameter or configure GHOST_SECURITY_REPO_ID.",
        )
    return repo_id


def repo_path(repo_id: str, *parts: str) -> str:
    return "/".join([REPOS_PATH, quote(str(repo_id), safe=""), *parts])


async def get_repository(client: GhostSecurityClient, repo_id: str) -> Any:
    if not repo_id:
        raise MissingRequiredParameter("Repository ID")
    return await client.request_json("GET", repo_path(repo_id))


async def get_repositories(client: GhostSecurityClient, params: QueryParams) -> dict[str, Any]:
    """One page of repositories, or just the configured one."""
    if client.repository_id:
        repository = await get_repository(client, client.repository_id)
        return {"items": [repository], "has_more": False}

    page = await fetch_page(
        client,
        REPOS_PATH,
        params.upstream_params(),
        size_cap=LISTING_SIZE_CAP,
        tolerance=Tolerance.STRICT,
    )
    return page.to_dict()


async def get_repository_endpoints(
    client: GhostSecurityClient,
    repo_id: Optional[str],
    params: Optional[QueryParams] = None,
) -> dict[str, Any]:
    """One page of a repository's HTTP endpoints.

    Not every API version serves this listing; a 404 surfaces as
    UpstreamRequestFailed like any other non-2xx answer.
    """
    repo_id = resolve_repo_id(client, repo_id)
    params = params or QueryParams()
    page = await fetch_page(
        client,
        repo_path(repo_id, "endpoints"),
        {"cursor": params.cursor, "size": params.size},
        size_cap=LISTING_SIZE_CAP,
        tolerance=Tolerance.STRICT,
    )
    return page.to_dict()


async def get_repository_findings(
    client: GhostSecurityClient, repo_id: Optional[str], params: QueryParams
) -> dict[str, Any]:
    """Findings of one repository, with the same modes as get_findings()."""
    repo_id = resolve_repo_id(client, repo_id)
    return await get_findings(client, replace(params, repo_id=repo_id))
