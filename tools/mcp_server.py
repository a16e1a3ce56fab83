# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the Ghost Security operations as MCP tools.  Each tool is a thin
#   wrapper around a core/ function: it builds the query, calls core, maps
#   errors to a single ToolError message and returns ONE JSON text block
#   shaped by core/shaping.py.
#
# HOW IT WORKS (the flow):
#   1. The agent decides it needs data (e.g., "how many critical findings?")
#   2. It calls a tool by name via MCP (e.g., "ghostsecurity_count_findings")
#   3. FastMCP routes the call to the matching function below
#   4. The function calls core/, which pages through the upstream API
#   5. format_response() bounds the output before it reaches the agent
#
# TOOL NAMING CONVENTIONS:
#   - ghostsecurity_get_*    → Read-only retrieval (idempotent, safe to retry)
#   - ghostsecurity_count_*  → Statistics (idempotent, safe to retry)
#   - ghostsecurity_update_* → The single write path (user_status only)
#
# ERRORS:
#   - Missing ids / bad arguments → ToolError "Invalid request: ..."
#   - Upstream or transport failures → ToolError "Tool execution failed: ..."
#   A per-request error never takes the process down; only a missing API
#   key at startup does.
#
# RUNNING THIS SERVER:
#   python -m tools.mcp_server [api_key] [repo_id]
#   The agent (agent/security_agent.py) launches it the same way over stdio.
# =============================================================================

import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Literal, Optional

import httpx
from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from core.client import GhostSecurityClient
from core.config import Settings
from core.errors import ConfigurationError, GhostSecurityError, MissingRequiredParameter
from core.findings import count_findings, get_finding, get_findings, update_finding_status
from core.models import QueryParams
from core.repositories import (
    get_repositories,
    get_repository,
    get_repository_endpoints,
    get_repository_findings,
)
from core.shaping import format_response

SERVER_NAME = "ghostsecurity-mcp"

# =============================================================================
# Logging Setup
# =============================================================================
# STDOUT carries the MCP JSON protocol, so every log line goes to STDERR.
#
# ANSI COLOR CODES:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for responses (size only; bodies can be large)
#     - YELLOW for intermediate status/progress messages
# =============================================================================

_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses
_YELLOW = "\033[33m"   # Status/progress messages
_RESET = "\033[0m"     # Reset to default terminal color

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 200


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    """Log the size and start of a tool response in GREEN, then return it."""
    preview = json.dumps(json.loads(text), separators=(",", ":"))[:_PREVIEW_CHARS]
    logger.info(f"{_GREEN}  ← {tool_name} response ({len(text)} chars): {preview}{_RESET}")
    return text


def _query(**kwargs: Any) -> QueryParams:
    """Build QueryParams, turning argument validation errors into ToolErrors."""
    try:
        return QueryParams(**kwargs)
    except ValueError as exc:
        raise ToolError(f"Invalid request: {exc}") from exc


async def _respond(tool_name: str, operation: Awaitable[Any]) -> str:
    """Await a core operation and return its shaped JSON text.

    Every failure surfaces as exactly one ToolError message.
    """
    try:
        result = await operation
    except MissingRequiredParameter as exc:
        _log_status(f"Invalid request: {exc}")
        raise ToolError(f"Invalid request: {exc}") from exc
    except (GhostSecurityError, httpx.HTTPError) as exc:
        _log_status(f"Failed: {exc}")
        raise ToolError(f"Tool execution failed: {exc}") from exc
    return _log_response(tool_name, format_response(result))


FindingSort = Literal["created_at", "updated_at"]
RepositorySort = Literal["created_at", "updated_at", "last_committed_at"]
SortOrder = Literal["asc", "desc"]
Mode = Literal["summary", "detailed", "count"]
CastFilter = Literal["supported", "unsupported", "all"]


# =============================================================================
# Server factory
# =============================================================================
# The tools share one GhostSecurityClient, built from Settings on the first
# tool call and closed when the server lifespan ends.  Tool descriptions
# for repoId depend on whether a repository is configured, which is why
# the server is built by a function rather than at import.
# =============================================================================
def create_server(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastMCP:
    """Create the FastMCP server with every Ghost Security tool registered.

    Args:
        settings: Loaded configuration (API key, base URL, scoped repo...).
        transport: Optional httpx transport, used by tests to fake the API.
    """
    client: Optional[GhostSecurityClient] = None

    def _client() -> GhostSecurityClient:
        nonlocal client
        if client is None:
            client = GhostSecurityClient(settings, transport=transport)
        return client

    @asynccontextmanager
    async def _lifespan(server: FastMCP) -> AsyncIterator[None]:
        nonlocal client
        try:
            yield
        finally:
            if client is not None:
                await client.aclose()
                client = None

    mcp = FastMCP(SERVER_NAME, lifespan=_lifespan)

    scoped = settings.repository_id is not None
    repo_arg_doc = (
        "repoId: Repository ID (optional, uses the configured repository if not provided)."
        if scoped
        else "repoId: Repository ID (required)."
    )

    # -------------------------------------------------------------------------
    # Findings
    # -------------------------------------------------------------------------
    @mcp.tool()
    async def ghostsecurity_get_findings(
        cursor: Optional[str] = None,
        sort: Optional[FindingSort] = None,
        order: Optional[SortOrder] = None,
        size: Optional[int] = None,
        mode: Mode = "summary",
        fields: Optional[list[str]] = None,
        status: Optional[str] = None,
    ) -> str:
        """Get security findings with optional filtering and pagination.

        Pages are small (at most 5 findings); follow next_cursor for more.

        Args:
            cursor: Pagination cursor from a previous response's next_cursor.
            sort: Sort field.
            order: Sort order.
            size: Page size (1-1000, capped server-side).
            mode: summary (lightweight), detailed (full records) or
                  count (statistics over all matching findings).
            fields: Specific fields to include (summary mode only).
            status: Only findings with this status.
        """
        _log_request("ghostsecurity_get_findings", cursor=cursor, sort=sort, order=order,
                     size=size, mode=mode, fields=fields, status=status)
        params = _query(cursor=cursor, sort=sort, order=order, size=size,
                        mode=mode, fields=fields, status=status)
        if scoped:
            _log_status(f"Scoped to repository {settings.repository_id}")
            operation = get_repository_findings(_client(), None, params)
        else:
            operation = get_findings(_client(), params)
        return await _respond("ghostsecurity_get_findings", operation)

    @mcp.tool()
    async def ghostsecurity_count_findings(
        sort: Optional[FindingSort] = None,
        order: Optional[SortOrder] = None,
        status: Optional[str] = None,
    ) -> str:
        """Get count and statistics of security findings.

        Returns total_count plus counts by severity, status, title and
        repository.  is_complete is false when the total is a lower bound.

        Args:
            sort: Sort field.
            order: Sort order.
            status: Only count findings with this status.
        """
        _log_request("ghostsecurity_count_findings", sort=sort, order=order, status=status)
        params = _query(sort=sort, order=order, status=status,
                        repo_id=settings.repository_id)
        return await _respond("ghostsecurity_count_findings", count_findings(_client(), params))

    @mcp.tool()
    async def ghostsecurity_get_finding(id: str) -> str:
        """Get a specific security finding by ID, with all of its details.

        Args:
            id: Finding ID.
        """
        _log_request("ghostsecurity_get_finding", id=id)
        return await _respond("ghostsecurity_get_finding", get_finding(_client(), id))

    @mcp.tool()
    async def ghostsecurity_update_finding_status(id: str, status: str) -> str:
        """Update the status of a security finding.

        Args:
            id: Finding ID.
            status: New status for the finding.
        """
        _log_request("ghostsecurity_update_finding_status", id=id, status=status)
        return await _respond(
            "ghostsecurity_update_finding_status", update_finding_status(_client(), id, status)
        )

    # -------------------------------------------------------------------------
    # Repositories
    # -------------------------------------------------------------------------
    @mcp.tool()
    async def ghostsecurity_get_repositories(
        cast: Optional[CastFilter] = None,
        cursor: Optional[str] = None,
        sort: Optional[RepositorySort] = None,
        order: Optional[SortOrder] = None,
        size: Optional[int] = None,
    ) -> str:
        """Get repositories with optional filtering and pagination.

        Args:
            cast: Filter by scanning support.
            cursor: Pagination cursor.
            sort: Sort field.
            order: Sort order.
            size: Page size (1-1000, capped server-side).
        """
        _log_request("ghostsecurity_get_repositories", cast=cast, cursor=cursor,
                     sort=sort, order=order, size=size)
        params = _query(cast=cast, cursor=cursor, sort=sort, order=order, size=size)
        return await _respond("ghostsecurity_get_repositories", get_repositories(_client(), params))

    @mcp.tool()
    async def ghostsecurity_get_repository(id: str) -> str:
        """Get a specific repository by ID.

        Args:
            id: Repository ID.
        """
        _log_request("ghostsecurity_get_repository", id=id)
        return await _respond("ghostsecurity_get_repository", get_repository(_client(), id))

    @mcp.tool(description=(
        "Get endpoints for a specific repository. Not every API version "
        f"supports this listing. Arguments: {repo_arg_doc} cursor: Pagination "
        "cursor. size: Page size (1-1000, capped server-side)."
    ))
    async def ghostsecurity_get_repository_endpoints(
        repoId: Optional[str] = None,
        cursor: Optional[str] = None,
        size: Optional[int] = None,
    ) -> str:
        _log_request("ghostsecurity_get_repository_endpoints", repoId=repoId,
                     cursor=cursor, size=size)
        params = _query(cursor=cursor, size=size)
        return await _respond(
            "ghostsecurity_get_repository_endpoints",
            get_repository_endpoints(_client(), repoId, params),
        )

    @mcp.tool(description=(
        "Get security findings for a specific repository. Arguments: "
        f"{repo_arg_doc} cursor: Pagination cursor. sort: Sort field. order: "
        "Sort order. size: Page size (1-1000, capped server-side). mode: summary "
        "(lightweight), detailed (full) or count (statistics only). fields: "
        "Specific fields to include (summary mode). status: Only findings with "
        "this status."
    ))
    async def ghostsecurity_get_repository_findings(
        repoId: Optional[str] = None,
        cursor: Optional[str] = None,
        sort: Optional[FindingSort] = None,
        order: Optional[SortOrder] = None,
        size: Optional[int] = None,
        mode: Mode = "summary",
        fields: Optional[list[str]] = None,
        status: Optional[str] = None,
    ) -> str:
        _log_request("ghostsecurity_get_repository_findings", repoId=repoId, cursor=cursor,
                     sort=sort, order=order, size=size, mode=mode, fields=fields,
                     status=status)
        params = _query(cursor=cursor, sort=sort, order=order, size=size,
                        mode=mode, fields=fields, status=status)
        return await _respond(
            "ghostsecurity_get_repository_findings",
            get_repository_findings(_client(), repoId, params),
        )

    return mcp


# =============================================================================
# Server entry point
# =============================================================================
# python -m tools.mcp_server [api_key] [repo_id]
# A missing API key is the only error that stops the process.
# =============================================================================
def main(argv: Optional[list[str]] = None) -> None:
    load_dotenv()
    try:
        settings = Settings.from_env(argv=sys.argv[1:] if argv is None else argv)
    except ConfigurationError as exc:
        logger.error("Error: %s", exc)
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    if settings.repository_id:
        _log_status(f"Scoping all listings to repository {settings.repository_id}")

    logger.info("Ghost Security MCP server running on stdio")
    create_server(settings).run()


if __name__ == "__main__":
    main()
