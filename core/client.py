# =============================================================================
# core/client.py  —  Ghost Security HTTP transport
# =============================================================================
#
# Thin async wrapper around one httpx.AsyncClient: base URL, bearer auth,
# JSON decoding and non-2xx → UpstreamRequestFailed.  It deliberately knows
# nothing about pages or records; body shape is checked by the callers
# (core/pagination.py) because the right reaction depends on the call path.
#
# No timeout or retry policy is layered on top of httpx's defaults.
# =============================================================================

import logging
from typing import Any, Optional

import httpx

from core.config import Settings
from core.errors import MalformedUpstreamResponse, UpstreamRequestFailed
from core.schema import SchemaVersion

logger = logging.getLogger(__name__)

_MAX_DETAIL_CHARS = 200


def _error_detail(response: httpx.Response) -> Optional[Any]:
    """Best-effort extraction of an error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:_MAX_DETAIL_CHARS] or None
    if isinstance(body, dict):
        for key in ("detail", "message", "error"):
            if body.get(key):
                return body[key]
    return body or None


class GhostSecurityClient:
    """Async client for the Ghost Security REST API.

    Example:
        >>> async with GhostSecurityClient(Settings.from_env()) as client:
        ...     finding = await client.request_json("GET", "/findings/f-1")
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            headers={
                "Authorization": f"Bearer {settings.api_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    @property
    def schema_version(self) -> SchemaVersion:
        return self.settings.schema_version

    @property
    def repository_id(self) -> Optional[str]:
        return self.settings.repository_id

    async def __aenter__(self) -> "GhostSecurityClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Args:
            method: HTTP method ("GET", "PATCH", ...).
            path: Path relative to the configured base URL.
            params: Query parameters; None values are dropped.
            json: Optional JSON request body.

        Returns:
            The decoded JSON value (any type), or None for an empty body.

        Raises:
            UpstreamRequestFailed: The API answered with a non-2xx status.
            MalformedUpstreamResponse: A success response that is not JSON.
            httpx.HTTPError: Transport-level failure (connection, timeout).
        """
        query = {key: value for key, value in (params or {}).items() if value is not None}
        logger.debug("%s %s params=%s", method, path, query)

        response = await self._client.request(method, path, params=query, json=json)

        if not response.is_success:
            raise UpstreamRequestFailed(
                response.status_code,
                _error_detail(response),
                reason=response.reason_phrase,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise MalformedUpstreamResponse(
                f"Invalid API response from {path}: body is not valid JSON"
            ) from None
