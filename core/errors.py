# =============================================================================
# core/errors.py  —  Error taxonomy
# =============================================================================
#
# Failures on "must be complete and correct" paths raise one of these.
# Failures on best-effort statistics paths never raise: they come back as a
# DegradedPage (see core/models.py) and the walk carries on.
#
# The tool layer turns these into a single structured error message for the
# caller; nothing here should ever take the server process down, except
# ConfigurationError at startup.
# =============================================================================

from typing import Any, Optional


class GhostSecurityError(Exception):
    """Base class for every error raised by the core."""


class ConfigurationError(GhostSecurityError):
    """Startup configuration is missing or invalid (e.g. no API key)."""


class UpstreamRequestFailed(GhostSecurityError):
    """The upstream API answered with a non-success HTTP status."""

    def __init__(self, status_code: int, detail: Optional[Any] = None, reason: str = ""):
        self.status_code = status_code
        self.detail = detail
        message = f"API request failed: {status_code}"
        if reason:
            message += f" {reason}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class MalformedUpstreamResponse(GhostSecurityError):
    """A success response whose body failed the structural shape check."""


class MissingRequiredParameter(GhostSecurityError):
    """A required identifier was neither supplied nor configured."""

    def __init__(self, name: str, hint: str = ""):
        self.name = name
        message = f"{name} is required."
        if hint:
            message += f" {hint}"
        super().__init__(message)
