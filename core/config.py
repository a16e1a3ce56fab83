# =============================================================================
# core/config.py  —  Runtime configuration from the environment
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Collects everything the server needs to talk to Ghost Security into one
#   frozen Settings object.  Entry points (tools/mcp_server.py, main.py) call
#   load_dotenv() first, so a local .env file works the same as exported
#   variables.
#
# VARIABLES:
#   GHOST_SECURITY_API_KEY         (required) Bearer token
#   GHOST_SECURITY_BASE_URL        (optional) upstream base URL override
#   GHOST_SECURITY_REPO_ID         (optional) scope every listing to one repo
#   GHOST_SECURITY_SCHEMA_VERSION  (optional) "v1" flat or "v2" nested records
#   GHOST_SECURITY_LOG_LEVEL       (optional) stderr log level, default INFO
#   GHOST_AGENT_MODEL              (optional) LiteLlm model for the chat agent
#
#   The server also accepts "<api_key> [repo_id]" as positional arguments;
#   they only fill in what the environment leaves unset.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from core.errors import ConfigurationError
from core.schema import SchemaVersion

DEFAULT_BASE_URL = "https://api.ghostsecurity.ai/v1"
DEFAULT_AGENT_MODEL = "anthropic/claude-3-5-sonnet-20241022"


@dataclass(frozen=True)
class Settings:
    """Everything needed to build a GhostSecurityClient and the tool server."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    repository_id: Optional[str] = None
    schema_version: SchemaVersion = SchemaVersion.V2
    log_level: str = "INFO"
    agent_model: str = DEFAULT_AGENT_MODEL

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        argv: Optional[Sequence[str]] = None,
    ) -> "Settings":
        """Build Settings from environment variables and CLI arguments.

        Args:
            environ: Mapping to read from (defaults to os.environ).
            argv: Positional arguments after the program name:
                  [api_key, repo_id].  Used only where the environment
                  leaves a value unset.

        Raises:
            ConfigurationError: No API key anywhere, or an unknown schema
                version.
        """
        env = os.environ if environ is None else environ
        args = list(argv or [])

        def _get(name: str) -> Optional[str]:
            value = env.get(name, "").strip()
            return value or None

        def _arg(index: int) -> Optional[str]:
            if index < len(args) and args[index].strip():
                return args[index].strip()
            return None

        api_key = _get("GHOST_SECURITY_API_KEY") or _arg(0)
        if not api_key:
            raise ConfigurationError(
                "Ghost Security API key is required. Provide it via the "
                "GHOST_SECURITY_API_KEY environment variable or as the first "
                "command line argument."
            )

        raw_version = _get("GHOST_SECURITY_SCHEMA_VERSION") or SchemaVersion.V2.value
        try:
            schema_version = SchemaVersion(raw_version.lower())
        except ValueError:
            known = ", ".join(v.value for v in SchemaVersion)
            raise ConfigurationError(
                f"Unknown GHOST_SECURITY_SCHEMA_VERSION {raw_version!r} (expected one of: {known})"
            ) from None

        return cls(
            api_key=api_key,
            base_url=(_get("GHOST_SECURITY_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            repository_id=_get("GHOST_SECURITY_REPO_ID") or _arg(1),
            schema_version=schema_version,
            log_level=(_get("GHOST_SECURITY_LOG_LEVEL") or "INFO").upper(),
            agent_model=_get("GHOST_AGENT_MODEL") or DEFAULT_AGENT_MODEL,
        )
