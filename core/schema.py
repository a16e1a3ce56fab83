# =============================================================================
# core/schema.py  —  Upstream record schema adapters
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   The Ghost Security API has served findings in two shapes:
#
#     v1 (flat)     {id, name, severity, status, class, created_at,
#                    location: {file_path, line}, repo_url}
#
#     v2 (nested)   {id, status, created_at, repo: {id, name, url},
#                    details: {title, severity,
#                              location: {file_path, line_number}, ...}}
#
#   Each version gets one translation function into the canonical
#   FindingView.  Projection and aggregation only ever see FindingView, so
#   switching versions is a configuration change (GHOST_SECURITY_SCHEMA_VERSION)
#   rather than a second copy of the client.
# =============================================================================

from enum import Enum
from typing import Any, Callable, Optional

from core.models import FindingView, Location


class SchemaVersion(str, Enum):
    V1 = "v1"
    V2 = "v2"


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _label(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _location(raw: Any, line_key: str) -> Optional[Location]:
    if not isinstance(raw, dict):
        return None
    return Location(file_path=raw.get("file_path"), line=raw.get(line_key))


def _repo_label(record: dict[str, Any]) -> Optional[str]:
    repo = _as_dict(record.get("repo"))
    return _label(repo.get("name")) or _label(repo.get("id")) or _label(record.get("repo_url"))


def _from_flat(record: dict[str, Any]) -> FindingView:
    return FindingView(
        id=record.get("id"),
        title=record.get("name"),
        severity=record.get("severity"),
        status=record.get("status"),
        created_at=record.get("created_at"),
        classification=_label(record.get("class")),
        repo_label=_repo_label(record),
        location=_location(record.get("location"), "line"),
        details=_as_dict(record.get("details")),
    )


def _from_nested(record: dict[str, Any]) -> FindingView:
    details = _as_dict(record.get("details"))
    return FindingView(
        id=record.get("id"),
        title=details.get("title"),
        severity=details.get("severity"),
        status=record.get("status"),
        created_at=record.get("created_at"),
        classification=_label(details.get("title")),
        repo_label=_repo_label(record),
        location=_location(details.get("location"), "line_number"),
        details=details,
    )


_ADAPTERS: dict[SchemaVersion, Callable[[dict[str, Any]], FindingView]] = {
    SchemaVersion.V1: _from_flat,
    SchemaVersion.V2: _from_nested,
}


def to_view(record: dict[str, Any], version: SchemaVersion = SchemaVersion.V2) -> FindingView:
    """Translate one raw upstream finding into the canonical FindingView."""
    return _ADAPTERS[SchemaVersion(version)](record)
