# =============================================================================
# core/projection.py  —  Response-mode projection of findings
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns a page of raw findings into what the tool caller asked for:
#
#     detailed  →  records untouched
#     summary   →  a fixed lightweight SummaryRecord per finding:
#                  {id, title, severity, status, created_at,
#                   location: {file_path, line}}
#     summary + fields  →  each record re-keyed to exactly those fields
#
#   Count mode never reaches this module; operations send it to
#   core/counting.py instead.
#
# FIELD RESOLUTION ORDER (for an explicit field list):
#   1. the SummaryRecord
#   2. the raw top-level record
#   3. the nested detail object ("details" in the v2 schema)
#   Fields found in none of them are dropped without error.
# =============================================================================

from typing import Any, Callable, Iterable, Optional, Sequence

from core.models import FindingView, ResponseMode
from core.schema import SchemaVersion, to_view

# Ordered (key, resolver) pairs that make up a SummaryRecord.  "location" is
# added separately because it is omitted entirely when the record has none.
SUMMARY_FIELDS: tuple[tuple[str, Callable[[FindingView], Any]], ...] = (
    ("id", lambda view: view.id),
    ("title", lambda view: view.title),
    ("severity", lambda view: view.severity),
    ("status", lambda view: view.status),
    ("created_at", lambda view: view.created_at),
)


def summarize(view: FindingView) -> dict[str, Any]:
    """Build the fixed SummaryRecord for one finding."""
    summary = {key: resolve(view) for key, resolve in SUMMARY_FIELDS}
    if view.location is not None:
        summary["location"] = {
            "file_path": view.location.file_path,
            "line": view.location.line,
        }
    return summary


def select_fields(
    fields: Sequence[str],
    summary: dict[str, Any],
    record: dict[str, Any],
    details: dict[str, Any],
) -> dict[str, Any]:
    """Re-key a finding to exactly the requested fields that resolve."""
    selected: dict[str, Any] = {}
    for name in fields:
        for source in (summary, record, details):
            if name in source:
                selected[name] = source[name]
                break
    return selected


def project_record(
    record: dict[str, Any],
    fields: Optional[Sequence[str]] = None,
    version: SchemaVersion = SchemaVersion.V2,
) -> dict[str, Any]:
    view = to_view(record, version)
    summary = summarize(view)
    if fields:
        return select_fields(fields, summary, record, view.details)
    return summary


def project_items(
    records: Iterable[Any],
    mode: ResponseMode = ResponseMode.SUMMARY,
    fields: Optional[Sequence[str]] = None,
    version: SchemaVersion = SchemaVersion.V2,
) -> list[Any]:
    """Project a sequence of raw findings for the requested response mode.

    Items that are not objects are passed through as-is in summary mode.

    Raises:
        ValueError: mode is COUNT (counts are resolved, not projected).
    """
    mode = ResponseMode(mode)
    if mode is ResponseMode.COUNT:
        raise ValueError("count mode is resolved by core.counting, not projected")
    if mode is ResponseMode.DETAILED:
        return list(records)
    return [
        project_record(record, fields, version) if isinstance(record, dict) else record
        for record in records
    ]
