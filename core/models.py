# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the shape of everything that flows between the
# upstream Ghost Security API and the tool layer.  Upstream records
# themselves (findings, repositories, endpoints) stay plain dicts: the core
# only reads them through core/schema.py and never rebuilds them.
#
# Everything here is created fresh per request and discarded once the tool
# response has been serialized.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ResponseMode(str, Enum):
    """How listing items are returned to the caller."""

    SUMMARY = "summary"      # fixed lightweight projection (default)
    DETAILED = "detailed"    # raw upstream records
    COUNT = "count"          # statistics only, no items


class Tolerance(Enum):
    """How a page fetch reacts to a structurally invalid body.

    STRICT paths must be complete and correct, so a bad body is an error.
    BEST_EFFORT paths only feed statistics; a bad body becomes a
    DegradedPage and the walk carries on.
    """

    STRICT = "strict"
    BEST_EFFORT = "best_effort"


SORT_FIELDS = ("created_at", "updated_at", "last_committed_at")
SORT_ORDERS = ("asc", "desc")
CAST_FILTERS = ("supported", "unsupported", "all")
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 1000


# -----------------------------------------------------------------------------
# Page — one cursor page of upstream records
# -----------------------------------------------------------------------------
# next_cursor is opaque: it is only meaningful when has_more is True and is
# echoed back verbatim on the next request.
# -----------------------------------------------------------------------------
@dataclass
class Page:
    """A single page returned by a paginated listing endpoint."""

    items: list[dict[str, Any]] = field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)   # e.g. upstream "total"

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = dict(self.extra)
        body.update(items=self.items, has_more=self.has_more)
        if self.next_cursor is not None:
            body["next_cursor"] = self.next_cursor
        return body


@dataclass
class DegradedPage(Page):
    """A page whose body failed the structural check on a best-effort walk.

    Always empty.  has_more / next_cursor survive only when the body was an
    object that still carried them, so the walk can keep going.
    """

    reason: str = ""


@dataclass
class WalkResult:
    """Items accumulated by a multi-page walk."""

    items: list[dict[str, Any]]
    pages_fetched: int
    complete: bool           # False when the page ceiling stopped the walk


# -----------------------------------------------------------------------------
# QueryParams — what a caller may ask a listing for
# -----------------------------------------------------------------------------
# mode and fields are consumed locally and never sent upstream.
# -----------------------------------------------------------------------------
@dataclass
class QueryParams:
    """Listing arguments accepted from the tool caller."""

    cursor: Optional[str] = None
    sort: Optional[str] = None
    order: Optional[str] = None
    size: Optional[int] = None
    mode: ResponseMode = ResponseMode.SUMMARY
    fields: Optional[list[str]] = None
    status: Optional[str] = None
    repo_id: Optional[str] = None
    project_id: Optional[str] = None
    cast: Optional[str] = None

    def __post_init__(self) -> None:
        self.mode = ResponseMode(self.mode)
        if self.sort is not None and self.sort not in SORT_FIELDS:
            raise ValueError(f"sort must be one of {', '.join(SORT_FIELDS)}")
        if self.order is not None and self.order not in SORT_ORDERS:
            raise ValueError(f"order must be one of {', '.join(SORT_ORDERS)}")
        if self.cast is not None and self.cast not in CAST_FILTERS:
            raise ValueError(f"cast must be one of {', '.join(CAST_FILTERS)}")
        if self.size is not None and not MIN_PAGE_SIZE <= self.size <= MAX_PAGE_SIZE:
            raise ValueError(f"size must be between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE}")

    def upstream_params(self) -> dict[str, Any]:
        """Parameters forwarded to the upstream API (unset values dropped)."""
        params = {
            "cursor": self.cursor,
            "sort": self.sort,
            "order": self.order,
            "size": self.size,
            "status": self.status,
            "repo_id": self.repo_id,
            "project_id": self.project_id,
            "cast": self.cast,
        }
        return {key: value for key, value in params.items() if value is not None}

    def filters(self) -> dict[str, Any]:
        """Upstream params minus paging controls, for count/aggregate calls."""
        params = self.upstream_params()
        params.pop("cursor", None)
        params.pop("size", None)
        return params


# -----------------------------------------------------------------------------
# CountResult — statistics across a whole result set
# -----------------------------------------------------------------------------
# For every by_* dimension the bucket counts add up to total_count; records
# without a label land in the "unknown" bucket.
#
# is_complete is False when the counts came from a walk that stopped at its
# page ceiling or skipped a malformed page, i.e. total_count is a lower bound
# rather than the true total.
# -----------------------------------------------------------------------------
@dataclass
class CountResult:
    """Grouped counts for a set of findings."""

    total_count: int = 0
    by_severity: dict[str, int] = field(default_factory=dict)
    by_status: dict[str, int] = field(default_factory=dict)
    by_title: dict[str, int] = field(default_factory=dict)
    by_repo: dict[str, int] = field(default_factory=dict)
    is_complete: bool = True

    @classmethod
    def from_upstream(cls, body: dict[str, Any]) -> "CountResult":
        """Build from a /findings/count body already known to hold total_count.

        Raises:
            ValueError: total_count is not an integer (bools and floats included).
        """
        total = body["total_count"]
        if isinstance(total, bool) or not isinstance(total, int):
            raise ValueError(f"total_count must be an integer, got {total!r}")

        def _buckets(key: str) -> dict[str, int]:
            value = body.get(key)
            return dict(value) if isinstance(value, dict) else {}

        return cls(
            total_count=total,
            by_severity=_buckets("by_severity"),
            by_status=_buckets("by_status"),
            # Older count endpoints group by class instead of title.
            by_title=_buckets("by_title") or _buckets("by_class"),
            by_repo=_buckets("by_repo"),
            is_complete=True,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_count": self.total_count,
            "by_severity": self.by_severity,
            "by_status": self.by_status,
            "by_title": self.by_title,
            "by_repo": self.by_repo,
            "is_complete": self.is_complete,
        }


# -----------------------------------------------------------------------------
# FindingView — canonical read-only view of one upstream finding
# -----------------------------------------------------------------------------
# Built by core/schema.py from either upstream schema version, so the
# projection and aggregation code only ever deals with one shape.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Location:
    file_path: Optional[str] = None
    line: Optional[int] = None


@dataclass(frozen=True)
class FindingView:
    """The fields the core needs from a finding, whatever its schema."""

    id: Optional[str]
    title: Optional[str]
    severity: Optional[str]
    status: Optional[str]
    created_at: Optional[str]
    classification: Optional[str]     # grouping label for by_title
    repo_label: Optional[str]         # grouping label for by_repo
    location: Optional[Location]      # None when the record has no location
    details: dict[str, Any] = field(default_factory=dict)
