# =============================================================================
# core/shaping.py  —  Response size bounding for the tool caller
# =============================================================================
#
# The tool caller is an LLM with a finite context window.  Every tool
# response passes through format_response() on its way out:
#
#   - count results (anything with "total_count") go out whole
#   - listings with at most 20 items go out whole
#   - longer listings are cut to the first 15 items and annotated with
#     _truncated / _original_count / _message
#   - anything else goes out unchanged
#
# Truncation is lossy.  Callers that need every item must
# paginate (size, cursor) or switch to count mode.
# =============================================================================

import json
from typing import Any

MAX_UNTRUNCATED_ITEMS = 20
TRUNCATED_ITEM_COUNT = 15


def shape_response(body: Any) -> Any:
    """Return body, or a truncated copy when its items list is too long.

    The input is never mutated.
    """
    if not isinstance(body, dict) or "total_count" in body:
        return body

    items = body.get("items")
    if not isinstance(items, list) or len(items) <= MAX_UNTRUNCATED_ITEMS:
        return body

    kept = items[:TRUNCATED_ITEM_COUNT]
    return {
        **body,
        "items": kept,
        "_truncated": True,
        "_original_count": len(items),
        "_message": (
            f"Response truncated to show {len(kept)} of {len(items)} items to prevent "
            "token limit issues. Use pagination parameters (size, cursor) or 'count' "
            "mode for full statistics."
        ),
    }


def format_response(body: Any) -> str:
    """Shape body and serialize it as the single JSON text block a tool returns."""
    return json.dumps(shape_response(body), indent=2, default=str)
