# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains the retrieval, aggregation and response-shaping logic
# for the Ghost Security tools.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP, Google ADK, or any orchestration
#   framework.  It talks to the upstream API through core/client.py (httpx)
#   and hands plain JSON-ready values back to the tools/ layer.
# =============================================================================
