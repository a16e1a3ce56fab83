# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP tool server.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between the MCP protocol and core/.
#   Each tool:
#     1. Turns its arguments into a core query
#     2. Calls one core/ operation
#     3. Maps failures to a single ToolError message
#     4. Returns one JSON text block bounded by core/shaping.py
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT page, project or count (that's core/)
#   - They do NOT know about Google ADK (they're framework-agnostic)
# =============================================================================
