# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK agent configuration.
#
# ARCHITECTURAL ROLE:
#   The agent/ layer is the conversational front end.  It:
#     1. Receives the user's question ("how many critical findings are open?")
#     2. Decides which ghostsecurity_* tools to call (via MCP)
#     3. Interprets the bounded tool output, including truncation markers
#     4. Answers in plain language
#
#   It holds no business logic and no data access of its own.
# =============================================================================
