# =============================================================================
# agent/security_agent.py  —  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Creates the Google ADK agent that answers questions about security
#   findings.  It has no data access of its own: it reasons with an LLM
#   (via LiteLlm) and calls the FastMCP tool server for everything else.
#
#   ┌────────────────────────────────────────────────────────────┐
#   │                     Google ADK Agent                       │
#   │  system prompt ──▶ LLM (LiteLlm) ──▶ MCPToolset (stdio)    │
#   └────────────────────────────────────────────────────────────┘
#                                               │
#                                               ▼
#                                  ┌──────────────────────────┐
#                                  │  tools/mcp_server.py     │
#                                  │  ghostsecurity_* tools   │
#                                  └──────────────────────────┘
#                                               │
#                                               ▼
#                                  ┌──────────────────────────┐
#                                  │  core/  → Ghost Security │
#                                  │           REST API       │
#                                  └──────────────────────────┘
#
# MCP CONNECTION:
#   ADK starts the tool server as a subprocess ("uv run python -m
#   tools.mcp_server") and talks to it over stdin/stdout.  The subprocess
#   gets this process's environment so it sees GHOST_SECURITY_API_KEY and
#   GHOST_SECURITY_REPO_ID.
#
# MODEL:
#   GHOST_AGENT_MODEL is any LiteLlm model string, e.g.
#     "anthropic/claude-3-5-sonnet-20241022"  (reads ANTHROPIC_API_KEY)
#     "openrouter/openai/gpt-4o"              (reads OPENROUTER_API_KEY)
# =============================================================================

import os

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_security_assistant_prompt
from core.config import Settings


def create_agent(settings: Settings) -> Agent:
    """Create the security assistant agent wired to the MCP tool server.

    Args:
        settings: Loaded configuration; supplies the model and repo scope.

    Returns:
        A configured Google ADK Agent instance.
    """
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command="uv",
            args=["run", "python", "-m", "tools.mcp_server"],
            cwd=project_root,
            env=dict(os.environ),
        ),
    )

    return Agent(
        name="ghost_security_assistant",
        model=LiteLlm(model=settings.agent_model),
        instruction=get_security_assistant_prompt(settings.repository_id),
        tools=[mcp_tools],
    )
