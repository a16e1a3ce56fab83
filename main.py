# =============================================================================
# main.py  —  Interactive chat with the Ghost Security assistant
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
#   Needs GHOST_SECURITY_API_KEY plus the API key for the chosen
#   GHOST_AGENT_MODEL (e.g. ANTHROPIC_API_KEY), from the environment or .env.
#
# WHAT HAPPENS:
#   1. Loads configuration and creates the ADK agent (agent/security_agent.py)
#   2. Starts an in-memory session
#   3. Sends each question to the agent, printing tool calls as they happen
#   4. Prints the agent's final answer
#
#   Type "quit", "exit" or "q" (or Ctrl-D) to stop.
# =============================================================================

import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.security_agent import create_agent
from core.config import Settings
from core.errors import ConfigurationError

APP_NAME = "ghost_security_assistant"
USER_ID = "local_user"


async def run_agent(settings: Settings) -> None:
    """Run the security assistant interactively until the user quits."""
    print("=" * 70)
    print("  GHOST SECURITY ASSISTANT")
    print("  Powered by Google ADK + FastMCP")
    print("=" * 70)
    print("\n🔧 Initializing agent...")
    agent = create_agent(settings)

    session_service = InMemorySessionService()
    runner = Runner(
        agent=agent,
        app_name=APP_NAME,
        session_service=session_service,
    )
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    print("✅ Agent initialized and ready!\n")
    if settings.repository_id:
        print(f"📦 Scoped to repository {settings.repository_id}")
    print("💬 Ask questions about your security findings or repositories.")
    print("   (Type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(
            role="user",
            parts=[types.Part(text=user_input)],
        )

        print("\n🤖 Agent is thinking...\n")
        print("-" * 70)

        final_response = ""

        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if getattr(part, "text", None):
                        final_response = part.text

                    if getattr(part, "function_call", None):
                        print(f"  🔧 Calling tool: {part.function_call.name}")

        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")

        print("\n" + "=" * 70)


def main() -> None:
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    asyncio.run(run_agent(settings))


if __name__ == "__main__":
    main()
