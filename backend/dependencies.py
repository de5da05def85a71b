"""FastAPI dependency injection for services.

The orchestrator owns the provider clients (HTTP pools), so it is built once
and shared; tests swap it through ``app.dependency_overrides``.
"""

from llm.orchestrator import ChatOrchestrator, get_orchestrator


def get_chat_orchestrator() -> ChatOrchestrator:
    """Get the cached chat orchestrator (Claude first, OpenAI fallback)."""
    return get_orchestrator()
