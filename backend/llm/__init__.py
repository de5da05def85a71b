"""LLM module - multi-provider chat generation.

Usage:
    from llm import generate_chat_response_stream, CancellationToken

    token = CancellationToken()
    response = await generate_chat_response_stream(query, on_token, token)

Structure:
    - base.py: Client interface (BaseLLMClient) and error taxonomy
    - claude.py / openai.py: Provider clients
    - orchestrator.py: Prompting, fallback and list completion
"""

from llm.base import (
    BaseLLMClient,
    CancellationError,
    ConfigurationError,
    LLMError,
    ProviderError,
)
from llm.cancellation import CancellationToken
from llm.claude import ClaudeClient
from llm.openai import OpenAIClient
from llm.orchestrator import (
    ChatOrchestrator,
    detect_language,
    generate_chat_response,
    generate_chat_response_stream,
    get_offline_message,
    get_orchestrator,
)
from llm.types import ChatResponse, Language, LLMResponse, RagMode

__all__ = [
    "BaseLLMClient",
    "LLMError",
    "ConfigurationError",
    "CancellationError",
    "ProviderError",
    "CancellationToken",
    "ClaudeClient",
    "OpenAIClient",
    "ChatOrchestrator",
    "ChatResponse",
    "Language",
    "LLMResponse",
    "RagMode",
    "detect_language",
    "generate_chat_response",
    "generate_chat_response_stream",
    "get_offline_message",
    "get_orchestrator",
]
