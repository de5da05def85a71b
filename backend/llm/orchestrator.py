"""Chat orchestration across LLM providers.

Builds the system prompt, picks a token budget, runs the ordered client list
(streaming pass first, then a non-streaming pass) and repairs truncated
canonical lists with a single continuation round.
"""

import logging
from collections.abc import Sequence
from functools import lru_cache

from llm.base import (
    BaseLLMClient,
    CancellationError,
    ConfigurationError,
    LLMError,
)
from llm.cancellation import CancellationToken, check_cancelled
from llm.claude import ClaudeClient
from llm.completeness import (
    analyze_completeness,
    build_continuation_prompt,
    verify_completeness,
)
from llm.language import detect_language
from llm.messages import offline_message
from llm.openai import OpenAIClient
from llm.prompts import build_system_prompt
from llm.sources import build_source_string
from llm.types import (
    ChatResponse,
    CompletenessInfo,
    Language,
    LLMResponse,
    LLMStreamRequestOptions,
    RagMode,
    TokenSink,
    TokenUsage,
)

logger = logging.getLogger(__name__)

LONG_LIST_THRESHOLD = 20
LONG_LIST_MAX_TOKENS = 8192
LIST_MAX_TOKENS = 4096
DEFAULT_MAX_TOKENS = 1500
RAG_MAX_TOKENS = 2500
TOPIC_DETAIL_MAX_TOKENS = 3500
LIST_TEMPERATURE = 0.3
DEFAULT_TEMPERATURE = 0.5

CONTINUATION_MAX_TOKENS = 4096
CONTINUATION_TEMPERATURE = 0.3

NO_CLIENT_MESSAGE = "No LLM client available. Check API keys."


def select_budget(
    completeness: CompletenessInfo,
    rag_context: str | None = None,
    rag_mode: RagMode = RagMode.GENERAL,
) -> tuple[int, float]:
    """Return ``(max_tokens, temperature)`` for a chat turn."""
    if completeness.is_list_request:
        count = completeness.expected_count or 0
        max_tokens = LONG_LIST_MAX_TOKENS if count > LONG_LIST_THRESHOLD else LIST_MAX_TOKENS
        return max_tokens, LIST_TEMPERATURE

    if not rag_context:
        return DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
    if rag_mode == RagMode.TOPIC_DETAIL:
        return TOPIC_DETAIL_MAX_TOKENS, DEFAULT_TEMPERATURE
    return RAG_MAX_TOKENS, DEFAULT_TEMPERATURE


def _noop_sink(_token: str) -> None:
    return None


def _combined_usage(
    first: TokenUsage | None, second: TokenUsage | None
) -> TokenUsage | None:
    """Sum usage over a response and its continuation; None if either is unknown."""
    if first is None or second is None:
        return None
    return TokenUsage(
        prompt_tokens=first.prompt_tokens + second.prompt_tokens,
        completion_tokens=first.completion_tokens + second.completion_tokens,
        total_tokens=first.total_tokens + second.total_tokens,
    )


class ChatOrchestrator:
    """Runs chat turns against an ordered list of provider clients.

    Clients are tried in list order; the first available one that succeeds
    answers the turn.
    """

    def __init__(self, clients: Sequence[BaseLLMClient]) -> None:
        self._clients = tuple(clients)

    @property
    def clients(self) -> tuple[BaseLLMClient, ...]:
        return self._clients

    def available_clients(self) -> list[BaseLLMClient]:
        """Clients with a well-formed credential, in priority order."""
        available = [client for client in self._clients if client.is_available()]
        if available:
            logger.info(
                "LLM clients available: %s", ", ".join(c.name for c in available)
            )
        else:
            logger.warning(
                "No LLM client available (%s)",
                ", ".join(f"{c.name}: {c.credential_status()}" for c in self._clients),
            )
        return available

    def offline_message(
        self, language: Language | str, error_hint: str | None = None
    ) -> str:
        """Localized message explaining why no answer could be produced."""
        has_providers = any(client.is_available() for client in self._clients)
        return offline_message(language, has_providers, error_hint)

    async def generate_chat_response_stream(
        self,
        user_query: str,
        on_token: TokenSink,
        cancellation: CancellationToken | None = None,
        rag_context: str | None = None,
        rag_mode: RagMode = RagMode.GENERAL,
    ) -> ChatResponse:
        """Answer a user query, streaming fragments to ``on_token``.

        Args:
            user_query: The user's message.
            on_token: Receives text fragments in arrival order.
            cancellation: Aborts the turn when fired.
            rag_context: Retrieved reference passages, if any.
            rag_mode: How ``rag_context`` was gathered; affects the budget.

        Returns:
            The complete answer with language, model and source line.

        Raises:
            ConfigurationError: If no client is available (no I/O performed).
            CancellationError: If the token fires.
            LLMError: The last provider error when every attempt failed.
        """
        check_cancelled(cancellation)

        language = detect_language(user_query)
        completeness = analyze_completeness(user_query)
        system_prompt = build_system_prompt(
            language, completeness.prompt_augmentation, rag_context
        ).render()
        max_tokens, temperature = select_budget(completeness, rag_context, rag_mode)

        clients = self.available_clients()
        if not clients:
            raise ConfigurationError(NO_CLIENT_MESSAGE)

        options = LLMStreamRequestOptions(
            system_prompt=system_prompt,
            user_prompt=user_query,
            max_tokens=max_tokens,
            temperature=temperature,
            cancellation=cancellation,
            on_token=on_token,
        )
        result = await self._run_with_fallback(clients, options)

        if completeness.is_list_request and completeness.expected_count is not None:
            result = await self._complete_list(
                clients, result, completeness, language, options
            )

        return ChatResponse(
            text=result.text,
            language=language,
            model=result.model,
            sources=build_source_string(user_query, language),
            usage=result.usage,
        )

    async def generate_chat_response(
        self,
        user_query: str,
        cancellation: CancellationToken | None = None,
        rag_context: str | None = None,
        rag_mode: RagMode = RagMode.GENERAL,
    ) -> ChatResponse:
        """Answer a user query without streaming."""
        return await self.generate_chat_response_stream(
            user_query,
            _noop_sink,
            cancellation=cancellation,
            rag_context=rag_context,
            rag_mode=rag_mode,
        )

    # --- Internals ---

    async def _run_with_fallback(
        self,
        clients: Sequence[BaseLLMClient],
        options: LLMStreamRequestOptions,
    ) -> LLMResponse:
        """Streaming pass over all clients, then a non-streaming pass."""
        last_error: Exception | None = None

        for client in clients:
            check_cancelled(options.cancellation)
            logger.info("[%s] streaming attempt", client.name)
            try:
                return await client.generate_stream(options)
            except CancellationError:
                raise
            except Exception as e:
                logger.warning("[%s] stream failed: %s", client.name, e)
                last_error = e

        logger.info("All streaming attempts failed, falling back to non-streaming")
        for client in clients:
            check_cancelled(options.cancellation)
            try:
                response = await client.generate(options)
            except CancellationError:
                raise
            except Exception as e:
                logger.warning("[%s] generate failed: %s", client.name, e)
                last_error = e
                continue
            options.on_token(response.text)
            return response

        if last_error is None:
            raise LLMError("All LLM providers failed")
        raise last_error

    async def _complete_list(
        self,
        clients: Sequence[BaseLLMClient],
        result: LLMResponse,
        completeness: CompletenessInfo,
        language: Language,
        options: LLMStreamRequestOptions,
    ) -> LLMResponse:
        """Ask for the missing tail of a truncated canonical list, once."""
        expected = completeness.expected_count
        check = verify_completeness(result.text, expected)
        if check.is_complete or check.item_count == 0:
            return result

        logger.info(
            "List incomplete (%d/%d %s), requesting continuation",
            check.item_count,
            expected,
            completeness.label,
        )
        options.on_token("\n")

        continuation_options = LLMStreamRequestOptions(
            system_prompt=build_system_prompt(
                language, completeness.prompt_augmentation
            ).render(),
            user_prompt=build_continuation_prompt(
                check.item_count, expected, completeness.label
            ),
            max_tokens=CONTINUATION_MAX_TOKENS,
            temperature=CONTINUATION_TEMPERATURE,
            cancellation=options.cancellation,
            on_token=options.on_token,
        )

        try:
            continuation = await self._run_with_fallback(clients, continuation_options)
        except CancellationError:
            raise
        except Exception as e:
            logger.warning("Continuation failed, returning partial list: %s", e)
            return result

        return LLMResponse(
            text=result.text.rstrip() + "\n" + continuation.text.strip(),
            model=f"{result.model}+continuation",
            finish_reason=continuation.finish_reason,
            usage=_combined_usage(result.usage, continuation.usage),
        )


@lru_cache
def get_orchestrator() -> ChatOrchestrator:
    """Default orchestrator: Claude first, OpenAI as fallback."""
    return ChatOrchestrator([ClaudeClient.from_settings(), OpenAIClient.from_settings()])


async def generate_chat_response_stream(
    user_query: str,
    on_token: TokenSink,
    cancellation: CancellationToken | None = None,
    rag_context: str | None = None,
    rag_mode: RagMode = RagMode.GENERAL,
) -> ChatResponse:
    return await get_orchestrator().generate_chat_response_stream(
        user_query,
        on_token,
        cancellation=cancellation,
        rag_context=rag_context,
        rag_mode=rag_mode,
    )


async def generate_chat_response(
    user_query: str, cancellation: CancellationToken | None = None
) -> ChatResponse:
    return await get_orchestrator().generate_chat_response(
        user_query, cancellation=cancellation
    )


def get_offline_message(language: Language | str, error_hint: str | None = None) -> str:
    return get_orchestrator().offline_message(language, error_hint)


__all__ = [
    "ChatOrchestrator",
    "select_budget",
    "get_orchestrator",
    "generate_chat_response_stream",
    "generate_chat_response",
    "get_offline_message",
    "detect_language",
]
