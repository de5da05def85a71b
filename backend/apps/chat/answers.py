"""Helpers shared by the chat handlers."""

from apps.chat.schemas import ChatAnswer, ChatRequest
from llm.base import CancellationError, LLMError
from llm.messages import classify_failure
from llm.orchestrator import ChatOrchestrator
from llm.types import ChatResponse, Language
from llm.validator import validate_response
from responses import FAILURE_CODES, ResponseCode


def build_answer(response: ChatResponse, request: ChatRequest) -> ChatAnswer:
    """Turn an orchestrator result into the API answer.

    When the caller reports retrieval stats the text is validated, which may
    append a disclaimer.
    """
    answer = ChatAnswer(
        text=response.text,
        language=response.language.value,
        model=response.model,
        sources=response.sources,
        arabic_text=response.arabic_text,
        translation=response.translation,
    )
    if request.rag_source_count is None:
        return answer

    result = validate_response(
        response.text, request.rag_source_count, request.avg_similarity or 0.0
    )
    answer.text = result.text
    answer.confidence = result.confidence.value
    answer.warnings = result.warnings
    return answer


def describe_failure(
    orchestrator: ChatOrchestrator,
    error: LLMError,
    language: Language,
) -> tuple[ResponseCode, str]:
    """Response code and localized message for a failed chat turn."""
    if isinstance(error, CancellationError):
        return ResponseCode.REQUEST_CANCELLED, str(error)

    has_providers = any(client.is_available() for client in orchestrator.clients)
    code = FAILURE_CODES[classify_failure(has_providers, str(error))]
    return code, orchestrator.offline_message(language, str(error))
