"""POST /chat/complete - Non-streaming chat response."""

import logging

from fastapi import Depends, Request
from fastapi.responses import JSONResponse

from apps.chat.answers import build_answer, describe_failure
from apps.chat.schemas import ChatRequest
from dependencies import get_chat_orchestrator
from llm.base import LLMError
from llm.language import detect_language
from llm.orchestrator import ChatOrchestrator
from responses import ResponseCode, error_response, success_response

logger = logging.getLogger(__name__)


async def complete_response(
    request: ChatRequest,
    http_request: Request,
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> JSONResponse:
    """Answer a message in one JSON envelope."""
    request_id = getattr(http_request.state, "request_id", None)
    logger.info("[%s] Chat (complete): %s", request_id, request.message[:100])

    try:
        response = await orchestrator.generate_chat_response(
            request.message,
            rag_context=request.rag_context,
            rag_mode=request.rag_mode,
        )
    except LLMError as e:
        language = detect_language(request.message)
        code, message = describe_failure(orchestrator, e, language)
        logger.warning("[%s] Chat failed (%s): %s", request_id, code.name, e)
        return error_response(
            code,
            custom_message=message,
            error_details={"language": language.value},
            request_id=request_id,
        )

    answer = build_answer(response, request)
    return success_response(
        ResponseCode.SUCCESS, data=answer.model_dump(), request_id=request_id
    )
