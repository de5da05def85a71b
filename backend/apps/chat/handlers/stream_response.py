"""POST /chat - Stream chat response.

Server-Sent Events, one JSON object per frame:
- type: "language" - Detected answer language (first frame)
- type: "content"  - Answer text fragment
- type: "done"     - Final answer with model, sources and validation
- type: "error"    - Localized failure message and response code

If the client disconnects the orchestrator call is cancelled.
"""

import asyncio
import json
import logging
import uuid
from typing import Any

from fastapi import Depends, Request
from fastapi.responses import StreamingResponse

from apps.chat.answers import build_answer, describe_failure
from apps.chat.schemas import ChatRequest
from dependencies import get_chat_orchestrator
from llm.base import LLMError
from llm.cancellation import CancellationToken
from llm.language import detect_language
from llm.orchestrator import ChatOrchestrator
from llm.types import ChatResponse
from responses import ResponseCode

logger = logging.getLogger(__name__)


def _frame(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


async def stream_response(
    request: ChatRequest,
    http_request: Request,
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> StreamingResponse:
    """Stream an assistant answer token by token."""
    request_id = getattr(http_request.state, "request_id", None) or uuid.uuid4().hex[:8]
    logger.info("[%s] Chat: %s", request_id, request.message[:100])

    language = detect_language(request.message)
    cancellation = CancellationToken()
    tokens: asyncio.Queue[str | None] = asyncio.Queue()

    async def run_turn() -> ChatResponse:
        try:
            return await orchestrator.generate_chat_response_stream(
                request.message,
                tokens.put_nowait,
                cancellation=cancellation,
                rag_context=request.rag_context,
                rag_mode=request.rag_mode,
            )
        finally:
            tokens.put_nowait(None)

    async def generate_sse_events():
        yield _frame({"type": "language", "language": language.value})

        task = asyncio.create_task(run_turn())
        try:
            while (token := await tokens.get()) is not None:
                yield _frame({"type": "content", "content": token})

            response = await task
            answer = build_answer(response, request)
            # Disclaimer appended by validation was never streamed
            if answer.text != response.text:
                yield _frame(
                    {"type": "content", "content": answer.text[len(response.text) :]}
                )
            yield _frame({"type": "done", **answer.model_dump()})

        except LLMError as e:
            code, message = describe_failure(orchestrator, e, language)
            logger.warning("[%s] Chat failed (%s): %s", request_id, code.name, e)
            yield _frame({"type": "error", "code": code.value, "error": message})

        except Exception:
            logger.exception("[%s] Stream error", request_id)
            yield _frame(
                {
                    "type": "error",
                    "code": ResponseCode.INTERNAL_ERROR.value,
                    "error": orchestrator.offline_message(language),
                }
            )

        finally:
            if not task.done():
                logger.info("[%s] Client disconnected, cancelling", request_id)
                cancellation.cancel("client disconnected")
                await asyncio.gather(task, return_exceptions=True)

    return StreamingResponse(
        generate_sse_events(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Request-ID": request_id,
        },
    )
