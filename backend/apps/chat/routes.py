"""Chat routes - registers all chat endpoints."""

from fastapi import APIRouter

from apps.chat.handlers import complete_response, stream_response

router = APIRouter(prefix="/chat", tags=["Chat"])

# POST /chat - Stream response (SSE)
router.post("")(stream_response)

# POST /chat/complete - Full response (JSON envelope)
router.post("/complete")(complete_response)
