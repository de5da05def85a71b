"""Request/response schemas for the chat endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from llm.types import RagMode


class ChatRequest(BaseModel):
    """Request body for chat endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(
        ...,
        min_length=1,
        max_length=4000,
        description="User's message or question",
        alias="question",
    )
    rag_context: str | None = Field(
        None, description="Retrieved reference passages to ground the answer"
    )
    rag_mode: RagMode = Field(
        RagMode.GENERAL, description="How rag_context was gathered"
    )
    rag_source_count: int | None = Field(
        None, ge=0, description="Passages in rag_context; enables answer validation"
    )
    avg_similarity: float | None = Field(
        None, ge=0, le=1, description="Mean similarity of the passages"
    )


class ChatAnswer(BaseModel):
    """Final answer for one chat turn."""

    text: str
    language: str
    model: str
    sources: str
    arabic_text: str | None = None
    translation: str | None = None
    confidence: str | None = None
    warnings: list[str] = Field(default_factory=list)
