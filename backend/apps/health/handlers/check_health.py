"""GET /health - Report provider availability.

Purely local: credentials are checked for shape, no provider is called.
"""

from datetime import UTC, datetime

from fastapi import Depends
from pydantic import BaseModel, Field

from config import get_settings
from dependencies import get_chat_orchestrator
from llm.orchestrator import ChatOrchestrator

# --- Response Schemas ---


class ProviderStatus(BaseModel):
    """Status of a single LLM provider."""

    name: str
    available: bool
    credential: str = Field(..., description="missing, valid, or set but invalid")
    priority: int = Field(..., description="Position in the fallback order")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="healthy, degraded, or unhealthy")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Environment name")
    providers: list[ProviderStatus]
    timestamp: datetime


# --- Handler ---


async def check_health(
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> HealthResponse:
    """Check which providers can serve chat requests."""
    settings = get_settings()

    providers = [
        ProviderStatus(
            name=client.name,
            available=client.is_available(),
            credential=client.credential_status(),
            priority=index,
        )
        for index, client in enumerate(orchestrator.clients)
    ]

    available = sum(1 for p in providers if p.available)
    if available == len(providers):
        overall = "healthy"
    elif available:
        overall = "degraded"
    else:
        overall = "unhealthy"

    return HealthResponse(
        status=overall,
        version="0.1.0",
        environment=settings.environment,
        providers=providers,
        timestamp=datetime.now(UTC),
    )
