"""Pytest configuration and fixtures for Ansar tests."""

import os
import sys

# Set env vars BEFORE any imports that might trigger Settings
os.environ.setdefault("ANTHROPIC_API_KEY", "")
os.environ.setdefault("OPENAI_API_KEY", "")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_BURST", "10000")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "10000")
os.environ.setdefault("RATE_LIMIT_PER_HOUR", "10000")

import pytest

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from llm.base import BaseLLMClient, ProviderError  # noqa: E402
from llm.types import (  # noqa: E402
    LLMRequestOptions,
    LLMResponse,
    LLMStreamRequestOptions,
    TokenUsage,
)


class FakeClient(BaseLLMClient):
    """Scripted provider client.

    Each call pops the next outcome: a list of chunks (streaming) or a string
    (non-streaming) succeeds, an exception is raised. An exhausted script
    fails with a ProviderError.
    """

    def __init__(
        self,
        name: str,
        *,
        available: bool = True,
        stream: list | None = None,
        generate: list | None = None,
        model: str | None = None,
        usage: TokenUsage | None = None,
    ) -> None:
        self.name = name
        self.usage = usage
        self.available = available
        self.stream_script = list(stream or [])
        self.generate_script = list(generate or [])
        self.model = model or f"{name}-model"
        self.stream_calls: list[LLMStreamRequestOptions] = []
        self.generate_calls: list[LLMRequestOptions] = []
        self.closed = False

    def is_available(self) -> bool:
        return self.available

    async def generate(self, options: LLMRequestOptions) -> LLMResponse:
        self.generate_calls.append(options)
        outcome = self._next(self.generate_script)
        return LLMResponse(
            text=outcome, model=self.model, finish_reason="stop", usage=self.usage
        )

    async def generate_stream(self, options: LLMStreamRequestOptions) -> LLMResponse:
        self.stream_calls.append(options)
        chunks = self._next(self.stream_script)
        for chunk in chunks:
            options.on_token(chunk)
        return LLMResponse(
            text="".join(chunks), model=self.model, finish_reason="stop", usage=self.usage
        )

    async def aclose(self) -> None:
        self.closed = True

    def _next(self, script: list):
        if not script:
            raise ProviderError(f"{self.name} script exhausted", provider=self.name)
        outcome = script.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def fake_client():
    """Factory for scripted provider clients."""
    return FakeClient


@pytest.fixture
def numbered_list():
    """Build ``"1. Item 1\\n2. Item 2..."`` for a range of item numbers."""

    def build(start: int, end: int) -> str:
        return "\n".join(f"{i}. Item {i}" for i in range(start, end + 1))

    return build
