"""Tests for the OpenAI client with a stubbed SDK."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIConnectionError, AuthenticationError

from llm.base import ConfigurationError, ProviderError
from llm.openai import OpenAIClient
from llm.retry import RetryPolicy
from llm.types import LLMRequestOptions, LLMStreamRequestOptions

OPENAI_TEST_KEY = "sk-test-0123456789abcdef0123"
API_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


async def _no_sleep(_delay: float) -> None:
    return None


class FakeStream:
    """Async iterator over chunks with the SDK stream's ``close``.

    An exception in ``chunks`` is raised when iteration reaches it.
    """

    def __init__(self, chunks) -> None:
        self._chunks = list(chunks)
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self._chunks:
            if isinstance(item, BaseException):
                raise item
            yield item

    async def close(self) -> None:
        self.closed = True


def chunk(content=None, finish_reason=None, model="gpt-4o-mini", usage=None):
    choices = [
        SimpleNamespace(
            delta=SimpleNamespace(content=content), finish_reason=finish_reason
        )
    ]
    return SimpleNamespace(model=model, usage=usage, choices=choices)


def make_sdk(create: AsyncMock) -> MagicMock:
    sdk = MagicMock()
    sdk.chat.completions.create = create
    sdk.close = AsyncMock()
    return sdk


def make_client(sdk=None, api_key: str = OPENAI_TEST_KEY) -> OpenAIClient:
    return OpenAIClient(api_key, client=sdk, retry_policy=RetryPolicy(sleep=_no_sleep))


class TestOpenAIGenerate:
    """Tests for non-streaming generation."""

    @pytest.mark.asyncio
    async def test_generate_success(self):
        completion = SimpleNamespace(
            model="gpt-4o-mini-2024-07-18",
            choices=[
                SimpleNamespace(
                    message=SimpleNamespace(content="Bonjour"), finish_reason="stop"
                )
            ],
            usage=SimpleNamespace(prompt_tokens=5, completion_tokens=2, total_tokens=7),
        )
        create = AsyncMock(return_value=completion)

        response = await make_client(make_sdk(create)).generate(
            LLMRequestOptions(
                system_prompt="sys", user_prompt="salut", max_tokens=50, temperature=0.3
            )
        )

        assert response.text == "Bonjour"
        assert response.model == "gpt-4o-mini-2024-07-18"
        assert response.usage.total_tokens == 7

        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_completion_tokens"] == 50
        assert kwargs["temperature"] == 0.3
        assert kwargs["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "salut"},
        ]

    @pytest.mark.asyncio
    async def test_status_error_maps_to_provider_error(self):
        error = AuthenticationError(
            "Incorrect API key provided",
            response=httpx.Response(401, request=API_REQUEST, text="bad key"),
            body=None,
        )
        create = AsyncMock(side_effect=error)

        with pytest.raises(ProviderError) as exc_info:
            await make_client(make_sdk(create)).generate(
                LLMRequestOptions(system_prompt="s", user_prompt="u")
            )

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "bad key"
        assert exc_info.value.provider == "openai"
        assert create.await_count == 2

    @pytest.mark.asyncio
    async def test_connection_error(self):
        create = AsyncMock(side_effect=APIConnectionError(request=API_REQUEST))

        with pytest.raises(ProviderError, match="connection failed"):
            await make_client(make_sdk(create)).generate(
                LLMRequestOptions(system_prompt="s", user_prompt="u")
            )

    @pytest.mark.asyncio
    async def test_missing_key_raises_configuration_error(self):
        with pytest.raises(ConfigurationError):
            await make_client(api_key="").generate(
                LLMRequestOptions(system_prompt="s", user_prompt="u")
            )

    def test_availability(self):
        assert make_client().is_available() is True
        assert make_client(api_key="sk-short").is_available() is False


class TestOpenAIStream:
    """Tests for streaming generation."""

    @pytest.mark.asyncio
    async def test_stream_forwards_content(self):
        stream = FakeStream(
            [
                chunk(content="1. "),
                chunk(content=None),
                chunk(content="Shahada", finish_reason="stop"),
                SimpleNamespace(
                    model="gpt-4o-mini",
                    usage=SimpleNamespace(
                        prompt_tokens=4, completion_tokens=2, total_tokens=6
                    ),
                    choices=[],
                ),
            ]
        )
        create = AsyncMock(return_value=stream)
        tokens: list[str] = []

        response = await make_client(make_sdk(create)).generate_stream(
            LLMStreamRequestOptions(system_prompt="s", user_prompt="u", on_token=tokens.append)
        )

        assert tokens == ["1. ", "Shahada"]
        assert response.text == "1. Shahada"
        assert response.finish_reason == "stop"
        assert response.usage.total_tokens == 6
        assert stream.closed is True
        assert create.await_args.kwargs["stream"] is True

    @pytest.mark.asyncio
    async def test_transport_error_after_tokens_is_not_retried(self):
        stream = FakeStream([chunk(content="1. Ar-"), httpx.ReadError("connection reset")])
        create = AsyncMock(return_value=stream)
        tokens: list[str] = []

        with pytest.raises(ProviderError, match="stream interrupted") as exc_info:
            await make_client(make_sdk(create)).generate_stream(
                LLMStreamRequestOptions(system_prompt="s", user_prompt="u", on_token=tokens.append)
            )

        assert exc_info.value.retryable is False
        assert exc_info.value.provider == "openai"
        assert tokens == ["1. Ar-"]
        assert create.await_count == 1
        assert stream.closed is True

    @pytest.mark.asyncio
    async def test_transport_error_before_tokens_is_retried(self):
        create = AsyncMock(
            side_effect=[
                FakeStream([httpx.RemoteProtocolError("peer closed connection")]),
                FakeStream([chunk(content="1. "), chunk(content="Shahada", finish_reason="stop")]),
            ]
        )
        tokens: list[str] = []

        response = await make_client(make_sdk(create)).generate_stream(
            LLMStreamRequestOptions(system_prompt="s", user_prompt="u", on_token=tokens.append)
        )

        assert create.await_count == 2
        assert tokens == ["1. ", "Shahada"]
        assert response.text == "".join(tokens)
