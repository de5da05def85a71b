"""OpenAI Chat Completions client.

Uses the official async SDK. SDK-level retries are disabled so the shared
RetryPolicy is the only retry layer.
"""

import logging
from typing import Any

import httpx
from openai import APIConnectionError, APIError, APIStatusError, AsyncOpenAI

from config import Settings, get_settings
from llm.base import BaseLLMClient, ConfigurationError, ProviderError
from llm.cancellation import check_cancelled, guarded
from llm.keys import describe_key, is_valid_api_key
from llm.retry import RetryPolicy
from llm.types import (
    LLMRequestOptions,
    LLMResponse,
    LLMStreamRequestOptions,
    TokenUsage,
)

logger = logging.getLogger(__name__)

OPENAI_KEY_PREFIX = "sk-"


class OpenAIClient(BaseLLMClient):
    """OpenAI LLM client via the Chat Completions API."""

    name = "openai"

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        retry_policy: RetryPolicy | None = None,
        client: AsyncOpenAI | None = None,
        timeout: httpx.Timeout | None = None,
    ) -> None:
        self._api_key = api_key or ""
        self.model = model
        self.base_url = base_url
        self.retry_policy = retry_policy or RetryPolicy()
        self._timeout = timeout or httpx.Timeout(timeout=60.0, connect=10.0)
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "OpenAIClient":
        settings = settings or get_settings()
        return cls(
            settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            retry_policy=RetryPolicy(
                max_retries=settings.llm_max_retries,
                base_delay=settings.llm_retry_base_delay,
            ),
            timeout=httpx.Timeout(
                timeout=settings.llm_request_timeout,
                connect=settings.llm_connect_timeout,
            ),
        )

    def is_available(self) -> bool:
        return is_valid_api_key(self._api_key, OPENAI_KEY_PREFIX)

    def credential_status(self) -> str:
        return describe_key(self._api_key, OPENAI_KEY_PREFIX)

    async def generate(self, options: LLMRequestOptions) -> LLMResponse:
        """Generate a response using OpenAI."""
        client = self._sdk()
        return await self.retry_policy.run(
            lambda: guarded(self._generate_once(client, options), options.cancellation),
            cancellation=options.cancellation,
            label="[OpenAI] generate",
        )

    async def generate_stream(self, options: LLMStreamRequestOptions) -> LLMResponse:
        """Stream a response using OpenAI."""
        client = self._sdk()
        return await self.retry_policy.run(
            lambda: guarded(self._stream_once(client, options), options.cancellation),
            cancellation=options.cancellation,
            label="[OpenAI] stream",
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()

    # --- Internals ---

    def _sdk(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    "OpenAI client not configured: missing OPENAI_API_KEY"
                )
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self.base_url,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    def _request_kwargs(self, options: LLMRequestOptions) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": options.system_prompt},
                {"role": "user", "content": options.user_prompt},
            ],
            "temperature": options.temperature,
            "max_completion_tokens": options.max_tokens,
        }

    async def _generate_once(
        self, client: AsyncOpenAI, options: LLMRequestOptions
    ) -> LLMResponse:
        try:
            response = await client.chat.completions.create(
                **self._request_kwargs(options)
            )
        except APIError as e:
            raise _provider_error(e) from e

        if not response.choices:
            raise ProviderError("OpenAI returned no choices", provider=self.name)

        choice = response.choices[0]
        usage = response.usage

        return LLMResponse(
            text=choice.message.content or "",
            model=response.model or self.model,
            finish_reason=choice.finish_reason,
            usage=TokenUsage(
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                total_tokens=usage.total_tokens,
            )
            if usage
            else None,
        )

    async def _stream_once(
        self, client: AsyncOpenAI, options: LLMStreamRequestOptions
    ) -> LLMResponse:
        parts: list[str] = []
        model = self.model
        finish_reason: str | None = None
        usage: TokenUsage | None = None

        try:
            stream = await client.chat.completions.create(
                **self._request_kwargs(options),
                stream=True,
                stream_options={"include_usage": True},
            )
        except APIError as e:
            raise _provider_error(e) from e

        try:
            async for chunk in stream:
                check_cancelled(options.cancellation)

                if chunk.model:
                    model = chunk.model
                if chunk.usage:
                    usage = TokenUsage(
                        prompt_tokens=chunk.usage.prompt_tokens,
                        completion_tokens=chunk.usage.completion_tokens,
                        total_tokens=chunk.usage.total_tokens,
                    )
                # The trailing usage chunk carries no choices
                if not chunk.choices:
                    continue

                choice = chunk.choices[0]
                content = choice.delta.content if choice.delta else None
                if content:
                    parts.append(content)
                    options.on_token(content)
                if choice.finish_reason:
                    finish_reason = choice.finish_reason
        except APIError as e:
            raise _provider_error(e, retryable=not parts) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"OpenAI stream interrupted: {e}",
                provider=self.name,
                retryable=not parts,
            ) from e
        finally:
            await stream.close()

        logger.debug(
            "[OpenAI] stream finished: model=%s finish_reason=%s chars=%d",
            model,
            finish_reason,
            sum(len(p) for p in parts),
        )
        return LLMResponse(
            text="".join(parts),
            model=model,
            finish_reason=finish_reason,
            usage=usage,
        )


def _provider_error(error: APIError, retryable: bool = True) -> ProviderError:
    if isinstance(error, APIStatusError):
        body = error.response.text
        return ProviderError(
            f"OpenAI API error {error.status_code}: {body}",
            provider=OpenAIClient.name,
            status_code=error.status_code,
            body=body,
            retryable=retryable,
        )
    if isinstance(error, APIConnectionError):
        return ProviderError(
            f"OpenAI connection failed: {error}",
            provider=OpenAIClient.name,
            retryable=retryable,
        )
    return ProviderError(
        f"OpenAI error: {error}", provider=OpenAIClient.name, retryable=retryable
    )
