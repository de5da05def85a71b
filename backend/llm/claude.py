"""Anthropic Claude client over the raw Messages API.

Streaming is parsed by hand from the SSE body so only text deltas reach the
token sink and malformed frames can be skipped instead of failing the call.
"""

import logging
from typing import Any

import httpx

from config import Settings, get_settings
from llm.base import BaseLLMClient, ConfigurationError, ProviderError
from llm.cancellation import check_cancelled, guarded
from llm.keys import describe_key, is_valid_api_key
from llm.retry import RetryPolicy
from llm.sse import decode_data_line
from llm.types import (
    LLMRequestOptions,
    LLMResponse,
    LLMStreamRequestOptions,
    TokenUsage,
)

logger = logging.getLogger(__name__)

CLAUDE_KEY_PREFIX = "sk-ant-"


class ClaudeClient(BaseLLMClient):
    """Claude LLM client via the Anthropic Messages API."""

    name = "claude"

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = "claude-sonnet-4-20250514",
        api_url: str = "https://api.anthropic.com/v1/messages",
        api_version: str = "2023-06-01",
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | None = None,
    ) -> None:
        self._api_key = api_key or ""
        self.model = model
        self.api_url = api_url
        self.api_version = api_version
        self.retry_policy = retry_policy or RetryPolicy()
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout or httpx.Timeout(timeout=60.0, connect=10.0)
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ClaudeClient":
        settings = settings or get_settings()
        return cls(
            settings.anthropic_api_key,
            model=settings.claude_model,
            api_url=settings.anthropic_api_url,
            api_version=settings.anthropic_version,
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
        return is_valid_api_key(self._api_key, CLAUDE_KEY_PREFIX)

    def credential_status(self) -> str:
        return describe_key(self._api_key, CLAUDE_KEY_PREFIX)

    async def generate(self, options: LLMRequestOptions) -> LLMResponse:
        """Generate a response using Claude."""
        self._require_key()
        return await self.retry_policy.run(
            lambda: guarded(self._generate_once(options), options.cancellation),
            cancellation=options.cancellation,
            label="[Claude] generate",
        )

    async def generate_stream(self, options: LLMStreamRequestOptions) -> LLMResponse:
        """Stream a response using Claude."""
        self._require_key()
        return await self.retry_policy.run(
            lambda: guarded(self._stream_once(options), options.cancellation),
            cancellation=options.cancellation,
            label="[Claude] stream",
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- Internals ---

    def _require_key(self) -> str:
        if not self._api_key:
            raise ConfigurationError(
                "Claude client not configured: missing ANTHROPIC_API_KEY"
            )
        return self._api_key

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self._api_key,
            "anthropic-version": self.api_version,
        }

    def _payload(self, options: LLMRequestOptions, *, stream: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "system": options.system_prompt,
            "messages": [{"role": "user", "content": options.user_prompt}],
        }
        if stream:
            payload["stream"] = True
        return payload

    async def _generate_once(self, options: LLMRequestOptions) -> LLMResponse:
        try:
            response = await self._http.post(
                self.api_url,
                headers=self._headers(),
                json=self._payload(options, stream=False),
            )
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Anthropic request failed: {e}", provider=self.name
            ) from e

        if not response.is_success:
            raise _status_error(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                "Anthropic returned a non-JSON body",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            ) from e

        text_block = next(
            (b for b in data.get("content") or [] if b.get("type") == "text"), None
        )
        usage = data.get("usage")

        return LLMResponse(
            text=(text_block or {}).get("text", ""),
            model=data.get("model") or self.model,
            finish_reason=data.get("stop_reason"),
            usage=_usage(usage.get("input_tokens"), usage.get("output_tokens"))
            if usage
            else None,
        )

    async def _stream_once(self, options: LLMStreamRequestOptions) -> LLMResponse:
        parts: list[str] = []
        model = self.model
        finish_reason: str | None = None
        input_tokens: int | None = None
        output_tokens: int | None = None

        request = self._http.build_request(
            "POST",
            self.api_url,
            headers=self._headers(),
            json=self._payload(options, stream=True),
        )
        try:
            response = await self._http.send(request, stream=True)
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Anthropic request failed: {e}", provider=self.name
            ) from e

        try:
            if not response.is_success:
                body = (await response.aread()).decode("utf-8", errors="replace")
                raise _status_error(response.status_code, body)

            async for line in response.aiter_lines():
                check_cancelled(options.cancellation)

                event = decode_data_line(line)
                if event is None:
                    continue

                event_type = event.get("type")
                if event_type == "content_block_delta":
                    delta_text = (event.get("delta") or {}).get("text")
                    if delta_text:
                        parts.append(delta_text)
                        options.on_token(delta_text)
                elif event_type == "message_start":
                    message = event.get("message") or {}
                    model = message.get("model") or model
                    input_tokens = (message.get("usage") or {}).get("input_tokens")
                elif event_type == "message_delta":
                    finish_reason = (event.get("delta") or {}).get(
                        "stop_reason"
                    ) or finish_reason
                    output_tokens = (event.get("usage") or {}).get(
                        "output_tokens", output_tokens
                    )
                elif event_type == "error":
                    error = event.get("error") or {}
                    raise ProviderError(
                        f"Anthropic stream error: {error.get('message', error)}",
                        provider=self.name,
                    )
        except ProviderError as e:
            e.retryable = not parts
            raise
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Anthropic stream interrupted: {e}",
                provider=self.name,
                retryable=not parts,
            ) from e
        finally:
            await response.aclose()

        logger.debug(
            "[Claude] stream finished: model=%s stop_reason=%s chars=%d",
            model,
            finish_reason,
            sum(len(p) for p in parts),
        )
        return LLMResponse(
            text="".join(parts),
            model=model,
            finish_reason=finish_reason,
            usage=_usage(input_tokens, output_tokens)
            if output_tokens is not None
            else None,
        )


def _status_error(status_code: int, body: str) -> ProviderError:
    return ProviderError(
        f"Anthropic API error {status_code}: {body}",
        provider=ClaudeClient.name,
        status_code=status_code,
        body=body,
    )


def _usage(input_tokens: int | None, output_tokens: int | None) -> TokenUsage:
    prompt = input_tokens or 0
    completion = output_tokens or 0
    return TokenUsage(
        prompt_tokens=prompt,
        completion_tokens=completion,
        total_tokens=prompt + completion,
    )
