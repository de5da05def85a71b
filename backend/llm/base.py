"""Base LLM client interface.

Defines the contract that every provider client implements, and the error
taxonomy shared by clients and the orchestrator.
"""

from abc import ABC, abstractmethod

from llm.types import LLMRequestOptions, LLMResponse, LLMStreamRequestOptions


class LLMError(Exception):
    """Raised when LLM generation fails."""


class ConfigurationError(LLMError):
    """No usable provider: credentials missing or malformed."""


class CancellationError(LLMError):
    """The caller aborted the request.

    Never retried and never answered by a fallback provider.
    """


class ProviderError(LLMError):
    """A single provider failed (network, non-2xx status, bad payload).

    ``retryable`` is False once a stream has already fed fragments to the
    token sink: a second attempt would repeat them.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        status_code: int | None = None,
        body: str | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.body = body
        self.retryable = retryable


class BaseLLMClient(ABC):
    """Abstract base class for provider clients.

    The orchestrator only talks to this interface; adding a provider means
    implementing it and adding the instance to the ordered client list.
    """

    name: str

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the client has a well-formed credential.

        Must be local: no network I/O.
        """

    def credential_status(self) -> str:
        """Human-readable credential state for logs and health checks."""
        return "valid" if self.is_available() else "missing or invalid"

    async def aclose(self) -> None:
        """Release network resources held by the client."""

    @abstractmethod
    async def generate(self, options: LLMRequestOptions) -> LLMResponse:
        """Generate a single response.

        Args:
            options: Prompts, sampling parameters and cancellation token.

        Returns:
            The full response.

        Raises:
            CancellationError: If the token fires.
            ProviderError: If every attempt failed.
        """

    @abstractmethod
    async def generate_stream(self, options: LLMStreamRequestOptions) -> LLMResponse:
        """Stream a response, feeding each text fragment to ``options.on_token``.

        Returns:
            The response whose text is the concatenation of all fragments.
        """
