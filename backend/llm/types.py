"""Shared types and dataclasses for the LLM layer.

Everything here is request-scoped: built per chat call and discarded after.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from llm.cancellation import CancellationToken

TokenSink = Callable[[str], None]


class Language(str, Enum):
    """Languages the assistant answers in."""

    AR = "ar"
    FR = "fr"
    EN = "en"


class RagMode(str, Enum):
    """How retrieved context was gathered by the caller."""

    GENERAL = "general"
    TOPIC_DETAIL = "topic_detail"


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported by a provider."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class LLMRequestOptions:
    """A single provider call."""

    system_prompt: str
    user_prompt: str
    max_tokens: int = 4096
    temperature: float = 0.4
    cancellation: "CancellationToken | None" = None


@dataclass(frozen=True)
class LLMStreamRequestOptions(LLMRequestOptions):
    """A streaming provider call.

    ``on_token`` is invoked synchronously for each text fragment, in arrival
    order, on the task driving the call.
    """

    on_token: TokenSink = field(default=lambda _token: None)


@dataclass
class LLMResponse:
    """Result of a provider call."""

    text: str
    model: str
    finish_reason: str | None = None
    usage: TokenUsage | None = None


@dataclass(frozen=True)
class CompletenessInfo:
    """Completeness metadata for a user query.

    ``expected_count`` is None in generic mode (enumerate everything, size
    unknown) and a fixed cardinality for canonical lists.
    """

    is_list_request: bool
    expected_count: int | None
    label: str | None
    prompt_augmentation: str


@dataclass(frozen=True)
class CompletenessCheck:
    """Outcome of counting numbered items in a response."""

    item_count: int
    is_complete: bool


@dataclass
class ChatResponse:
    """Final answer returned to the UI for one chat turn."""

    text: str
    language: Language
    model: str
    sources: str
    arabic_text: str | None = None
    translation: str | None = None
    usage: TokenUsage | None = None
