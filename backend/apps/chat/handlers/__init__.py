"""Chat handlers."""

from apps.chat.handlers.complete_response import complete_response
from apps.chat.handlers.stream_response import stream_response

__all__ = [
    "stream_response",
    "complete_response",
]
