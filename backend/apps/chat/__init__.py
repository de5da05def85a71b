"""Chat module - streaming and non-streaming answers."""

from apps.chat.routes import router

__all__ = ["router"]
