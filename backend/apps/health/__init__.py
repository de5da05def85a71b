"""Health module - service and provider status."""

from apps.health.routes import router

__all__ = ["router"]
