"""Configuration and settings for the Ansar chat backend.

Uses Pydantic Settings so every value can come from the environment or a
``.env`` file. Provider keys are optional: a missing or malformed key simply
makes that provider unavailable.
"""

import logging
import sys
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Keys (optional - an absent key disables the provider)
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    openai_api_key: str = Field(default="", description="OpenAI API key")

    # Application Settings
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # Claude
    claude_model: str = Field(
        default="claude-sonnet-4-20250514", description="Claude model for chat"
    )
    anthropic_api_url: str = Field(
        default="https://api.anthropic.com/v1/messages",
        description="Anthropic Messages API endpoint",
    )
    anthropic_version: str = Field(
        default="2023-06-01", description="Value of the anthropic-version header"
    )

    # OpenAI
    openai_model: str = Field(default="gpt-4o-mini", description="OpenAI chat model")
    openai_base_url: str | None = Field(
        default=None, description="Override for the OpenAI API base URL"
    )

    # Retry / transport
    llm_max_retries: int = Field(
        default=1, ge=0, description="Extra attempts per provider call"
    )
    llm_retry_base_delay: float = Field(
        default=0.8, ge=0, description="Backoff base in seconds (linear)"
    )
    llm_request_timeout: float = Field(
        default=60.0, description="Total HTTP timeout for a provider call"
    )
    llm_connect_timeout: float = Field(
        default=10.0, description="HTTP connect timeout for a provider call"
    )

    # CORS
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:8081",
            "http://localhost:19006",
            "http://127.0.0.1:8081",
            "http://127.0.0.1:19006",
        ],
        description="Origins allowed to call the API (JSON list in the environment)",
    )

    # Rate limiting (chat endpoints)
    rate_limit_per_minute: int = Field(default=20, description="Chat requests per minute")
    rate_limit_per_hour: int = Field(default=200, description="Chat requests per hour")
    rate_limit_burst: int = Field(
        default=5, description="Chat requests allowed within 10 seconds"
    )

    @field_validator("anthropic_api_key", "openai_api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Trim stray whitespace copied along with the key."""
        return (v or "").strip()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Origins come from settings; see get_cors_config
CORS_CONFIG: dict[str, Any] = {
    "allow_credentials": True,
    "allow_methods": ["GET", "POST", "OPTIONS"],
    "allow_headers": ["*"],
    "expose_headers": ["*"],
    "max_age": 600,
}

# FastAPI App Configuration
APP_CONFIG: dict[str, Any] = {
    "title": "Ansar",
    "description": (
        "Islamic knowledge assistant backend. Streams answers from Claude or "
        "OpenAI with provider fallback and completeness checks for canonical lists."
    ),
    "version": "0.1.0",
    "docs_url": "/api/docs",
    "redoc_url": "/api/redoc",
    "openapi_url": "/api/openapi.json",
    "openapi_tags": [
        {
            "name": "Health",
            "description": "Health check and provider status",
        },
        {
            "name": "Chat",
            "description": "Streaming and non-streaming assistant answers",
        },
    ],
}


def get_app_config() -> dict[str, Any]:
    """Get FastAPI application configuration."""
    return APP_CONFIG.copy()


def get_cors_config() -> dict[str, Any]:
    """CORS middleware kwargs with the configured origins."""
    return {**CORS_CONFIG, "allow_origins": list(get_settings().cors_origins)}
