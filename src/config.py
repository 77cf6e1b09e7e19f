"""Application configuration using Pydantic BaseSettings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import (
    DEFAULT_PORT,
    FACEBOOK_API_TIMEOUT_SECONDS,
    FACEBOOK_GRAPH_API_URL,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    # Facebook Configuration
    facebook_app_secret: str = Field(
        ..., min_length=1, description="App secret used to sign webhook payloads"
    )
    facebook_verify_token: str = Field(
        ..., min_length=1, description="Webhook verification token"
    )
    facebook_page_access_token: str = Field(
        ..., min_length=1, description="Facebook Page access token"
    )
    facebook_graph_api_url: str = Field(
        default=FACEBOOK_GRAPH_API_URL,
        description="Graph API base URL (Send API is <url>/me/messages)",
    )
    facebook_api_timeout_seconds: float = Field(
        default=FACEBOOK_API_TIMEOUT_SECONDS,
        description="Timeout for Facebook Graph API calls (seconds)",
    )

    # Public hostname, without protocol (e.g. abc123.ngrok.io)
    server_url: str = Field(
        ..., min_length=1, description="Public server hostname, no protocol"
    )
    port: int = Field(default=DEFAULT_PORT, description="Port to listen on")

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )

    @property
    def image_base_path(self) -> str:
        """Public base URL for screenshot assets.

        The protocol is hard coded so a misconfigured hostname cannot
        downgrade it.
        """
        return f"https://{self.server_url}/assets/screenshots/"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_settings_or_exit() -> Settings:
    """Load settings, exiting the process when required values are missing.

    Called before the server binds a listener so a misconfigured relay never
    starts serving.

    Raises:
        SystemExit: With code 1 when validation fails.
    """
    try:
        return get_settings()
    except ValidationError as e:
        missing = sorted(
            ".".join(str(part) for part in error["loc"]) for error in e.errors()
        )
        logger.error("Missing config values: %s", ", ".join(missing))
        raise SystemExit(1) from e
