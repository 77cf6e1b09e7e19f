"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
from typing import Any

import logfire
from fastapi import FastAPI

from src.config import get_settings


def setup_logfire(app: FastAPI) -> None:
    """
    Initialize and configure Pydantic Logfire for observability.

    Sets up:
    - FastAPI instrumentation (request/response tracing)
    - Pydantic instrumentation (webhook envelope validation)
    - Environment-aware stdlib logging format
    """
    settings = get_settings()

    logfire_config: dict[str, Any] = {
        "environment": settings.env,
    }

    # Only ship to the cloud when a token is configured
    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token
    else:
        logfire_config["send_to_logfire"] = False

    logfire.configure(**logfire_config)

    logfire.instrument_fastapi(app)
    logfire.instrument_pydantic()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.env == "local":
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        # Logfire handles structured formatting
        logging.basicConfig(level=log_level, format="%(message)s")


# Send API query parameters that carry credentials
SECRET_QUERY_PARAMS = frozenset({"access_token", "appsecret_proof"})


def mask_secret(value: str | None) -> str:
    """Shorten a credential or digest to a recognisable, non-reusable hint.

    Values of 8 characters or fewer are masked completely; longer ones keep
    their first 4 characters and report their length.
    """
    if not value:
        return ""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...({len(value)} chars)"


def redact_query_params(params: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``params`` with credential values passed through mask_secret."""
    return {
        name: mask_secret(value) if name in SECRET_QUERY_PARAMS else value
        for name, value in params.items()
    }
