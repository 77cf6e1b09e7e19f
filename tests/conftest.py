"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Settings: mock_settings
2. Webhook payloads: sample_text_event, sample_envelope, signed_body
3. Messaging: mock_messaging_service, failing_messaging_service
4. Infrastructure: mock_logfire, test_client, respx_mock
"""

import json
import os
from contextlib import contextmanager
from unittest.mock import MagicMock, Mock

import pytest
import respx

from src.services.messaging_protocol import MockMessagingService
from src.services.signature_verifier import compute_signature

# Keep logfire quiet when tests emit spans without configuring it
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

TEST_APP_SECRET = "test-app-secret"
TEST_VERIFY_TOKEN = "test-verify-token"
TEST_PAGE_TOKEN = "test-page-token"
SEND_API_URL = "https://graph.facebook.com/v18.0/me/messages"


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking."""
    with respx.mock:
        yield respx


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def mock_settings(monkeypatch):
    """Mock application settings."""
    from src.config import Settings

    settings = Settings(
        facebook_app_secret=TEST_APP_SECRET,
        facebook_verify_token=TEST_VERIFY_TOKEN,
        facebook_page_access_token=TEST_PAGE_TOKEN,
        server_url="relay.example.test",
        env="local",
        logfire_token=None,
    )

    monkeypatch.setattr("src.config.get_settings", lambda: settings)
    # Patch where get_settings is used so request handlers see the mock
    monkeypatch.setattr("src.api.webhook.get_settings", lambda: settings)
    monkeypatch.setattr("src.main.get_settings", lambda: settings)
    return settings


# =============================================================================
# Webhook Payloads
# =============================================================================


@pytest.fixture
def sample_text_event():
    """A single text message event as Facebook delivers it."""
    return {
        "sender": {"id": "user-456"},
        "recipient": {"id": "page-123"},
        "timestamp": 1234567890,
        "message": {"mid": "mid.1", "text": "Hello there"},
    }


@pytest.fixture
def sample_envelope(sample_text_event):
    """A page envelope carrying one text event."""
    return {
        "object": "page",
        "entry": [
            {
                "id": "page-123",
                "time": 1234567890,
                "messaging": [sample_text_event],
            }
        ],
    }


@pytest.fixture
def signed_body():
    """Serialize a payload and sign it the way Facebook does."""

    def _sign(payload, secret: str = TEST_APP_SECRET) -> tuple[bytes, str]:
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        signature = compute_signature(secret.encode(), body)
        return body, f"sha1={signature}"

    return _sign


# =============================================================================
# Messaging Service Mocks
# =============================================================================


@pytest.fixture
def mock_messaging_service():
    """Messaging service that records every send and reports success."""
    return MockMessagingService()


@pytest.fixture
def failing_messaging_service():
    """Messaging service whose sends all report failure."""
    return MockMessagingService(should_fail_send=True)


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire for testing without actual logging.

    Patches the module-level logfire references in our code so calls
    can be asserted on.
    """

    @contextmanager
    def mock_span(*args, **kwargs):
        yield {}

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warning = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()

    for module in (
        "src.services.facebook_service",
        "src.services.messaging_protocol",
        "src.services.signature_verifier",
        "src.services.event_dispatcher",
        "src.services.task_tracker",
        "src.logging_config",
        "src.main",
    ):
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)

    return mock_logfire_module


@pytest.fixture
def test_client(mock_settings, mock_logfire):
    """FastAPI TestClient for E2E tests."""
    from fastapi.testclient import TestClient
    from src.main import app

    yield TestClient(app)
    app.dependency_overrides.clear()
