"""Messaging abstraction protocols for decoupling from Facebook API.

The event dispatcher only depends on ``MessagingService``, so tests can
record outbound sends without mocking httpx.
"""

from typing import Protocol

import httpx
import logfire

from src.config import Settings
from src.constants import FACEBOOK_API_TIMEOUT_SECONDS, FACEBOOK_GRAPH_API_URL
from src.services.facebook_service import SendApiError, send_message


class MessagingService(Protocol):
    """Protocol for sending text messages to a user."""

    async def send_message(
        self,
        recipient_id: str,
        text: str,
    ) -> bool:
        """Send message to recipient.

        Args:
            recipient_id: Platform-specific user identifier
            text: Message text to send

        Returns:
            True if message sent successfully, False otherwise
        """
        ...


class FacebookMessagingService:
    """Facebook Messenger implementation of MessagingService.

    Example:
        >>> service = FacebookMessagingService(page_access_token="...")
        >>> await service.send_message("user123", "Hello!")
        True
    """

    def __init__(
        self,
        page_access_token: str,
        api_url: str = FACEBOOK_GRAPH_API_URL,
        timeout: float = FACEBOOK_API_TIMEOUT_SECONDS,
    ):
        if not page_access_token:
            raise ValueError("page_access_token is required")
        self._token = page_access_token
        self._api_url = api_url
        self._timeout = timeout

    async def send_message(self, recipient_id: str, text: str) -> bool:
        """Send message via Facebook Messenger.

        Failures are logged and reported as False; nothing is retried.
        """
        try:
            await send_message(
                page_access_token=self._token,
                recipient_id=recipient_id,
                text=text,
                api_url=self._api_url,
                timeout=self._timeout,
            )
            return True
        except (SendApiError, httpx.HTTPError) as e:
            logfire.error(
                "Send API call failed",
                recipient_id=recipient_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False


class MockMessagingService:
    """Mock implementation for testing.

    Example:
        >>> service = MockMessagingService()
        >>> await service.send_message("user123", "Test message")
        True
        >>> service.sent_messages
        [('user123', 'Test message')]
    """

    def __init__(self, should_fail_send: bool = False):
        self._should_fail_send = should_fail_send
        self.sent_messages: list[tuple[str, str]] = []

    async def send_message(self, recipient_id: str, text: str) -> bool:
        """Record sent message and return configured result."""
        self.sent_messages.append((recipient_id, text))
        return not self._should_fail_send


def get_messaging_service(settings: Settings) -> FacebookMessagingService:
    """Build the Facebook MessagingService from configuration."""
    return FacebookMessagingService(
        page_access_token=settings.facebook_page_access_token,
        api_url=settings.facebook_graph_api_url,
        timeout=settings.facebook_api_timeout_seconds,
    )
