"""Send messages to Facebook Graph API service."""

import time

import httpx
import logfire

from src.constants import FACEBOOK_API_TIMEOUT_SECONDS, FACEBOOK_GRAPH_API_URL
from src.logging_config import redact_query_params
from src.models.messenger import OutboundMessage


class SendApiError(Exception):
    """Raised when the Send API answers with anything other than 200."""

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"Send API call failed with status {status_code}")
        self.status_code = status_code
        self.body = body


async def send_message(
    page_access_token: str,
    recipient_id: str,
    text: str,
    *,
    api_url: str = FACEBOOK_GRAPH_API_URL,
    timeout: float = FACEBOOK_API_TIMEOUT_SECONDS,
) -> str | None:
    """
    Send a text message via the Facebook Send API.

    Args:
        page_access_token: Facebook Page access token
        recipient_id: Facebook user ID (PSID) to send message to
        text: Message text to send
        api_url: Graph API base URL
        timeout: Request timeout in seconds

    Returns:
        The ``message_id`` reported by Facebook, if any

    Raises:
        SendApiError: If the API responds with a non-200 status
        httpx.RequestError: On transport failures
    """
    start_time = time.time()

    url = f"{api_url.rstrip('/')}/me/messages"
    params = {"access_token": page_access_token}
    payload = OutboundMessage.text_reply(recipient_id, text)

    logfire.info(
        "Sending Facebook message",
        recipient_id=recipient_id,
        message_length=len(text),
        params=redact_query_params(params),
    )

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(
                url, params=params, json=payload.model_dump(mode="json")
            )
    except httpx.RequestError as e:
        elapsed = time.time() - start_time
        logfire.error(
            "Facebook API request error",
            recipient_id=recipient_id,
            error=str(e),
            error_type=type(e).__name__,
            response_time_ms=elapsed * 1000,
        )
        raise

    elapsed = time.time() - start_time

    if response.status_code != 200:
        logfire.error(
            "Facebook message send failed",
            recipient_id=recipient_id,
            status_code=response.status_code,
            response_body=response.text[:500],  # Limit response body length
            response_time_ms=elapsed * 1000,
        )
        raise SendApiError(response.status_code, response.text[:500])

    try:
        message_id = response.json().get("message_id")
    except ValueError:
        message_id = None

    logfire.info(
        "Facebook message sent successfully",
        recipient_id=recipient_id,
        message_id=message_id,
        response_time_ms=elapsed * 1000,
    )
    return message_id
