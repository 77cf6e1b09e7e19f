"""Facebook webhook endpoints.

The GET handler answers the subscription handshake. The POST handler
verifies the request signature against the raw body, parses the envelope
and hands it to the EventDispatcher. Outbound replies are scheduled as
background tasks; the webhook response never waits on them.
"""

import json
import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from src.config import get_settings
from src.constants import PAGE_OBJECT, SIGNATURE_HEADER
from src.models.messenger import WebhookEnvelope
from src.services.event_dispatcher import EventDispatcher
from src.services.messaging_protocol import get_messaging_service
from src.services.signature_verifier import SignatureVerifier
from src.services.subscription import confirm_subscription
from src.services.task_tracker import track_background_task

logger = logging.getLogger(__name__)
router = APIRouter()


def get_signature_verifier() -> SignatureVerifier:
    """Build the signature verifier from the configured App Secret."""
    return SignatureVerifier(get_settings().facebook_app_secret)


def get_event_dispatcher() -> EventDispatcher:
    """Build the dispatcher wired to the Facebook Send API."""
    return EventDispatcher(
        get_messaging_service(get_settings()),
        task_tracker=track_background_task,
    )


@router.get("")
async def verify_webhook(request: Request):
    """Facebook webhook verification endpoint."""
    settings = get_settings()

    result = confirm_subscription(
        mode=request.query_params.get("hub.mode"),
        token=request.query_params.get("hub.verify_token"),
        challenge=request.query_params.get("hub.challenge"),
        expected_token=settings.facebook_verify_token,
    )

    if result.accepted:
        logger.info("Webhook verified successfully")
        return PlainTextResponse(result.challenge)

    logger.error("Failed validation. Verify token mismatch.")
    return Response(status_code=403)


@router.post("")
async def handle_webhook(
    request: Request,
    verifier: SignatureVerifier = Depends(get_signature_verifier),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    """Handle incoming Facebook Messenger webhook events."""
    # The signature covers the exact bytes received, so read them unparsed
    raw_body = await request.body()

    verification = verifier.verify(raw_body, request.headers.get(SIGNATURE_HEADER))
    if not verification.is_valid:
        logger.warning(
            "Rejected webhook: %s (%s)",
            verification.failure.value,
            verification.error_message,
        )
        return JSONResponse(
            status_code=403, content={"detail": verification.error_message}
        )

    try:
        payload = json.loads(raw_body)
    except ValueError as e:
        logger.warning("Malformed webhook payload: %s", e)
        return JSONResponse(status_code=400, content={"detail": "Malformed payload"})

    if not isinstance(payload, dict):
        logger.warning(
            "Webhook payload is a JSON %s, not an object", type(payload).__name__
        )
        return JSONResponse(status_code=400, content={"detail": "Malformed payload"})

    # Other subscriptions may use shapes we never model; drop them unparsed
    if payload.get("object") != PAGE_OBJECT:
        logger.info("Ignoring webhook for object %r", payload.get("object"))
        return {"status": "ignored"}

    envelope = WebhookEnvelope.model_validate(payload)
    tasks = dispatcher.dispatch(envelope)
    logger.info("Message received, scheduled %d replies", len(tasks))

    return {"status": "ok"}
