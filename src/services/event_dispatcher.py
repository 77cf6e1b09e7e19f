"""Webhook event dispatch.

Walks a verified webhook envelope and echoes the text of every message
event back to its sender. Each echo runs as its own asyncio task: the
webhook handler never waits on them, and one failed send does not affect
the rest of the batch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterator

import logfire

from src.models.messenger import MessagingEvent, WebhookEnvelope
from src.services.messaging_protocol import MessagingService

logger = logging.getLogger(__name__)


def extract_text_events(
    envelope: WebhookEnvelope,
) -> Iterator[tuple[MessagingEvent, str]]:
    """Yield ``(event, text)`` for each actionable event, in delivery order.

    Entries from multiple pages may be batched in one envelope. Events
    without a ``message`` (delivery receipts, postbacks) are logged and
    skipped; messages without text (attachments) are skipped silently.
    """
    if not envelope.is_page:
        return

    for entry in envelope.entry:
        for event in entry.messaging:
            if event.sender is None:
                logger.info(
                    "Skipping event without a sender on page %s", entry.id
                )
                continue

            if event.message is None:
                logger.info(
                    "Not prepared to handle this event type from %s",
                    event.sender.id,
                )
                continue

            text = event.text
            if not text:
                logger.debug(
                    "Skipping non-text message %s from %s",
                    event.message.mid,
                    event.sender.id,
                )
                continue

            yield event, text


class EventDispatcher:
    """Route text messages from a webhook envelope to the Send API.

    Example:
        >>> dispatcher = EventDispatcher(MockMessagingService())
        >>> tasks = dispatcher.dispatch(envelope)
        >>> await asyncio.gather(*tasks)
        [True]
    """

    def __init__(
        self,
        messenger: MessagingService,
        task_tracker: Callable[[asyncio.Task], None] | None = None,
    ):
        """Initialize with the messaging service used for replies.

        Args:
            messenger: Service performing the outbound sends
            task_tracker: Optional hook receiving every scheduled task
        """
        self._messenger = messenger
        self._task_tracker = task_tracker

    def dispatch(self, envelope: WebhookEnvelope) -> list[asyncio.Task[bool]]:
        """Schedule one echo per text message event.

        Must be called from a running event loop. The returned tasks resolve
        to True when the send succeeded and False when it failed.
        """
        tasks: list[asyncio.Task[bool]] = []

        for event, text in extract_text_events(envelope):
            logfire.info(
                "Message received from page",
                sender_id=event.sender.id,
                page_id=event.recipient.id if event.recipient else None,
                timestamp=event.timestamp,
                message_length=len(text),
            )
            task = asyncio.create_task(
                self._messenger.send_message(event.sender.id, text)
            )
            if self._task_tracker is not None:
                self._task_tracker(task)
            tasks.append(task)

        return tasks
