"""Incoming/outgoing Facebook Messenger models."""

import logging
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from src.constants import PAGE_OBJECT

logger = logging.getLogger(__name__)


class _MessengerModel(BaseModel):
    # Facebook adds fields over time; keep anything we don't model.
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


def _parse_each(model: type[BaseModel], items: Any, field: str) -> list[BaseModel]:
    """Validate list items one by one, dropping (and logging) the bad ones."""
    if items is None:
        return []
    if not isinstance(items, list):
        logger.info(
            "Ignoring %s: expected a list, got %s", field, type(items).__name__
        )
        return []

    parsed = []
    for index, item in enumerate(items):
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as e:
            logger.info(
                "Skipping unparseable %s[%d]: %s", field, index, e.errors()[0]["msg"]
            )
    return parsed


class Participant(_MessengerModel):
    """Sender or recipient of a messaging event."""

    id: str

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_id(cls, data: Any) -> Any:
        if isinstance(data, (str, int)):
            return {"id": data}
        return data


class IncomingMessage(_MessengerModel):
    """The ``message`` object of a messaging event.

    Its shape varies with the message type; only ``text`` is acted upon.
    """

    mid: str | None = None
    text: str | None = None
    attachments: list[dict] | None = None
    quick_reply: dict | None = None
    is_echo: bool | None = None
class MessagingEvent(_MessengerModel):
    """One conversational event (message, delivery receipt, postback...).

    ``sender`` is absent on some variants, e.g. checkbox-plugin ``optin``
    events which only carry ``optin.user_ref``.
    """

    sender: Participant | None = None
    recipient: Participant | None = None
    timestamp: int | None = None
    message: IncomingMessage | None = None

    @property
    def text(self) -> str | None:
        """Message text, or None for non-text events and payloads."""
        if self.message is None:
            return None
        return self.message.text


class PageEntry(_MessengerModel):
    """One page's batch of messaging events."""

    id: str | None = None
    time: int | None = None
    messaging: list[MessagingEvent] = Field(default_factory=list)

    @field_validator("messaging", mode="before")
    @classmethod
    def _drop_unparseable_events(cls, value: Any) -> list[BaseModel]:
        return _parse_each(MessagingEvent, value, "messaging")


class WebhookEnvelope(_MessengerModel):
    """Facebook webhook payload.

    Entries and events that fail validation are dropped individually so
    the rest of the batch is still delivered.
    """

    object: str
    entry: list[PageEntry] = Field(default_factory=list)

    @field_validator("entry", mode="before")
    @classmethod
    def _drop_unparseable_entries(cls, value: Any) -> list[BaseModel]:
        return _parse_each(PageEntry, value, "entry")

    @property
    def is_page(self) -> bool:
        return self.object == PAGE_OBJECT


class OutboundText(BaseModel):
    """Text body of a Send API request.

    The platform caps it at 640 utf-8 characters; longer text is sent as is
    and rejected by the Send API.
    """

    text: str


class OutboundMessage(BaseModel):
    """Send API request body."""

    recipient: Participant
    message: OutboundText

    @classmethod
    def text_reply(cls, recipient_id: str, text: str) -> "OutboundMessage":
        return cls(
            recipient=Participant(id=recipient_id),
            message=OutboundText(text=text),
        )
