"""Webhook subscription confirmation (the ``hub.*`` GET handshake)."""

from typing import NamedTuple

from src.constants import SUBSCRIBE_MODE


class SubscriptionResult(NamedTuple):
    """Outcome of a subscription handshake.

    Attributes:
        accepted: Whether the handshake matched the configured token.
        challenge: Value to echo back when accepted, None otherwise.
    """

    accepted: bool
    challenge: str | None


def confirm_subscription(
    mode: str | None,
    token: str | None,
    challenge: str | None,
    expected_token: str,
) -> SubscriptionResult:
    """Confirm a subscription request from the platform.

    Accepted only for ``hub.mode == "subscribe"`` with a matching verify
    token; the challenge is then echoed verbatim.
    """
    if mode == SUBSCRIBE_MODE and token is not None and token == expected_token:
        return SubscriptionResult(accepted=True, challenge=challenge or "")
    return SubscriptionResult(accepted=False, challenge=None)
