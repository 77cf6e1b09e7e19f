"""Webhook request signature verification.

Facebook signs every webhook delivery with the App Secret and sends the
result in the ``X-Hub-Signature`` header as ``sha1=<hex digest>``. The HMAC
is computed over the exact bytes of the request body, so verification must
run on the raw body before it is parsed as JSON.

See https://developers.facebook.com/docs/graph-api/webhooks#setup
"""

import hashlib
import hmac
from enum import Enum
from typing import NamedTuple

import logfire

from src.logging_config import mask_secret

SUPPORTED_METHODS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
}


class TrustFailure(str, Enum):
    """Reasons a webhook payload cannot be trusted."""

    MISSING_SIGNATURE = "missing_signature"
    MALFORMED_SIGNATURE = "malformed_signature"
    UNSUPPORTED_METHOD = "unsupported_method"
    SIGNATURE_MISMATCH = "signature_mismatch"


class VerificationResult(NamedTuple):
    """Result of signature verification.

    Attributes:
        is_valid: Whether the signature matched the body.
        failure: Why verification failed, None on success.
        error_message: Human-readable explanation if verification failed.
    """

    is_valid: bool
    failure: TrustFailure | None
    error_message: str | None


_VALID = VerificationResult(is_valid=True, failure=None, error_message=None)


def compute_signature(secret: bytes, raw_body: bytes, method: str = "sha1") -> str:
    """Return the hex HMAC of ``raw_body`` keyed with ``secret``.

    Raises:
        KeyError: If ``method`` is not a supported digest.
    """
    digestmod = SUPPORTED_METHODS[method]
    return hmac.new(secret, raw_body, digestmod).hexdigest()


class SignatureVerifier:
    """Check ``X-Hub-Signature`` headers against the App Secret.

    Verification never raises on an untrusted payload; callers inspect the
    returned ``VerificationResult`` and reject the request themselves.
    """

    def __init__(self, app_secret: str | bytes):
        if not app_secret:
            raise ValueError("app_secret is required")
        if isinstance(app_secret, str):
            app_secret = app_secret.encode("utf-8")
        self._secret = app_secret

    def verify(
        self, raw_body: bytes, signature_header: str | None
    ) -> VerificationResult:
        """Verify a claimed signature for a raw request body.

        Args:
            raw_body: Request body exactly as received
            signature_header: Value of the signature header, None if absent

        Returns:
            VerificationResult describing the outcome
        """
        if not signature_header:
            return self._fail(
                TrustFailure.MISSING_SIGNATURE, "Signature header is missing"
            )

        method, sep, claimed = signature_header.partition("=")
        if not sep or not claimed:
            return self._fail(
                TrustFailure.MALFORMED_SIGNATURE,
                "Signature header must look like '<method>=<hex digest>'",
            )

        method = method.strip().lower()
        if method not in SUPPORTED_METHODS:
            return self._fail(
                TrustFailure.UNSUPPORTED_METHOD,
                f"Unsupported signature method: {method!r}",
            )

        expected = compute_signature(self._secret, raw_body, method)
        if not hmac.compare_digest(
            expected.encode("ascii"), claimed.encode("utf-8", "replace")
        ):
            logfire.warning(
                "Webhook signature mismatch",
                method=method,
                received=mask_secret(claimed),
                body_length=len(raw_body),
            )
            return self._fail(
                TrustFailure.SIGNATURE_MISMATCH,
                "Couldn't validate the request signature",
            )

        return _VALID

    @staticmethod
    def _fail(failure: TrustFailure, message: str) -> VerificationResult:
        return VerificationResult(
            is_valid=False, failure=failure, error_message=message
        )
