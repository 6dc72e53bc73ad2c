"""
Relay request signature verification.

The chat relay signs every request body with a shared secret and sends
``X-Relay-Signature: sha256=<hex>``. The signature is checked over the raw
bytes as received, never over a re-serialized body.
"""

import hashlib
import hmac
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from .exceptions import BadRelaySignatureError
from .models import RelayAssertion

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="


class RelayRequestVerifier:
    """Checks relay HMAC-SHA256 signatures against every configured secret."""

    def __init__(self, secrets: Sequence[str]):
        self._secrets = [s.encode("utf-8") for s in secrets if s]
        if not self._secrets:
            logger.warning("No chat relay secrets configured; relay requests will be rejected")

    def sign(self, raw_body: bytes) -> str:
        """Build the signature header value for ``raw_body`` using the primary secret."""
        if not self._secrets:
            raise RuntimeError("CHAT_RELAY_SECRETS must be configured to sign relay requests")
        digest = hmac.new(self._secrets[0], raw_body, hashlib.sha256).hexdigest()
        return f"{SIGNATURE_PREFIX}{digest}"

    def verify(
        self,
        raw_body: bytes,
        signature_header: Optional[str],
        now: Optional[datetime] = None,
    ) -> RelayAssertion:
        """
        Verify ``signature_header`` over ``raw_body``.

        Raises:
            BadRelaySignatureError: Header missing, malformed, or not matching
        """
        if not signature_header:
            raise BadRelaySignatureError("Missing relay signature")
        if not signature_header.startswith(SIGNATURE_PREFIX):
            raise BadRelaySignatureError("Relay signature has an unknown scheme")

        try:
            presented = bytes.fromhex(signature_header[len(SIGNATURE_PREFIX):])
        except ValueError:
            raise BadRelaySignatureError("Relay signature is not hex encoded")

        matched = False
        for secret in self._secrets:
            expected = hmac.new(secret, raw_body, hashlib.sha256).digest()
            if hmac.compare_digest(expected, presented):
                matched = True

        if not matched:
            raise BadRelaySignatureError()

        return RelayAssertion(
            body_sha256=hashlib.sha256(raw_body).hexdigest(),
            verified_at=now or datetime.now(timezone.utc),
        )
