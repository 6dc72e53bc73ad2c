"""Tests for modules/auth/relay.py."""

import hashlib
import hmac
from datetime import datetime, timezone

import pytest

from modules.auth.exceptions import BadRelaySignatureError
from modules.auth.relay import RelayRequestVerifier

PRIMARY = "relay-primary-secret-000000000000000001"
PREVIOUS = "relay-previous-secret-00000000000000002"
BODY = b'{"platform":"telegram","external_chat_id":"-100123"}'


def _sign(body: bytes, secret: str) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class TestRelayRequestVerifier:
    @pytest.fixture
    def verifier(self):
        return RelayRequestVerifier([PRIMARY, PREVIOUS])

    def test_valid_signature(self, verifier):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assertion = verifier.verify(BODY, _sign(BODY, PRIMARY), now=now)
        assert assertion.body_sha256 == hashlib.sha256(BODY).hexdigest()
        assert assertion.verified_at == now

    def test_previous_secret_is_accepted(self, verifier):
        verifier.verify(BODY, _sign(BODY, PREVIOUS))

    def test_sign_matches_verify(self, verifier):
        assert verifier.sign(BODY) == _sign(BODY, PRIMARY)
        verifier.verify(BODY, verifier.sign(BODY))

    def test_tampered_body_fails(self, verifier):
        signature = _sign(BODY, PRIMARY)
        with pytest.raises(BadRelaySignatureError) as exc_info:
            verifier.verify(BODY + b" ", signature)
        assert exc_info.value.reason == "bad-signature"

    @pytest.mark.parametrize("position", [0, 1, 17, len(BODY) // 2, len(BODY) - 1])
    @pytest.mark.parametrize("bit", [0, 7])
    def test_single_bit_flip_in_body_fails(self, verifier, position, bit):
        signature = _sign(BODY, PRIMARY)
        flipped = bytearray(BODY)
        flipped[position] ^= 1 << bit
        with pytest.raises(BadRelaySignatureError):
            verifier.verify(bytes(flipped), signature)

    @pytest.mark.parametrize("position", [0, 1, 15, 16, 31])
    @pytest.mark.parametrize("bit", [0, 7])
    def test_single_bit_flip_in_signature_fails(self, verifier, position, bit):
        digest = bytearray(hmac.new(PRIMARY.encode(), BODY, hashlib.sha256).digest())
        digest[position] ^= 1 << bit
        with pytest.raises(BadRelaySignatureError):
            verifier.verify(BODY, "sha256=" + digest.hex())

    def test_reserialized_body_fails(self, verifier):
        """The signature covers the bytes as sent, not an equivalent JSON document."""
        signature = _sign(BODY, PRIMARY)
        reformatted = b'{"platform": "telegram", "external_chat_id": "-100123"}'
        with pytest.raises(BadRelaySignatureError):
            verifier.verify(reformatted, signature)

    def test_unknown_secret_fails(self, verifier):
        with pytest.raises(BadRelaySignatureError):
            verifier.verify(BODY, _sign(BODY, "attacker-secret-000000000000000000"))

    @pytest.mark.parametrize("header", [None, "", "md5=abcd", "sha256=not-hex", "sha256="])
    def test_missing_or_malformed_header(self, verifier, header):
        with pytest.raises(BadRelaySignatureError):
            verifier.verify(BODY, header)

    def test_no_secrets_rejects_everything(self):
        with pytest.raises(BadRelaySignatureError):
            RelayRequestVerifier([]).verify(BODY, _sign(BODY, PRIMARY))
