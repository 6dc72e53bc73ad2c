"""
Web bearer token verification and issuance.

Tokens are HS256 JWTs carrying ``sub``, ``typ`` and ``exp``. Verification
is a pure function of the credential, the clock and the configured secrets.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import jwt
from pydantic import ValidationError as PydanticValidationError

from .exceptions import (
    InvalidSignatureError,
    ExpiredTokenError,
    MalformedTokenError,
)
from .models import IssuedToken, WebTokenClaims, WEB_TOKEN_TYPE

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenAuthenticator:
    """
    Verifies web bearer tokens against an ordered list of secrets.

    Any listed secret may verify a token. New tokens are always signed
    with the first one, so rotating means prepending the new secret and
    dropping the old one once outstanding tokens have expired.
    """

    def __init__(self, secrets: Sequence[str], ttl_seconds: int = 7 * 24 * 60 * 60):
        self._secrets = [s for s in secrets if s]
        self._ttl = timedelta(seconds=ttl_seconds)
        if not self._secrets:
            logger.warning("No JWT secrets configured; every bearer token will be rejected")

    def authenticate(self, credential: str, now: Optional[datetime] = None) -> str:
        """
        Verify a bearer token and return the user ID it was issued to.

        Raises:
            MalformedTokenError: Token is not a decodable web token
            InvalidSignatureError: No configured secret verifies the token
            ExpiredTokenError: Token is authentic but past its expiry
        """
        if not credential:
            raise MalformedTokenError("Empty bearer token")

        now = now or datetime.now(timezone.utc)
        payload = self._decode(credential)

        try:
            claims = WebTokenClaims.model_validate(payload)
        except PydanticValidationError:
            raise MalformedTokenError("Token is missing required web claims")

        if now.timestamp() >= claims.exp:
            raise ExpiredTokenError()

        return claims.sub

    def issue(self, user_id: str, now: Optional[datetime] = None) -> IssuedToken:
        """Mint a web token for ``user_id`` signed with the primary secret."""
        if not self._secrets:
            raise RuntimeError("JWT_SECRETS must be configured to issue tokens")

        now = now or datetime.now(timezone.utc)
        expires_at = now + self._ttl
        payload = {
            "sub": user_id,
            "typ": WEB_TOKEN_TYPE,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secrets[0], algorithm=ALGORITHM)
        return IssuedToken(token=token, expires_at=expires_at)

    def _decode(self, credential: str) -> dict:
        # Time-based claims are checked against the caller's clock after decoding.
        options = {
            "verify_exp": False,
            "verify_iat": False,
            "verify_nbf": False,
            "require": ["exp", "sub", "typ"],
        }

        for secret in self._secrets:
            try:
                return jwt.decode(credential, secret, algorithms=[ALGORITHM], options=options)
            except jwt.InvalidSignatureError:
                continue
            except jwt.InvalidTokenError as e:
                raise MalformedTokenError(str(e))

        raise InvalidSignatureError()
