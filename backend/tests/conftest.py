"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import hashlib
import hmac
from datetime import datetime, timezone, timedelta

import jwt  # PyJWT
import pytest

from api.dependencies import ServiceContainer, reset_container
from shared.config import Settings


# Test secrets (only for testing). HS256 keys shorter than 32 bytes draw warnings from PyJWT.
TEST_JWT_SECRET = "test-jwt-secret-for-ledgerly-tests-only-0001"
TEST_RELAY_SECRET = "test-relay-secret-for-ledgerly-tests-only-01"


def create_test_token(
    user_id: str = "test-user-123",
    expired: bool = False,
    secret: str = TEST_JWT_SECRET,
    typ: str = "web",
) -> str:
    """
    Create a web bearer token for authentication.

    Args:
        user_id: Subject of the token
        expired: If True, creates an expired token
        secret: Signing secret
        typ: Token type marker
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "typ": typ,
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def sign_relay_body(body: bytes, secret: str = TEST_RELAY_SECRET) -> str:
    """Build an X-Relay-Signature header value for ``body``."""
    return "sha256=" + hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with test secrets and in-memory storage."""
    return Settings(
        storage_backend="memory",
        jwt_secrets=[TEST_JWT_SECRET],
        chat_relay_secrets=[TEST_RELAY_SECRET],
        chat_bind_url="http://testserver/chat-bind",
    )


@pytest.fixture
def container(test_settings, monkeypatch) -> ServiceContainer:
    """A fresh service container installed as the app's singleton."""
    reset_container()
    container = ServiceContainer(test_settings)
    monkeypatch.setattr("api.dependencies._container", container)
    yield container
    reset_container()


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def auth_token(test_user_id: str) -> str:
    """Create a valid auth token for testing."""
    return create_test_token(user_id=test_user_id)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}
