"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, EmailStr


WEB_TOKEN_TYPE = "web"


class WebTokenClaims(BaseModel):
    """
    Decoded payload of a web session token.

    Only tokens whose ``typ`` is "web" are accepted by the bearer path.
    """

    sub: str = Field(..., min_length=1, description="Subject (user ID)")
    typ: Literal["web"] = Field(..., description="Token type marker")
    exp: int = Field(..., description="Expiration timestamp")
    iat: Optional[int] = Field(None, description="Issued at timestamp")


class IssuedToken(BaseModel):
    """A freshly minted web token and its expiry."""

    token: str
    expires_at: datetime

    model_config = {"frozen": True}


class RelayAssertion(BaseModel):
    """
    Proof that a request body was signed by the trusted chat relay.

    Carries no identity. The chat identity comes from the binding header.
    """

    body_sha256: str = Field(..., description="Hex digest of the verified body")
    verified_at: datetime

    model_config = {"frozen": True}


class User(BaseModel):
    """A stored account. ``password_hash`` never leaves the service layer."""

    id: str = Field(..., description="User ID (UUID)")
    email: EmailStr = Field(..., description="Email address")
    password_hash: str = Field(..., repr=False)
    created_at: datetime


class UserProfile(BaseModel):
    """Public view of a user, safe to return from the API."""

    id: str
    email: EmailStr
    created_at: datetime
    tier: str = Field(default="free", description="Subscription tier")


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=256)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)


class LoginResult(BaseModel):
    """Outcome of a successful login."""

    user: User
    access_token: str
    expires_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
