"""
Chat binding data models.

A bind request is a short-lived, single-use ticket that lets a web user
attach an external chat to one of their groups. A binding is the durable
result of confirming such a ticket.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ChatPlatform(str, Enum):
    """Chat platforms the relay speaks for."""

    TELEGRAM = "telegram"
    WHATSAPP = "whatsapp"


class BindingStatus(str, Enum):
    ACTIVE = "active"
    REVOKED = "revoked"


class BindRequestState(str, Enum):
    """Derived lifecycle state of a bind request."""

    CREATED = "created"
    IDENTIFIED = "identified"
    CONSUMED = "consumed"
    EXPIRED = "expired"


class ChatBindRequest(BaseModel):
    """
    A pending chat-to-group bind attempt.

    Only the SHA-256 of the nonce is stored. ``user_id`` is set once, when a
    web session claims the request; ``consumed_at`` is set once, when the
    request is confirmed into a binding.
    """

    id: str
    platform: ChatPlatform
    external_chat_id: str
    nonce_hash: str = Field(..., repr=False)
    user_id: Optional[str] = None
    expires_at: datetime
    created_at: datetime
    consumed_at: Optional[datetime] = None

    model_config = {"frozen": True}

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def state(self, now: datetime) -> BindRequestState:
        if self.consumed_at is not None:
            return BindRequestState.CONSUMED
        if self.is_expired(now):
            return BindRequestState.EXPIRED
        if self.user_id is not None:
            return BindRequestState.IDENTIFIED
        return BindRequestState.CREATED


class ChatBinding(BaseModel):
    """Association of one external chat with one expense group."""

    id: str
    group_id: str
    platform: ChatPlatform
    external_chat_id: str
    status: BindingStatus = BindingStatus.ACTIVE
    bound_by: str = Field(..., description="User who confirmed the binding")
    bound_at: datetime
    revoked_at: Optional[datetime] = None

    model_config = {"frozen": True}

    @property
    def is_active(self) -> bool:
        return self.status == BindingStatus.ACTIVE and self.revoked_at is None


class IssuedBindRequest(BaseModel):
    """
    Result of issuing a bind request.

    ``nonce`` is the only copy of the plaintext and is returned exactly once.
    """

    request_id: str
    nonce: str
    expires_at: datetime
    bind_url: str


# =============================================================================
# API Request/Response Models
# =============================================================================


class CreateBindRequestBody(BaseModel):
    platform: ChatPlatform
    external_chat_id: str = Field(..., min_length=1, max_length=128)


class ConfirmBindingBody(BaseModel):
    request_id: str
    nonce: str = Field(..., min_length=1, max_length=256)
    group_id: str


class BindRequestView(BaseModel):
    """Public view of a bind request (never includes the nonce hash)."""

    id: str
    platform: ChatPlatform
    external_chat_id: str
    user_id: Optional[str]
    expires_at: datetime
    state: BindRequestState

    @classmethod
    def from_request(cls, request: ChatBindRequest, now: datetime) -> "BindRequestView":
        return cls(
            id=request.id,
            platform=request.platform,
            external_chat_id=request.external_chat_id,
            user_id=request.user_id,
            expires_at=request.expires_at,
            state=request.state(now),
        )
