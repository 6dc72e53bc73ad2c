"""
Chat binding module.

Binds external chats (Telegram, WhatsApp) to expense groups through a
nonce-protected request flow, and resolves bindings for relay requests.

Public API:
- BindRequestService: Issue, claim and verify bind requests
- ChatBindingService: Confirm and revoke bindings
- ChatBindingResolver: Load a live binding for the relay auth path
- Models: ChatBindRequest, ChatBinding, ChatPlatform, ...
"""

from .interfaces import IChatBindingRepository
from .models import (
    ChatPlatform,
    BindingStatus,
    BindRequestState,
    ChatBindRequest,
    ChatBinding,
    IssuedBindRequest,
    CreateBindRequestBody,
    ConfirmBindingBody,
    BindRequestView,
)
from .exceptions import (
    UnknownBindingError,
    RevokedBindingError,
    NonceMismatchError,
    BindRequestNotFoundError,
    BindRequestExpiredError,
    AlreadyClaimedError,
    BindRequestConsumedError,
    BindingRaceError,
    BindingNotFoundError,
    BindingAccessDeniedError,
)
from .resolver import ChatBindingResolver
from .service import BindRequestService, ChatBindingService, hash_nonce

__all__ = [
    # Interface
    "IChatBindingRepository",
    # Models
    "ChatPlatform",
    "BindingStatus",
    "BindRequestState",
    "ChatBindRequest",
    "ChatBinding",
    "IssuedBindRequest",
    "CreateBindRequestBody",
    "ConfirmBindingBody",
    "BindRequestView",
    # Services
    "ChatBindingResolver",
    "BindRequestService",
    "ChatBindingService",
    "hash_nonce",
    # Exceptions
    "UnknownBindingError",
    "RevokedBindingError",
    "NonceMismatchError",
    "BindRequestNotFoundError",
    "BindRequestExpiredError",
    "AlreadyClaimedError",
    "BindRequestConsumedError",
    "BindingRaceError",
    "BindingNotFoundError",
    "BindingAccessDeniedError",
]
