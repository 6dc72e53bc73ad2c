"""
Authentication module.

Handles web token verification, relay signature checks, AuthContext
resolution and user accounts.

Public API:
- TokenAuthenticator: Verify and issue web bearer tokens
- RelayRequestVerifier: Verify relay HMAC signatures
- AuthContextResolver: Turn request headers into an AuthContext
- UserService: Register users and log them in
- Auth exceptions: InvalidSignatureError, ExpiredTokenError, etc.
"""

from .interfaces import IUserRepository, IBindingResolver
from .models import (
    User,
    UserProfile,
    WebTokenClaims,
    IssuedToken,
    RelayAssertion,
    RegisterRequest,
    LoginRequest,
    LoginResult,
    TokenResponse,
)
from .exceptions import (
    InvalidSignatureError,
    ExpiredTokenError,
    MalformedTokenError,
    BadRelaySignatureError,
    MissingCredentialError,
    AmbiguousCredentialError,
    WrongPrincipalError,
    InvalidCredentialsError,
    GroupScopeViolationError,
    EmailAlreadyRegisteredError,
    UserNotFoundError,
)
from .tokens import TokenAuthenticator
from .relay import RelayRequestVerifier
from .resolver import AuthContextResolver, ensure_group_scope, parse_bearer
from .service import UserService

__all__ = [
    # Interfaces
    "IUserRepository",
    "IBindingResolver",
    # Models
    "User",
    "UserProfile",
    "WebTokenClaims",
    "IssuedToken",
    "RelayAssertion",
    "RegisterRequest",
    "LoginRequest",
    "LoginResult",
    "TokenResponse",
    # Services
    "TokenAuthenticator",
    "RelayRequestVerifier",
    "AuthContextResolver",
    "ensure_group_scope",
    "parse_bearer",
    "UserService",
    # Exceptions
    "InvalidSignatureError",
    "ExpiredTokenError",
    "MalformedTokenError",
    "BadRelaySignatureError",
    "MissingCredentialError",
    "AmbiguousCredentialError",
    "WrongPrincipalError",
    "InvalidCredentialsError",
    "GroupScopeViolationError",
    "EmailAlreadyRegisteredError",
    "UserNotFoundError",
]
