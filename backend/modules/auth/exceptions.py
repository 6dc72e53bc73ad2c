"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.

Every UnauthorizedError subclass carries a ``reason`` tag. Callers log it
for auditing; end users only ever see a generic 401.
"""

from shared.exceptions import (
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    NotFoundError,
)


class InvalidSignatureError(UnauthorizedError):
    """Raised when a bearer token's signature does not verify."""

    reason = "invalid-signature"

    def __init__(self, message: str = "Token signature is invalid"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(UnauthorizedError):
    """Raised when a bearer token is past its expiration claim."""

    reason = "expired"

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MalformedTokenError(UnauthorizedError):
    """Raised when a bearer token cannot be decoded or lacks required claims."""

    reason = "malformed"

    def __init__(self, message: str = "Authentication token is malformed"):
        super().__init__(message, code="MALFORMED_TOKEN")


class BadRelaySignatureError(UnauthorizedError):
    """Raised when a relay request's HMAC signature is missing or wrong."""

    reason = "bad-signature"

    def __init__(self, message: str = "Relay signature verification failed"):
        super().__init__(message, code="BAD_RELAY_SIGNATURE")


class MissingCredentialError(UnauthorizedError):
    """Raised when a request carries no usable credential."""

    reason = "missing-credential"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_CREDENTIAL")


class AmbiguousCredentialError(UnauthorizedError):
    """Raised when a request carries both a bearer token and relay headers."""

    reason = "ambiguous-credential"

    def __init__(self):
        super().__init__(
            "Request carries both web and relay credentials",
            code="AMBIGUOUS_CREDENTIAL",
        )


class WrongPrincipalError(UnauthorizedError):
    """Raised when an endpoint is called with the other kind of credential."""

    reason = "wrong-principal"

    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"Endpoint requires a {expected} credential",
            code="WRONG_PRINCIPAL",
            details={"expected": expected, "actual": actual},
        )


class InvalidCredentialsError(UnauthorizedError):
    """Raised when an email/password pair does not match a user."""

    reason = "invalid-credentials"

    def __init__(self):
        super().__init__("Invalid email or password", code="INVALID_CREDENTIALS")


class GroupScopeViolationError(ForbiddenError):
    """Raised when a chat-sourced request targets a group other than its own."""

    reason = "group-scope-violation"

    def __init__(self, requested_group_id: str, bound_group_id: str):
        super().__init__(
            "Chat binding is not scoped to the requested group",
            code="GROUP_SCOPE_VIOLATION",
            details={
                "requested_group_id": requested_group_id,
                "bound_group_id": bound_group_id,
            },
        )


class EmailAlreadyRegisteredError(ConflictError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            f"Email already registered: {email}",
            code="EMAIL_ALREADY_REGISTERED",
            details={"email": email},
        )


class UserNotFoundError(NotFoundError):
    """Raised when the authenticated user doesn't exist in the database."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )
