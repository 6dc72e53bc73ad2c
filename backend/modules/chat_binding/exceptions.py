"""
Chat binding module exceptions.

Relay-path failures are Unauthorized and carry an audit ``reason`` like
the auth module's. Lifecycle failures (claimed, consumed, raced) are
Conflicts so the web client can tell them from bad credentials.
"""

from shared.exceptions import (
    UnauthorizedError,
    NotFoundError,
    ForbiddenError,
    ConflictError,
    ExpiredError,
)


class UnknownBindingError(UnauthorizedError):
    """Raised when the binding header names no existing binding."""

    reason = "unknown-binding"

    def __init__(self, binding_id: str):
        super().__init__(
            "Chat binding not recognized",
            code="UNKNOWN_BINDING",
            details={"binding_id": binding_id},
        )


class RevokedBindingError(UnauthorizedError):
    """Raised when the binding header names a revoked binding."""

    reason = "revoked-binding"

    def __init__(self, binding_id: str):
        super().__init__(
            "Chat binding has been revoked",
            code="REVOKED_BINDING",
            details={"binding_id": binding_id},
        )


class NonceMismatchError(UnauthorizedError):
    """Raised when a supplied nonce or claimant doesn't match the request."""

    reason = "nonce-mismatch"

    def __init__(self, request_id: str):
        super().__init__(
            "Bind request verification failed",
            code="NONCE_MISMATCH",
            details={"request_id": request_id},
        )


class BindRequestNotFoundError(NotFoundError):
    """Raised when a bind request doesn't exist."""

    def __init__(self, request_id: str):
        super().__init__(
            f"Bind request not found: {request_id}",
            code="BIND_REQUEST_NOT_FOUND",
            details={"request_id": request_id},
        )


class BindRequestExpiredError(ExpiredError):
    """Raised when a bind request is past its expiry."""

    reason = "expired"

    def __init__(self, request_id: str):
        super().__init__(
            "Bind request has expired",
            code="BIND_REQUEST_EXPIRED",
            details={"request_id": request_id},
        )


class AlreadyClaimedError(ConflictError):
    """Raised when a bind request has already been claimed by a web session."""

    reason = "already-claimed"

    def __init__(self, request_id: str):
        super().__init__(
            "Bind request has already been claimed",
            code="ALREADY_CLAIMED",
            details={"request_id": request_id},
        )


class BindRequestConsumedError(ConflictError):
    """Raised when a bind request has already been confirmed."""

    reason = "already-consumed"

    def __init__(self, request_id: str):
        super().__init__(
            "Bind request has already been used",
            code="ALREADY_CONSUMED",
            details={"request_id": request_id},
        )


class BindingRaceError(ConflictError):
    """Raised when a concurrent confirmation won the race for the same request or chat."""

    reason = "binding-race"

    def __init__(self, request_id: str):
        super().__init__(
            "Another confirmation completed first",
            code="BINDING_RACE",
            details={"request_id": request_id},
        )


class BindingNotFoundError(NotFoundError):
    """Raised when a binding doesn't exist."""

    def __init__(self, binding_id: str):
        super().__init__(
            f"Chat binding not found: {binding_id}",
            code="BINDING_NOT_FOUND",
            details={"binding_id": binding_id},
        )


class BindingAccessDeniedError(ForbiddenError):
    """Raised when a user may not manage a binding."""

    def __init__(self, binding_id: str, user_id: str):
        super().__init__(
            "Not allowed to manage this chat binding",
            code="BINDING_ACCESS_DENIED",
            details={"binding_id": binding_id, "user_id": user_id},
        )
