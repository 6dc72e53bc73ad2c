"""
Base exception classes for the Ledgerly backend.

Each module should define its own exceptions that inherit from these bases.
The API layer maps each base class to one HTTP status, so choosing the right
parent is what decides how an error reaches the caller.
"""

from typing import Optional, Any


class LedgerlyError(Exception):
    """
    Base exception for all Ledgerly errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class UnauthorizedError(LedgerlyError):
    """
    Authentication failed (invalid, expired or missing credentials).

    ``reason`` is a short machine-readable tag used for audit logs. It is
    never shown to end users, who only ever see a generic 401.
    """

    reason: str = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication required",
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message, code, details)
        if reason is not None:
            self.reason = reason


class ForbiddenError(LedgerlyError):
    """Authenticated, but not allowed to act on the target resource."""

    pass


class NotFoundError(LedgerlyError):
    """Resource not found."""

    pass


class ConflictError(LedgerlyError):
    """A concurrent or repeated operation lost against the current state."""

    pass


class ExpiredError(LedgerlyError):
    """A time-bounded resource is past its expiry."""

    pass


class LimitExceededError(LedgerlyError):
    """A subscription tier ceiling would be exceeded."""

    pass


class PaymentRequiredError(LedgerlyError):
    """The subscription is not in a state that allows the operation."""

    pass


class ValidationError(LedgerlyError):
    """Input validation failed."""

    pass


class StorageUnavailableError(LedgerlyError):
    """
    The persistence substrate could not be reached or failed unexpectedly.

    This is the only infrastructure-level error. Its details are logged but
    never returned to the caller.
    """

    def __init__(
        self,
        message: str = "Storage backend unavailable",
        operation: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code or "STORAGE_UNAVAILABLE", details)
        self.operation = operation
        if operation:
            self.details["operation"] = operation
