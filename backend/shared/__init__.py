"""
Shared infrastructure for Ledgerly backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- models: The per-request AuthContext variants
- repository: Base class for Supabase-backed repositories

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    LedgerlyError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    ExpiredError,
    LimitExceededError,
    PaymentRequiredError,
    ValidationError,
    StorageUnavailableError,
)
from .models import AuthContext, WebAuthContext, ChatAuthContext

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "LedgerlyError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "ExpiredError",
    "LimitExceededError",
    "PaymentRequiredError",
    "ValidationError",
    "StorageUnavailableError",
    "AuthContext",
    "WebAuthContext",
    "ChatAuthContext",
]
