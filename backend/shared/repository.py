"""
Base repository class for database access.

Provides a common abstraction layer for all Supabase-backed repositories,
encapsulating client access and translating transport failures into the
shared error taxonomy.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, TypeVar, Generic

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from .exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNIQUE_VIOLATION = "23505"


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - ``_storage_call`` to turn transport failures into StorageUnavailableError

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class ChatBindingRepository(BaseRepository[ChatBinding]):
            def get_binding(self, binding_id: str) -> Optional[ChatBinding]:
                with self._storage_call("get_binding"):
                    result = self._db.table("chat_bindings").select("*").eq("id", binding_id).execute()
                if not result.data:
                    return None
                return self._map_to_binding(result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    @contextmanager
    def _storage_call(self, operation: str) -> Iterator[None]:
        """
        Wrap a persistence call.

        Network failures and unexpected PostgREST errors become
        StorageUnavailableError. Unique violations are re-raised untouched
        so callers can map them to a domain conflict.
        """
        try:
            yield
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise
            logger.error(f"Storage error during {operation}: {e.code} {e.message}")
            raise StorageUnavailableError(operation=operation) from e
        except httpx.HTTPError as e:
            logger.error(f"Storage unreachable during {operation}: {e}")
            raise StorageUnavailableError(operation=operation) from e
