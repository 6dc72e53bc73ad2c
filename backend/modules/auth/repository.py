"""
User repository implementations.

InMemoryUserRepository backs tests and local development;
SupabaseUserRepository reads and writes the ``users`` table.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from postgrest.exceptions import APIError
from supabase import Client

from shared.repository import BaseRepository, UNIQUE_VIOLATION
from .exceptions import EmailAlreadyRegisteredError
from .models import User


class InMemoryUserRepository:
    """Dictionary-backed user store keyed by ID with an email index."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}
        self._by_email: dict[str, str] = {}

    def create_user(self, email: str, password_hash: str) -> User:
        key = email.lower()
        with self._lock:
            if key in self._by_email:
                raise EmailAlreadyRegisteredError(email)
            user = User(
                id=str(uuid.uuid4()),
                email=email,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc),
            )
            self._users[user.id] = user
            self._by_email[key] = user.id
            return user

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        user_id = self._by_email.get(email.lower())
        return self._users.get(user_id) if user_id else None


class SupabaseUserRepository(BaseRepository[User]):
    """User store on the ``users`` table. Emails are stored lower-cased."""

    def __init__(self, db: Client):
        super().__init__(db)

    def create_user(self, email: str, password_hash: str) -> User:
        try:
            with self._storage_call("create_user"):
                result = self._db.table("users").insert({
                    "email": email.lower(),
                    "password_hash": password_hash,
                }).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise EmailAlreadyRegisteredError(email) from e
            raise
        return self._map_to_user(result.data[0])

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        with self._storage_call("get_user_by_id"):
            result = self._db.table("users").select("*").eq("id", user_id).execute()
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._storage_call("get_user_by_email"):
            result = self._db.table("users").select("*").eq("email", email.lower()).execute()
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    def _map_to_user(self, row: dict[str, Any]) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=datetime.fromisoformat(row["created_at"].replace("Z", "+00:00")),
        )
