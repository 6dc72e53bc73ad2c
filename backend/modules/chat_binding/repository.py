"""
Chat binding repository implementations.

InMemoryChatBindingRepository runs every compare-and-set inside one lock
acquisition. SupabaseChatBindingRepository relies on PostgREST filters for
the claim and on the ``confirm_chat_binding`` SQL function, backed by the
partial unique index on active bindings, for confirmation.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Any, Optional

from postgrest.exceptions import APIError
from supabase import Client

from shared.repository import BaseRepository, UNIQUE_VIOLATION
from .exceptions import BindingRaceError, BindRequestNotFoundError, NonceMismatchError
from .models import BindingStatus, ChatBindRequest, ChatBinding, ChatPlatform

logger = logging.getLogger(__name__)


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class InMemoryChatBindingRepository:
    """Lock-guarded dictionaries standing in for the two tables."""

    def __init__(self):
        self._lock = threading.Lock()
        self._requests: dict[str, ChatBindRequest] = {}
        self._bindings: dict[str, ChatBinding] = {}

    def create_request(
        self,
        platform: ChatPlatform,
        external_chat_id: str,
        nonce_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> ChatBindRequest:
        request = ChatBindRequest(
            id=str(uuid.uuid4()),
            platform=platform,
            external_chat_id=external_chat_id,
            nonce_hash=nonce_hash,
            expires_at=expires_at,
            created_at=now,
        )
        with self._lock:
            self._requests[request.id] = request
        return request

    def get_request(self, request_id: str) -> Optional[ChatBindRequest]:
        return self._requests.get(request_id)

    def claim_request(self, request_id: str, user_id: str, now: datetime) -> Optional[ChatBindRequest]:
        with self._lock:
            request = self._requests.get(request_id)
            if (
                request is None
                or request.user_id is not None
                or request.consumed_at is not None
                or request.is_expired(now)
            ):
                return None
            claimed = request.model_copy(update={"user_id": user_id})
            self._requests[request_id] = claimed
            return claimed

    def confirm_binding(
        self,
        request_id: str,
        nonce_hash: str,
        user_id: str,
        group_id: str,
        now: datetime,
    ) -> ChatBinding:
        with self._lock:
            request = self._requests.get(request_id)
            if request is None:
                raise BindRequestNotFoundError(request_id)
            if request.consumed_at is not None:
                raise BindingRaceError(request_id)
            if request.nonce_hash != nonce_hash or request.user_id != user_id:
                raise NonceMismatchError(request_id)

            for existing in self._bindings.values():
                if (
                    existing.is_active
                    and existing.platform == request.platform
                    and existing.external_chat_id == request.external_chat_id
                ):
                    self._bindings[existing.id] = existing.model_copy(
                        update={"status": BindingStatus.REVOKED, "revoked_at": now}
                    )

            binding = ChatBinding(
                id=str(uuid.uuid4()),
                group_id=group_id,
                platform=request.platform,
                external_chat_id=request.external_chat_id,
                bound_by=user_id,
                bound_at=now,
            )
            self._bindings[binding.id] = binding
            self._requests[request_id] = request.model_copy(update={"consumed_at": now})
            return binding

    def get_binding(self, binding_id: str) -> Optional[ChatBinding]:
        return self._bindings.get(binding_id)

    def get_active_binding(self, platform: ChatPlatform, external_chat_id: str) -> Optional[ChatBinding]:
        with self._lock:
            for binding in self._bindings.values():
                if (
                    binding.is_active
                    and binding.platform == platform
                    and binding.external_chat_id == external_chat_id
                ):
                    return binding
        return None

    def list_group_bindings(self, group_id: str) -> list[ChatBinding]:
        with self._lock:
            found = [b for b in self._bindings.values() if b.group_id == group_id]
        return sorted(found, key=lambda b: b.bound_at, reverse=True)

    def revoke_binding(self, binding_id: str, now: datetime) -> Optional[ChatBinding]:
        with self._lock:
            binding = self._bindings.get(binding_id)
            if binding is None or not binding.is_active:
                return binding
            revoked = binding.model_copy(
                update={"status": BindingStatus.REVOKED, "revoked_at": now}
            )
            self._bindings[binding_id] = revoked
            return revoked

    def delete_stale_requests(self, now: datetime) -> int:
        with self._lock:
            stale = [
                request_id
                for request_id, request in self._requests.items()
                if request.consumed_at is not None or request.is_expired(now)
            ]
            for request_id in stale:
                del self._requests[request_id]
        return len(stale)


class SupabaseChatBindingRepository(BaseRepository[ChatBinding]):
    """Bind requests and bindings on the ``chat_bind_requests`` and ``chat_bindings`` tables."""

    def __init__(self, db: Client):
        super().__init__(db)

    # -------------------------------------------------------------------------
    # Bind requests
    # -------------------------------------------------------------------------

    def create_request(
        self,
        platform: ChatPlatform,
        external_chat_id: str,
        nonce_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> ChatBindRequest:
        with self._storage_call("create_request"):
            result = self._db.table("chat_bind_requests").insert({
                "platform": platform.value,
                "external_chat_id": external_chat_id,
                "nonce_hash": nonce_hash,
                "expires_at": expires_at.isoformat(),
                "created_at": now.isoformat(),
            }).execute()
        return self._map_to_request(result.data[0])

    def get_request(self, request_id: str) -> Optional[ChatBindRequest]:
        if not _is_uuid(request_id):
            return None
        with self._storage_call("get_request"):
            result = self._db.table("chat_bind_requests").select("*").eq("id", request_id).execute()
        if not result.data:
            return None
        return self._map_to_request(result.data[0])

    def claim_request(self, request_id: str, user_id: str, now: datetime) -> Optional[ChatBindRequest]:
        if not _is_uuid(request_id):
            return None
        with self._storage_call("claim_request"):
            result = (
                self._db.table("chat_bind_requests")
                .update({"user_id": user_id})
                .eq("id", request_id)
                .is_("user_id", "null")
                .is_("consumed_at", "null")
                .gt("expires_at", now.isoformat())
                .execute()
            )
        if not result.data:
            return None
        return self._map_to_request(result.data[0])

    def confirm_binding(
        self,
        request_id: str,
        nonce_hash: str,
        user_id: str,
        group_id: str,
        now: datetime,
    ) -> ChatBinding:
        try:
            with self._storage_call("confirm_binding"):
                result = self._db.rpc("confirm_chat_binding", {
                    "p_request_id": request_id,
                    "p_nonce_hash": nonce_hash,
                    "p_user_id": user_id,
                    "p_group_id": group_id,
                    "p_now": now.isoformat(),
                }).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info(f"Active binding index rejected confirmation of {request_id}")
                raise BindingRaceError(request_id) from e
            raise

        outcome = result.data or {}
        status = outcome.get("outcome")
        if status == "not_found":
            raise BindRequestNotFoundError(request_id)
        if status == "consumed":
            raise BindingRaceError(request_id)
        if status == "mismatch":
            raise NonceMismatchError(request_id)
        return self._map_to_binding(outcome["binding"])

    def delete_stale_requests(self, now: datetime) -> int:
        with self._storage_call("delete_stale_requests"):
            expired = (
                self._db.table("chat_bind_requests")
                .delete()
                .lt("expires_at", now.isoformat())
                .execute()
            )
            consumed = (
                self._db.table("chat_bind_requests")
                .delete()
                .not_.is_("consumed_at", "null")
                .execute()
            )
        return len(expired.data) + len(consumed.data)

    # -------------------------------------------------------------------------
    # Bindings
    # -------------------------------------------------------------------------

    def get_binding(self, binding_id: str) -> Optional[ChatBinding]:
        if not _is_uuid(binding_id):
            return None
        with self._storage_call("get_binding"):
            result = self._db.table("chat_bindings").select("*").eq("id", binding_id).execute()
        if not result.data:
            return None
        return self._map_to_binding(result.data[0])

    def get_active_binding(self, platform: ChatPlatform, external_chat_id: str) -> Optional[ChatBinding]:
        with self._storage_call("get_active_binding"):
            result = (
                self._db.table("chat_bindings")
                .select("*")
                .eq("platform", platform.value)
                .eq("external_chat_id", external_chat_id)
                .eq("status", BindingStatus.ACTIVE.value)
                .execute()
            )
        if not result.data:
            return None
        return self._map_to_binding(result.data[0])

    def list_group_bindings(self, group_id: str) -> list[ChatBinding]:
        if not _is_uuid(group_id):
            return []
        with self._storage_call("list_group_bindings"):
            result = (
                self._db.table("chat_bindings")
                .select("*")
                .eq("group_id", group_id)
                .order("bound_at", desc=True)
                .execute()
            )
        return [self._map_to_binding(row) for row in result.data]

    def revoke_binding(self, binding_id: str, now: datetime) -> Optional[ChatBinding]:
        if not _is_uuid(binding_id):
            return None
        with self._storage_call("revoke_binding"):
            self._db.table("chat_bindings").update({
                "status": BindingStatus.REVOKED.value,
                "revoked_at": now.isoformat(),
            }).eq("id", binding_id).eq("status", BindingStatus.ACTIVE.value).execute()
        return self.get_binding(binding_id)

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    def _map_to_request(self, row: dict[str, Any]) -> ChatBindRequest:
        return ChatBindRequest(
            id=row["id"],
            platform=ChatPlatform(row["platform"]),
            external_chat_id=row["external_chat_id"],
            nonce_hash=row["nonce_hash"],
            user_id=row.get("user_id"),
            expires_at=_parse_ts(row["expires_at"]),
            created_at=_parse_ts(row["created_at"]),
            consumed_at=_parse_ts(row.get("consumed_at")),
        )

    def _map_to_binding(self, row: dict[str, Any]) -> ChatBinding:
        return ChatBinding(
            id=row["id"],
            group_id=row["group_id"],
            platform=ChatPlatform(row["platform"]),
            external_chat_id=row["external_chat_id"],
            status=BindingStatus(row["status"]),
            bound_by=row["bound_by"],
            bound_at=_parse_ts(row["bound_at"]),
            revoked_at=_parse_ts(row.get("revoked_at")),
        )
