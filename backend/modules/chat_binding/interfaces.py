"""
Chat binding storage interface.

``claim_request`` and ``confirm_binding`` are the two operations that must
be atomic in every implementation; everything else is plain reads and
idempotent writes.
"""

from datetime import datetime
from typing import Protocol, Optional, runtime_checkable

from .models import ChatBindRequest, ChatBinding, ChatPlatform


@runtime_checkable
class IChatBindingRepository(Protocol):
    """Storage contract for bind requests and bindings."""

    def create_request(
        self,
        platform: ChatPlatform,
        external_chat_id: str,
        nonce_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> ChatBindRequest:
        ...

    def get_request(self, request_id: str) -> Optional[ChatBindRequest]:
        ...

    def claim_request(self, request_id: str, user_id: str, now: datetime) -> Optional[ChatBindRequest]:
        """
        Set ``user_id`` if the request is unclaimed, unconsumed and unexpired.

        A single compare-and-set. Returns the updated request, or None when
        the guard did not hold.
        """
        ...

    def confirm_binding(
        self,
        request_id: str,
        nonce_hash: str,
        user_id: str,
        group_id: str,
        now: datetime,
    ) -> ChatBinding:
        """
        Turn a verified request into an active binding in one unit of work.

        Re-checks that the request is unconsumed and still matches, revokes
        any active binding for the same chat, inserts the new binding and
        marks the request consumed.

        Raises:
            BindingRaceError: A concurrent confirmation got there first
        """
        ...

    def get_binding(self, binding_id: str) -> Optional[ChatBinding]:
        ...

    def get_active_binding(self, platform: ChatPlatform, external_chat_id: str) -> Optional[ChatBinding]:
        ...

    def list_group_bindings(self, group_id: str) -> list[ChatBinding]:
        ...

    def revoke_binding(self, binding_id: str, now: datetime) -> Optional[ChatBinding]:
        """
        Mark a binding revoked. Already-revoked bindings are returned unchanged.

        Returns None if the binding doesn't exist.
        """
        ...

    def delete_stale_requests(self, now: datetime) -> int:
        """Delete expired or consumed requests. Returns how many were removed."""
        ...
