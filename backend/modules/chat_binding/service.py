"""
Chat binding services.

BindRequestService issues and checks single-use bind nonces.
ChatBindingService turns a verified request into an active binding and
manages bindings afterwards.

Flow:
1. The relay asks for a bind request on behalf of a chat and shows the
   returned URL (which carries the nonce) to the chat user.
2. The user opens the URL in a web session, which claims the request.
3. The same web session confirms it with the nonce and a target group.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from modules.groups.exceptions import GroupNotFoundError, GroupAccessDeniedError
from modules.groups.interfaces import IGroupDirectory

from .exceptions import (
    AlreadyClaimedError,
    BindingAccessDeniedError,
    BindingNotFoundError,
    BindRequestConsumedError,
    BindRequestExpiredError,
    BindRequestNotFoundError,
    NonceMismatchError,
)
from .interfaces import IChatBindingRepository
from .models import ChatBindRequest, ChatBinding, ChatPlatform, IssuedBindRequest

logger = logging.getLogger(__name__)

NONCE_BYTES = 32


def hash_nonce(nonce: str) -> str:
    return hashlib.sha256(nonce.encode("utf-8")).hexdigest()


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


class BindRequestService:
    """Issues, claims and verifies bind requests."""

    def __init__(
        self,
        repository: IChatBindingRepository,
        ttl_minutes: int = 15,
        bind_url_base: str = "",
    ):
        self._repository = repository
        self._ttl = timedelta(minutes=ttl_minutes)
        self._bind_url_base = bind_url_base.rstrip("/")

    async def create(
        self,
        platform: ChatPlatform,
        external_chat_id: str,
        now: Optional[datetime] = None,
    ) -> IssuedBindRequest:
        """
        Issue a bind request for a chat.

        Only the nonce's SHA-256 is persisted; the plaintext is returned once.
        """
        now = _now(now)
        nonce = secrets.token_urlsafe(NONCE_BYTES)
        request = self._repository.create_request(
            platform=platform,
            external_chat_id=external_chat_id,
            nonce_hash=hash_nonce(nonce),
            expires_at=now + self._ttl,
            now=now,
        )
        logger.info(f"Issued bind request {request.id} for {platform.value} chat")
        return IssuedBindRequest(
            request_id=request.id,
            nonce=nonce,
            expires_at=request.expires_at,
            bind_url=f"{self._bind_url_base}/{request.id}?nonce={nonce}",
        )

    async def get_request(self, request_id: str) -> ChatBindRequest:
        """
        Raises:
            BindRequestNotFoundError: No such request
        """
        request = self._repository.get_request(request_id)
        if request is None:
            raise BindRequestNotFoundError(request_id)
        return request

    async def claim(
        self,
        request_id: str,
        acting_user: str,
        now: Optional[datetime] = None,
    ) -> ChatBindRequest:
        """
        Attach a web user to an unclaimed request.

        At most one caller ever succeeds, including a repeat by the same user.

        Raises:
            BindRequestNotFoundError: No such request
            BindRequestExpiredError: Request is past its expiry
            AlreadyClaimedError: Request was already claimed or consumed
        """
        now = _now(now)
        request = await self.get_request(request_id)
        if request.is_expired(now):
            raise BindRequestExpiredError(request_id)

        claimed = self._repository.claim_request(request_id, acting_user, now)
        if claimed is None:
            current = self._repository.get_request(request_id)
            if current is not None and current.is_expired(now) and current.user_id is None:
                raise BindRequestExpiredError(request_id)
            raise AlreadyClaimedError(request_id)

        logger.info(f"Bind request {request_id} claimed by user {acting_user}")
        return claimed

    async def verify(
        self,
        request_id: str,
        supplied_nonce: str,
        expected_user: str,
        now: Optional[datetime] = None,
    ) -> ChatBindRequest:
        """
        Check a nonce against a claimed request.

        Raises:
            BindRequestNotFoundError: No such request
            NonceMismatchError: Wrong nonce, unclaimed request, or other claimant
            BindRequestConsumedError: Request was already confirmed
            BindRequestExpiredError: Request is past its expiry
        """
        now = _now(now)
        request = await self.get_request(request_id)

        if not hmac.compare_digest(hash_nonce(supplied_nonce), request.nonce_hash):
            raise NonceMismatchError(request_id)
        if request.consumed_at is not None:
            raise BindRequestConsumedError(request_id)
        if request.is_expired(now):
            raise BindRequestExpiredError(request_id)
        if request.user_id is None or request.user_id != expected_user:
            raise NonceMismatchError(request_id)
        return request

    async def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """Delete expired and consumed requests. Storage reclamation only."""
        removed = self._repository.delete_stale_requests(_now(now))
        logger.info(f"Swept {removed} stale bind requests")
        return removed


class ChatBindingService:
    """Confirms, looks up and revokes chat bindings."""

    def __init__(
        self,
        requests: BindRequestService,
        repository: IChatBindingRepository,
        groups: IGroupDirectory,
    ):
        self._requests = requests
        self._repository = repository
        self._groups = groups

    async def confirm(
        self,
        request_id: str,
        nonce: str,
        acting_user: str,
        target_group: str,
        now: Optional[datetime] = None,
    ) -> ChatBinding:
        """
        Bind the request's chat to ``target_group``.

        Any previous active binding of the same chat is revoked in the same
        unit of work. Not safe to retry: a replay fails verification.

        Raises:
            NonceMismatchError, BindRequestExpiredError, BindRequestConsumedError:
                Verification failed
            GroupNotFoundError: Target group doesn't exist
            GroupAccessDeniedError: Acting user doesn't own the group
            BindingRaceError: A concurrent confirmation won
        """
        now = _now(now)
        await self._requests.verify(request_id, nonce, acting_user, now)

        group = self._groups.get_group(target_group)
        if group is None:
            raise GroupNotFoundError(target_group)
        if group.owner_id != acting_user:
            raise GroupAccessDeniedError(target_group, acting_user)

        binding = self._repository.confirm_binding(
            request_id=request_id,
            nonce_hash=hash_nonce(nonce),
            user_id=acting_user,
            group_id=target_group,
            now=now,
        )
        logger.info(
            f"Bound {binding.platform.value} chat to group {target_group} "
            f"(binding {binding.id}, request {request_id})"
        )
        return binding

    async def revoke(
        self,
        binding_id: str,
        acting_user: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ChatBinding:
        """
        Revoke a binding. Revoking an already-revoked binding succeeds.

        When ``acting_user`` is given it must be the binder or the group owner.

        Raises:
            BindingNotFoundError: No such binding
            BindingAccessDeniedError: Acting user may not manage it
        """
        binding = self._repository.get_binding(binding_id)
        if binding is None:
            raise BindingNotFoundError(binding_id)

        if acting_user is not None and acting_user != binding.bound_by:
            group = self._groups.get_group(binding.group_id)
            if group is None or group.owner_id != acting_user:
                raise BindingAccessDeniedError(binding_id, acting_user)

        if not binding.is_active:
            return binding

        revoked = self._repository.revoke_binding(binding_id, _now(now))
        if revoked is None:
            raise BindingNotFoundError(binding_id)
        logger.info(f"Revoked chat binding {binding_id}")
        return revoked

    async def get_binding(self, binding_id: str) -> ChatBinding:
        """
        Raises:
            BindingNotFoundError: No such binding
        """
        binding = self._repository.get_binding(binding_id)
        if binding is None:
            raise BindingNotFoundError(binding_id)
        return binding

    async def get_active_binding(
        self,
        platform: ChatPlatform,
        external_chat_id: str,
    ) -> Optional[ChatBinding]:
        return self._repository.get_active_binding(platform, external_chat_id)

    async def list_group_bindings(self, group_id: str) -> list[ChatBinding]:
        return self._repository.list_group_bindings(group_id)
