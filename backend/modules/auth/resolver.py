"""
Resolution of the per-request AuthContext.

A request authenticates either as a web session (bearer token) or as a
bound chat (relay signature plus binding id), never both.
"""

from datetime import datetime
from typing import Optional, Union

from shared.models import ChatAuthContext, WebAuthContext

from .exceptions import (
    AmbiguousCredentialError,
    GroupScopeViolationError,
    MalformedTokenError,
    MissingCredentialError,
)
from .interfaces import IBindingResolver
from .relay import RelayRequestVerifier
from .tokens import TokenAuthenticator

BEARER_SCHEME = "bearer"


def parse_bearer(authorization: str) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` value.

    Raises:
        MalformedTokenError: Header uses another scheme or has no token
    """
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token:
        raise MalformedTokenError("Authorization header is not a bearer token")
    return token


class AuthContextResolver:
    """Chooses the authentication path from the headers present and runs it."""

    def __init__(
        self,
        tokens: TokenAuthenticator,
        relay: RelayRequestVerifier,
        bindings: IBindingResolver,
    ):
        self._tokens = tokens
        self._relay = relay
        self._bindings = bindings

    async def resolve(
        self,
        authorization: Optional[str],
        relay_signature: Optional[str],
        binding_id: Optional[str],
        raw_body: bytes = b"",
        now: Optional[datetime] = None,
    ) -> Union[WebAuthContext, ChatAuthContext]:
        """
        Build the AuthContext for one request.

        Raises:
            AmbiguousCredentialError: Both bearer and relay headers present
            MissingCredentialError: No credential, or only half of the relay pair
            UnauthorizedError: Whatever the chosen path rejects
        """
        has_bearer = bool(authorization)
        has_relay = bool(relay_signature) or bool(binding_id)

        if has_bearer and has_relay:
            raise AmbiguousCredentialError()

        if has_bearer:
            token = parse_bearer(authorization)
            user_id = self._tokens.authenticate(token, now=now)
            return WebAuthContext(user_id=user_id)

        if has_relay:
            if not relay_signature:
                raise MissingCredentialError("Relay signature header is missing")
            if not binding_id:
                raise MissingCredentialError("Chat binding header is missing")
            self._relay.verify(raw_body, relay_signature, now=now)
            binding = await self._bindings.resolve(binding_id)
            return ChatAuthContext(
                user_id=binding.bound_by,
                group_id=binding.group_id,
                binding_id=binding.id,
            )

        raise MissingCredentialError()


def ensure_group_scope(
    context: Union[WebAuthContext, ChatAuthContext],
    group_id: Optional[str],
) -> None:
    """
    Confine chat-sourced requests to their bound group.

    Web contexts pass through; ownership is the handler's job.

    Raises:
        GroupScopeViolationError: Chat context targets another group
    """
    if isinstance(context, ChatAuthContext) and group_id is not None:
        if group_id != context.group_id:
            raise GroupScopeViolationError(group_id, context.group_id)
