"""
Request authentication dependencies.

Adapts request headers and the raw body to the AuthContextResolver.
Failures propagate as UnauthorizedError and are turned into a generic 401
by the application's exception handler.
"""

from typing import Union

from fastapi import Depends, Request

from modules.auth.exceptions import WrongPrincipalError
from modules.auth.models import RelayAssertion
from modules.auth.relay import RelayRequestVerifier
from modules.auth.resolver import AuthContextResolver
from shared.models import ChatAuthContext, WebAuthContext

from ..dependencies import get_auth_resolver, get_relay_verifier

RELAY_SIGNATURE_HEADER = "X-Relay-Signature"
CHAT_BINDING_HEADER = "X-Chat-Binding"


async def get_auth_context(
    request: Request,
    resolver: AuthContextResolver = Depends(get_auth_resolver),
) -> Union[WebAuthContext, ChatAuthContext]:
    """
    Dependency that resolves whichever credential the request carries.

    Usage:
        @router.get("/summary")
        async def summary(context: AuthContext = Depends(get_auth_context)):
            ...
    """
    relay_signature = request.headers.get(RELAY_SIGNATURE_HEADER)
    # Only relay requests need the body, and it must be the bytes as sent.
    raw_body = await request.body() if relay_signature else b""
    return await resolver.resolve(
        authorization=request.headers.get("Authorization"),
        relay_signature=relay_signature,
        binding_id=request.headers.get(CHAT_BINDING_HEADER),
        raw_body=raw_body,
    )


async def require_web_context(
    context: Union[WebAuthContext, ChatAuthContext] = Depends(get_auth_context),
) -> WebAuthContext:
    """Dependency for endpoints only a web session may call."""
    if not isinstance(context, WebAuthContext):
        raise WrongPrincipalError(expected="web", actual=context.source)
    return context


async def require_chat_context(
    context: Union[WebAuthContext, ChatAuthContext] = Depends(get_auth_context),
) -> ChatAuthContext:
    """Dependency for endpoints only a bound chat may call."""
    if not isinstance(context, ChatAuthContext):
        raise WrongPrincipalError(expected="chat", actual=context.source)
    return context


async def require_relay_assertion(
    request: Request,
    verifier: RelayRequestVerifier = Depends(get_relay_verifier),
) -> RelayAssertion:
    """
    Dependency for relay calls made before a chat is bound.

    Checks the relay signature only; there is no binding yet.
    """
    raw_body = await request.body()
    return verifier.verify(raw_body, request.headers.get(RELAY_SIGNATURE_HEADER))


# Type aliases for cleaner route definitions
RequireAuth = Depends(get_auth_context)
RequireWeb = Depends(require_web_context)
RequireChat = Depends(require_chat_context)
RequireRelay = Depends(require_relay_assertion)
