"""
Chat binding API endpoints.

The relay issues bind requests; web sessions claim, confirm and revoke
them; bound chats can ask which binding they are acting under.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import (
    get_bind_request_service,
    get_chat_binding_service,
    get_group_service,
)
from api.middleware.auth import require_chat_context, require_relay_assertion, require_web_context
from modules.auth.models import RelayAssertion
from modules.groups.service import GroupService
from shared.models import ChatAuthContext, WebAuthContext

from .models import (
    BindRequestView,
    ChatBinding,
    ConfirmBindingBody,
    CreateBindRequestBody,
    IssuedBindRequest,
)
from .service import BindRequestService, ChatBindingService

router = APIRouter()


@router.post(
    "/chat-bind-requests",
    response_model=IssuedBindRequest,
    status_code=status.HTTP_201_CREATED,
)
async def create_bind_request(
    body: CreateBindRequestBody,
    _relay: RelayAssertion = Depends(require_relay_assertion),
    service: BindRequestService = Depends(get_bind_request_service),
) -> IssuedBindRequest:
    """
    Issue a bind request for a chat.

    Called by the relay. The nonce in the response is shown to the chat
    user exactly once, inside ``bind_url``.
    """
    return await service.create(body.platform, body.external_chat_id)


@router.post("/chat-bind-requests/{request_id}/claim", response_model=BindRequestView)
async def claim_bind_request(
    request_id: str,
    context: WebAuthContext = Depends(require_web_context),
    service: BindRequestService = Depends(get_bind_request_service),
) -> BindRequestView:
    """Claim a bind request for the signed-in user."""
    claimed = await service.claim(request_id, context.user_id)
    return BindRequestView.from_request(claimed, datetime.now(timezone.utc))


@router.post("/chat-bindings/confirm", response_model=ChatBinding, status_code=status.HTTP_201_CREATED)
async def confirm_binding(
    body: ConfirmBindingBody,
    context: WebAuthContext = Depends(require_web_context),
    service: ChatBindingService = Depends(get_chat_binding_service),
) -> ChatBinding:
    """
    Confirm a claimed bind request into an active binding.

    Not idempotent: a second call with the same request fails.
    """
    return await service.confirm(body.request_id, body.nonce, context.user_id, body.group_id)


@router.post("/chat-bindings/{binding_id}/revoke", response_model=ChatBinding)
async def revoke_binding(
    binding_id: str,
    context: WebAuthContext = Depends(require_web_context),
    service: ChatBindingService = Depends(get_chat_binding_service),
) -> ChatBinding:
    """Revoke a binding. Safe to retry."""
    return await service.revoke(binding_id, acting_user=context.user_id)


@router.get("/chat-bindings/current", response_model=ChatBinding)
async def get_current_binding(
    context: ChatAuthContext = Depends(require_chat_context),
    service: ChatBindingService = Depends(get_chat_binding_service),
) -> ChatBinding:
    """Return the binding a relay request is acting under."""
    return await service.get_binding(context.binding_id)


@router.get("/chat-bindings", response_model=list[ChatBinding])
async def list_group_bindings(
    group_id: str = Query(..., description="Group whose bindings to list"),
    context: WebAuthContext = Depends(require_web_context),
    service: ChatBindingService = Depends(get_chat_binding_service),
    groups: GroupService = Depends(get_group_service),
) -> list[ChatBinding]:
    """List active and revoked bindings of a group the user owns."""
    await groups.get_group(group_id, context.user_id)
    return await service.list_group_bindings(group_id)
