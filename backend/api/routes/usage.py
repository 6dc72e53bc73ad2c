"""
Usage tracking endpoints.

Provides the current-period usage summary and a dry-run tier check.
Both accept web sessions and bound chats; chats are confined to their group.
"""

from typing import Union

from fastapi import APIRouter, Depends

from modules.auth.resolver import ensure_group_scope
from modules.billing.models import TierDecision
from modules.groups.service import GroupService
from modules.usage.models import UsageCheckRequest, UsageSummary
from modules.usage.service import UsageTracker
from shared.models import ChatAuthContext, WebAuthContext

from ..dependencies import get_group_service, get_usage_tracker
from ..middleware.auth import get_auth_context

router = APIRouter()


@router.get("/summary", response_model=UsageSummary)
async def get_usage_summary(
    context: Union[WebAuthContext, ChatAuthContext] = Depends(get_auth_context),
    tracker: UsageTracker = Depends(get_usage_tracker),
) -> UsageSummary:
    """
    Get usage for the current billing period.

    For a bound chat this is the usage of the user who created the binding.
    """
    group_id = context.group_id if isinstance(context, ChatAuthContext) else None
    return await tracker.summary(context.user_id, group=group_id)


@router.post("/check", response_model=TierDecision)
async def check_usage(
    body: UsageCheckRequest,
    context: Union[WebAuthContext, ChatAuthContext] = Depends(get_auth_context),
    tracker: UsageTracker = Depends(get_usage_tracker),
    groups: GroupService = Depends(get_group_service),
):
    """
    Evaluate whether creating ``increment`` more of ``kind`` would be allowed.

    Counts nothing. Chat contexts may default the group to their own;
    web sessions may only ask about groups they own.
    """
    group_id = body.group_id
    if isinstance(context, ChatAuthContext):
        ensure_group_scope(context, group_id)
        group_id = group_id or context.group_id
    elif group_id is not None:
        await groups.get_group(group_id, context.user_id)
    return await tracker.check(
        context.user_id,
        body.kind,
        requested_increment=body.increment,
        group=group_id,
    )
