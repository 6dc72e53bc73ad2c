"""
Expense group API endpoints.

Group creation is gated by the owner's subscription tier.
"""

from fastapi import APIRouter, Depends, Response, status

from api.dependencies import get_group_service
from api.middleware.auth import require_web_context
from shared.models import WebAuthContext

from .models import CreateGroupRequest, CreateGroupResponse, ExpenseGroup, GroupListResponse
from .service import GroupService

router = APIRouter()


@router.get("", response_model=GroupListResponse)
async def list_groups(
    context: WebAuthContext = Depends(require_web_context),
    service: GroupService = Depends(get_group_service),
) -> GroupListResponse:
    """List groups owned by the current user, newest first."""
    groups = await service.list_groups(context.user_id)
    return GroupListResponse(groups=groups, total=len(groups))


@router.post("", response_model=CreateGroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    body: CreateGroupRequest,
    context: WebAuthContext = Depends(require_web_context),
    service: GroupService = Depends(get_group_service),
) -> CreateGroupResponse:
    """
    Create a group.

    Returns 429 when the tier's group ceiling is reached. The response's
    ``tier_decision`` flags when the user is close to it.
    """
    return await service.create_group(context.user_id, body.name, body.cycle_start_day)


@router.get("/{group_id}", response_model=ExpenseGroup)
async def get_group(
    group_id: str,
    context: WebAuthContext = Depends(require_web_context),
    service: GroupService = Depends(get_group_service),
) -> ExpenseGroup:
    return await service.get_group(group_id, context.user_id)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(
    group_id: str,
    context: WebAuthContext = Depends(require_web_context),
    service: GroupService = Depends(get_group_service),
) -> Response:
    """Delete a group and give its quota back."""
    await service.delete_group(group_id, context.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
