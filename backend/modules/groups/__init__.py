"""
Expense groups module.

A thin collaborator: groups are the unit chat bindings attach to and the
first resource gated by tier limits.

Public API:
- IGroupDirectory / IGroupRepository: Group lookup and storage
- GroupService: Tier-gated group creation
- ExpenseGroup: Group model
"""

from .interfaces import IGroupDirectory, IGroupRepository
from .models import ExpenseGroup, CreateGroupRequest, CreateGroupResponse, GroupListResponse
from .exceptions import GroupNotFoundError, GroupAccessDeniedError
from .service import GroupService

__all__ = [
    "IGroupDirectory",
    "IGroupRepository",
    "ExpenseGroup",
    "CreateGroupRequest",
    "CreateGroupResponse",
    "GroupListResponse",
    "GroupService",
    "GroupNotFoundError",
    "GroupAccessDeniedError",
]
