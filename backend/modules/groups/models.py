"""
Expense group data models.
"""

from datetime import datetime
from pydantic import BaseModel, Field

from modules.billing.models import TierDecision


class ExpenseGroup(BaseModel):
    """A shared ledger owned by one user."""

    id: str = Field(..., description="Group ID (UUID)")
    name: str = Field(..., min_length=1, max_length=120)
    owner_id: str = Field(..., description="Owning user ID")
    cycle_start_day: int = Field(default=1, ge=1, le=28, description="Day the budget cycle restarts")
    created_at: datetime

    model_config = {"frozen": True}


class CreateGroupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    cycle_start_day: int = Field(default=1, description="Clamped to 1-28")


class GroupListResponse(BaseModel):
    groups: list[ExpenseGroup]
    total: int



class CreateGroupResponse(BaseModel):
    """A new group plus the tier decision for the unit it consumed."""

    group: ExpenseGroup
    tier_decision: TierDecision
