"""
Usage tracking module data models.

These models define the data structures used by the usage module
and exposed to other modules through the interface.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from modules.billing.models import ResourceKind, SubscriptionTier


class BillingPeriod(BaseModel):
    """A half-open billing window ``[start, end)``."""

    start: date
    end: date

    model_config = {"frozen": True}

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


class UsageRecord(BaseModel):
    """
    Per-user counters for one billing period.

    ``total_expenses`` is period-scoped and starts at zero each period.
    ``groups_count`` and ``total_members`` are gauges of what currently
    exists and carry over into the next period.
    """

    id: str = Field(..., description="Record ID")
    user_id: str = Field(..., description="User ID")
    period_start: date
    period_end: date
    groups_count: int = Field(default=0, ge=0)
    total_expenses: int = Field(default=0, ge=0)
    total_members: int = Field(default=0, ge=0)

    @property
    def period(self) -> BillingPeriod:
        return BillingPeriod(start=self.period_start, end=self.period_end)


class GroupUsage(BaseModel):
    """A per-group gauge, e.g. how many categories a group has."""

    group_id: str
    kind: ResourceKind
    count: int = Field(default=0, ge=0)


class UsageCounter(BaseModel):
    """One line of a usage summary."""

    kind: ResourceKind
    current: Optional[int] = Field(None, description="None for per-group kinds")
    limit: Optional[int] = Field(None, description="None when unbounded")
    approaching_limit: bool = False


class UsageSummary(BaseModel):
    """Current-period usage for a user, with their tier's ceilings."""

    user_id: str
    tier: SubscriptionTier
    period_start: date
    period_end: date
    groups_count: int
    total_expenses: int
    total_members: int
    counters: list[UsageCounter]
    generated_at: datetime


# =============================================================================
# API Request Models
# =============================================================================


class UsageCheckRequest(BaseModel):
    kind: ResourceKind
    increment: int = Field(default=1, ge=1)
    group_id: Optional[str] = None
