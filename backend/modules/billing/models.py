"""
Billing module data models.

These models define subscription tiers, their limits, and the decisions
the tier policy engine hands back to callers.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class SubscriptionTier(str, Enum):
    """User subscription tiers, cheapest first."""

    FREE = "free"
    PERSONAL = "personal"
    FAMILY = "family"
    TEAM = "team"
    ENTERPRISE = "enterprise"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class ResourceKind(str, Enum):
    """Resources whose creation is gated by tier ceilings."""

    GROUPS = "groups"
    MEMBERS_PER_GROUP = "members_per_group"
    CATEGORIES_PER_GROUP = "categories_per_group"
    BUDGETS_PER_GROUP = "budgets_per_group"
    EXPENSES_PER_PERIOD = "expenses_per_period"

    @property
    def is_per_group(self) -> bool:
        return self in (
            ResourceKind.MEMBERS_PER_GROUP,
            ResourceKind.CATEGORIES_PER_GROUP,
            ResourceKind.BUDGETS_PER_GROUP,
        )


class Feature(str, Enum):
    """Tier-gated features."""

    ADVANCED_REPORTS = "advanced_reports"
    EXPORT_DATA = "export_data"
    PRIORITY_SUPPORT = "priority_support"
    CUSTOM_CATEGORIES = "custom_categories"


class TierLimits(BaseModel):
    """
    Ceilings and features for one tier.

    A ceiling of None means unbounded.
    """

    groups: Optional[int]
    members_per_group: Optional[int]
    categories_per_group: Optional[int]
    budgets_per_group: Optional[int]
    expenses_per_period: Optional[int]
    price_usd: Decimal
    data_retention_days: int
    features: frozenset[Feature] = frozenset()

    model_config = {"frozen": True}

    def ceiling(self, kind: ResourceKind) -> Optional[int]:
        return getattr(self, kind.value)


class Subscription(BaseModel):
    """A user's subscription. Exactly one per user."""

    id: str = Field(..., description="Subscription ID (UUID)")
    user_id: str
    tier: SubscriptionTier = SubscriptionTier.FREE
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Tier decisions
# =============================================================================


class _DecisionBase(BaseModel):
    kind: ResourceKind
    current: int = Field(..., description="Usage before the requested increment")
    limit: Optional[int] = Field(None, description="Ceiling, None when unbounded")

    model_config = {"frozen": True}


class Allow(_DecisionBase):
    decision: Literal["allow"] = "allow"


class ApproachingLimit(_DecisionBase):
    """Allowed, but usage after the increment is close to the ceiling."""

    decision: Literal["approaching_limit"] = "approaching_limit"
    suggested_tier: Optional[SubscriptionTier] = None
    suggested_price_usd: Optional[Decimal] = None


class Deny(_DecisionBase):
    """The increment would exceed the ceiling."""

    decision: Literal["deny"] = "deny"
    suggested_tier: Optional[SubscriptionTier] = None
    suggested_price_usd: Optional[Decimal] = None


TierDecision = Annotated[
    Union[Allow, ApproachingLimit, Deny],
    Field(discriminator="decision"),
]
