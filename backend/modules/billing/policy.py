"""
Tier limits and the policy engine that evaluates increments against them.
"""

from decimal import Decimal
from typing import Optional, Union

from .exceptions import FeatureNotAvailableError
from .models import (
    Allow,
    ApproachingLimit,
    Deny,
    Feature,
    ResourceKind,
    SubscriptionTier,
    TierLimits,
)

_ALL_FEATURES = frozenset(Feature)

TIER_LIMITS: dict[SubscriptionTier, TierLimits] = {
    SubscriptionTier.FREE: TierLimits(
        groups=1,
        members_per_group=1,
        categories_per_group=5,
        budgets_per_group=3,
        expenses_per_period=100,
        price_usd=Decimal("0.00"),
        data_retention_days=90,
    ),
    SubscriptionTier.PERSONAL: TierLimits(
        groups=1,
        members_per_group=2,
        categories_per_group=20,
        budgets_per_group=10,
        expenses_per_period=1000,
        price_usd=Decimal("4.99"),
        data_retention_days=365,
        features=frozenset({Feature.EXPORT_DATA, Feature.CUSTOM_CATEGORIES}),
    ),
    SubscriptionTier.FAMILY: TierLimits(
        groups=3,
        members_per_group=10,
        categories_per_group=50,
        budgets_per_group=25,
        expenses_per_period=5000,
        price_usd=Decimal("9.99"),
        data_retention_days=365,
        features=_ALL_FEATURES - {Feature.PRIORITY_SUPPORT},
    ),
    SubscriptionTier.TEAM: TierLimits(
        groups=10,
        members_per_group=50,
        categories_per_group=100,
        budgets_per_group=50,
        expenses_per_period=25000,
        price_usd=Decimal("19.99"),
        data_retention_days=730,
        features=_ALL_FEATURES,
    ),
    SubscriptionTier.ENTERPRISE: TierLimits(
        groups=None,
        members_per_group=None,
        categories_per_group=None,
        budgets_per_group=None,
        expenses_per_period=None,
        price_usd=Decimal("49.99"),
        data_retention_days=2555,
        features=_ALL_FEATURES,
    ),
}

# Enum order is price order.
_TIER_ORDER = list(SubscriptionTier)


class TierPolicyEngine:
    """Maps tiers to ceilings and decides whether an increment fits."""

    def __init__(
        self,
        limits: Optional[dict[SubscriptionTier, TierLimits]] = None,
        approaching_ratio: float = 0.8,
    ):
        self._limits = limits or TIER_LIMITS
        self._approaching_ratio = approaching_ratio

    def limits(self, tier: SubscriptionTier) -> TierLimits:
        return self._limits[tier]

    def ceiling(self, tier: SubscriptionTier, kind: ResourceKind) -> Optional[int]:
        """Return the ceiling for ``kind`` on ``tier``, or None if unbounded."""
        return self._limits[tier].ceiling(kind)

    def suggest_upgrade(self, tier: SubscriptionTier, kind: ResourceKind) -> Optional[SubscriptionTier]:
        """Cheapest tier with a strictly larger ceiling for ``kind``."""
        current = self.ceiling(tier, kind)
        if current is None:
            return None
        for candidate in _TIER_ORDER[_TIER_ORDER.index(tier) + 1:]:
            ceiling = self.ceiling(candidate, kind)
            if ceiling is None or ceiling > current:
                return candidate
        return None

    def evaluate(
        self,
        tier: SubscriptionTier,
        kind: ResourceKind,
        current: int,
        requested_increment: int = 1,
    ) -> Union[Allow, ApproachingLimit, Deny]:
        """
        Decide whether ``current + requested_increment`` fits under the ceiling.

        ApproachingLimit is flagged from ``current`` alone and is advisory;
        it never blocks.
        """
        limit = self.ceiling(tier, kind)
        if limit is None:
            return Allow(kind=kind, current=current, limit=None)

        projected = current + requested_increment
        if projected > limit:
            return Deny(kind=kind, current=current, limit=limit, **self._suggestion(tier, kind))
        if self.is_near_limit(tier, kind, current):
            return ApproachingLimit(
                kind=kind, current=current, limit=limit, **self._suggestion(tier, kind)
            )
        return Allow(kind=kind, current=current, limit=limit)

    def is_near_limit(self, tier: SubscriptionTier, kind: ResourceKind, current: int) -> bool:
        limit = self.ceiling(tier, kind)
        return limit is not None and limit > 0 and current >= limit * self._approaching_ratio

    def standing(
        self,
        tier: SubscriptionTier,
        kind: ResourceKind,
        current: int,
    ) -> Union[Allow, ApproachingLimit]:
        """Classify usage that has already been counted."""
        limit = self.ceiling(tier, kind)
        if self.is_near_limit(tier, kind, current):
            return ApproachingLimit(
                kind=kind, current=current, limit=limit, **self._suggestion(tier, kind)
            )
        return Allow(kind=kind, current=current, limit=limit)

    def check_feature(self, tier: SubscriptionTier, feature: Feature) -> None:
        """
        Raises:
            FeatureNotAvailableError: Tier doesn't include the feature
        """
        if feature in self._limits[tier].features:
            return
        required = next(
            (t for t in _TIER_ORDER if feature in self._limits[t].features),
            None,
        )
        raise FeatureNotAvailableError(
            feature.value,
            tier.value,
            required.value if required else None,
        )

    def _suggestion(self, tier: SubscriptionTier, kind: ResourceKind) -> dict:
        suggested = self.suggest_upgrade(tier, kind)
        return {
            "suggested_tier": suggested,
            "suggested_price_usd": self._limits[suggested].price_usd if suggested else None,
        }
