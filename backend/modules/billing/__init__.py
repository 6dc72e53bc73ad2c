"""
Billing module.

Handles subscription tiers, their resource ceilings and feature flags,
and per-user subscription state.

Public API:
- TierPolicyEngine: Evaluate increments against tier ceilings
- SubscriptionService: Get-or-create and validate subscriptions
- TierDecision: Allow | ApproachingLimit | Deny
- Billing exceptions: SubscriptionInactiveError, etc.
"""

from .interfaces import ISubscriptionRepository
from .models import (
    SubscriptionTier,
    SubscriptionStatus,
    ResourceKind,
    Feature,
    TierLimits,
    Subscription,
    Allow,
    ApproachingLimit,
    Deny,
    TierDecision,
)
from .exceptions import (
    SubscriptionInactiveError,
    SubscriptionExpiredError,
    FeatureNotAvailableError,
)
from .policy import TIER_LIMITS, TierPolicyEngine
from .service import SubscriptionService

__all__ = [
    # Interface
    "ISubscriptionRepository",
    # Models
    "SubscriptionTier",
    "SubscriptionStatus",
    "ResourceKind",
    "Feature",
    "TierLimits",
    "Subscription",
    "Allow",
    "ApproachingLimit",
    "Deny",
    "TierDecision",
    # Policy
    "TIER_LIMITS",
    "TierPolicyEngine",
    # Service
    "SubscriptionService",
    # Exceptions
    "SubscriptionInactiveError",
    "SubscriptionExpiredError",
    "FeatureNotAvailableError",
]
