"""
Usage tracking module.

Counts tier-gated resources per user and billing period, and performs
the atomic check-and-increment that enforces tier ceilings.

Public API:
- UsageTracker: check / consume / release / summary
- billing_period: Compute the period containing a moment
- Models: UsageRecord, GroupUsage, BillingPeriod, UsageSummary
"""

from .interfaces import IUsageRepository, USAGE_FIELDS
from .models import (
    BillingPeriod,
    UsageRecord,
    GroupUsage,
    UsageCounter,
    UsageSummary,
    UsageCheckRequest,
)
from .exceptions import QuotaExceededError, GroupRequiredError, InvalidDeltaError
from .period import billing_period, clamp_cycle_day
from .service import UsageTracker

__all__ = [
    # Interface
    "IUsageRepository",
    "USAGE_FIELDS",
    # Models
    "BillingPeriod",
    "UsageRecord",
    "GroupUsage",
    "UsageCounter",
    "UsageSummary",
    "UsageCheckRequest",
    # Periods
    "billing_period",
    "clamp_cycle_day",
    # Service
    "UsageTracker",
    # Exceptions
    "QuotaExceededError",
    "GroupRequiredError",
    "InvalidDeltaError",
]
