"""
Billing module interfaces.
"""

from datetime import datetime
from typing import Protocol, Optional, runtime_checkable

from .models import Subscription, SubscriptionStatus, SubscriptionTier


@runtime_checkable
class ISubscriptionRepository(Protocol):
    """Storage contract for subscriptions (one row per user)."""

    def get_subscription(self, user_id: str) -> Optional[Subscription]:
        ...

    def create_if_absent(self, user_id: str) -> Subscription:
        """
        Insert a free/active subscription unless one exists.

        Two racing callers both get the single surviving row.
        """
        ...

    def update_subscription(
        self,
        user_id: str,
        tier: Optional[SubscriptionTier] = None,
        status: Optional[SubscriptionStatus] = None,
        current_period_end: Optional[datetime] = None,
    ) -> Subscription:
        ...

