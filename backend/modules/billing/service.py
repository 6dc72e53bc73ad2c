"""
Subscription service.

Every user has exactly one subscription; users without one are lazily put
on the free tier the first time anything asks.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from .exceptions import SubscriptionExpiredError, SubscriptionInactiveError
from .interfaces import ISubscriptionRepository
from .models import Subscription, SubscriptionStatus, SubscriptionTier

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Reads, creates and updates user subscriptions."""

    def __init__(self, repository: ISubscriptionRepository):
        self._repository = repository

    async def get_subscription(self, user_id: str) -> Subscription:
        """Return the user's subscription, creating a free one if absent."""
        subscription = self._repository.get_subscription(user_id)
        if subscription is None:
            subscription = self._repository.create_if_absent(user_id)
            logger.info(f"Created free subscription for user {user_id}")
        return subscription

    def ensure_active(self, subscription: Subscription, now: Optional[datetime] = None) -> None:
        """
        Raises:
            SubscriptionInactiveError: Status is not active
            SubscriptionExpiredError: Period end is in the past
        """
        if subscription.status != SubscriptionStatus.ACTIVE:
            raise SubscriptionInactiveError(subscription.user_id, subscription.status.value)

        now = now or datetime.now(timezone.utc)
        end = subscription.current_period_end
        if end is not None and end < now:
            raise SubscriptionExpiredError(subscription.user_id, end)

    async def get_active_subscription(self, user_id: str, now: Optional[datetime] = None) -> Subscription:
        """get_subscription followed by ensure_active."""
        subscription = await self.get_subscription(user_id)
        self.ensure_active(subscription, now)
        return subscription

    async def change_tier(self, user_id: str, tier: SubscriptionTier) -> Subscription:
        """Move a user to ``tier``. No payment is involved."""
        await self.get_subscription(user_id)
        updated = self._repository.update_subscription(user_id, tier=tier)
        logger.info(f"User {user_id} moved to {tier.value} tier")
        return updated

    async def set_status(
        self,
        user_id: str,
        status: SubscriptionStatus,
        current_period_end: Optional[datetime] = None,
    ) -> Subscription:
        await self.get_subscription(user_id)
        return self._repository.update_subscription(
            user_id, status=status, current_period_end=current_period_end
        )
