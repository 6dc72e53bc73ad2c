"""Tests for modules/billing/service.py."""

from datetime import datetime, timedelta, timezone

import pytest

from modules.billing.exceptions import SubscriptionExpiredError, SubscriptionInactiveError
from modules.billing.models import SubscriptionStatus, SubscriptionTier
from modules.billing.repository import InMemorySubscriptionRepository
from modules.billing.service import SubscriptionService

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service():
    return SubscriptionService(InMemorySubscriptionRepository())


class TestSubscriptionService:
    @pytest.mark.asyncio
    async def test_new_users_get_free_tier(self, service):
        subscription = await service.get_subscription("user-1")
        assert subscription.tier == SubscriptionTier.FREE
        assert subscription.status == SubscriptionStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_get_or_create_is_stable(self, service):
        first = await service.get_subscription("user-1")
        second = await service.get_subscription("user-1")
        assert first.id == second.id

    @pytest.mark.asyncio
    async def test_change_tier(self, service):
        updated = await service.change_tier("user-1", SubscriptionTier.FAMILY)
        assert updated.tier == SubscriptionTier.FAMILY
        assert (await service.get_subscription("user-1")).tier == SubscriptionTier.FAMILY

    @pytest.mark.asyncio
    async def test_inactive_subscription(self, service):
        await service.set_status("user-1", SubscriptionStatus.CANCELLED)
        with pytest.raises(SubscriptionInactiveError) as exc_info:
            await service.get_active_subscription("user-1", NOW)
        assert exc_info.value.details["status"] == "cancelled"

    @pytest.mark.asyncio
    async def test_expired_period(self, service):
        await service.set_status(
            "user-1", SubscriptionStatus.ACTIVE, current_period_end=NOW - timedelta(days=1)
        )
        with pytest.raises(SubscriptionExpiredError):
            await service.get_active_subscription("user-1", NOW)

    @pytest.mark.asyncio
    async def test_active_period(self, service):
        await service.set_status(
            "user-1", SubscriptionStatus.ACTIVE, current_period_end=NOW + timedelta(days=1)
        )
        subscription = await service.get_active_subscription("user-1", NOW)
        assert subscription.current_period_end == NOW + timedelta(days=1)
