"""Tests for modules/groups/service.py."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from modules.billing.models import ApproachingLimit, ResourceKind, SubscriptionTier
from modules.billing.policy import TierPolicyEngine
from modules.billing.repository import InMemorySubscriptionRepository
from modules.billing.service import SubscriptionService
from modules.groups.exceptions import GroupAccessDeniedError, GroupNotFoundError
from modules.groups.repository import InMemoryGroupRepository
from modules.groups.service import GroupService
from modules.usage.exceptions import QuotaExceededError
from modules.usage.repository import InMemoryUsageRepository
from modules.usage.service import UsageTracker

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
OWNER = "user-owner"


@pytest.fixture
def subscriptions():
    return SubscriptionService(InMemorySubscriptionRepository())


@pytest.fixture
def usage_repository():
    return InMemoryUsageRepository()


@pytest.fixture
def group_repository():
    return InMemoryGroupRepository()


@pytest.fixture
def tracker(usage_repository, subscriptions, group_repository):
    return UsageTracker(usage_repository, subscriptions, TierPolicyEngine(), groups=group_repository)


@pytest.fixture
def service(group_repository, tracker):
    return GroupService(group_repository, tracker)


class TestCreateGroup:
    @pytest.mark.asyncio
    async def test_create_consumes_group_and_owner_seat(self, service, tracker, usage_repository):
        created = await service.create_group(OWNER, "Household", cycle_start_day=5, now=NOW)

        assert created.group.owner_id == OWNER
        assert created.group.cycle_start_day == 5
        assert isinstance(created.tier_decision, ApproachingLimit)
        record = await tracker.get_current_record(OWNER, now=NOW)
        assert record.groups_count == 1
        assert record.total_members == 1
        assert usage_repository.get_group_usage(created.group.id, ResourceKind.MEMBERS_PER_GROUP) == 1

    @pytest.mark.asyncio
    async def test_cycle_day_is_clamped(self, service):
        created = await service.create_group(OWNER, "Household", cycle_start_day=31, now=NOW)
        assert created.group.cycle_start_day == 28

    @pytest.mark.asyncio
    async def test_free_tier_second_group_denied(self, service):
        await service.create_group(OWNER, "Household", now=NOW)
        with pytest.raises(QuotaExceededError):
            await service.create_group(OWNER, "Trip", now=NOW)
        assert len(await service.list_groups(OWNER)) == 1

    @pytest.mark.asyncio
    async def test_family_tier_allows_three(self, service, subscriptions):
        await subscriptions.change_tier(OWNER, SubscriptionTier.FAMILY)
        for name in ("A", "B", "C"):
            await service.create_group(OWNER, name, now=NOW)
        with pytest.raises(QuotaExceededError):
            await service.create_group(OWNER, "D", now=NOW)

    @pytest.mark.asyncio
    async def test_failed_insert_releases_quota(self, tracker):
        repository = MagicMock()
        repository.list_groups.return_value = []
        repository.create_group.side_effect = RuntimeError("insert failed")
        service = GroupService(repository, tracker)

        with pytest.raises(RuntimeError):
            await service.create_group(OWNER, "Household", now=NOW)

        record = await tracker.get_current_record(OWNER, now=NOW)
        assert record.groups_count == 0


class TestGroupAccess:
    @pytest.mark.asyncio
    async def test_get_group_owner_only(self, service):
        created = await service.create_group(OWNER, "Household", now=NOW)
        assert (await service.get_group(created.group.id, OWNER)).name == "Household"
        with pytest.raises(GroupAccessDeniedError):
            await service.get_group(created.group.id, "someone-else")

    @pytest.mark.asyncio
    async def test_get_missing_group(self, service):
        with pytest.raises(GroupNotFoundError):
            await service.get_group("missing", OWNER)

    @pytest.mark.asyncio
    async def test_delete_gives_quota_back(self, service, tracker):
        created = await service.create_group(OWNER, "Household", now=NOW)

        await service.delete_group(created.group.id, OWNER, now=NOW)

        record = await tracker.get_current_record(OWNER, now=NOW)
        assert record.groups_count == 0
        assert record.total_members == 0
        replacement = await service.create_group(OWNER, "Fresh start", now=NOW)
        assert replacement.group.name == "Fresh start"


class TestGroupBillingCycle:
    @pytest.mark.asyncio
    async def test_usage_follows_group_cycle_day(self, service, tracker):
        jan_10 = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)
        created = await service.create_group(OWNER, "Household", cycle_start_day=15, now=jan_10)

        await tracker.consume(
            OWNER, ResourceKind.EXPENSES_PER_PERIOD, group=created.group.id, now=jan_10
        )
        summary = await tracker.summary(OWNER, now=jan_10)

        assert summary.period_start == date(2024, 12, 15)
        assert summary.period_end == date(2025, 1, 15)
        assert summary.groups_count == 1
        assert summary.total_members == 1
        assert summary.total_expenses == 1

    @pytest.mark.asyncio
    async def test_delete_releases_in_group_cycle(self, service, tracker):
        jan_10 = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)
        created = await service.create_group(OWNER, "Household", cycle_start_day=15, now=jan_10)

        await service.delete_group(created.group.id, OWNER, now=jan_10)

        record = await tracker.get_current_record(OWNER, cycle_start_day=15, now=jan_10)
        assert record.groups_count == 0
        assert record.total_members == 0
