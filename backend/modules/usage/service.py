"""
Usage tracking service.

UsageTracker owns the per-user, per-period counters and the atomic
check-and-increment that gates resource creation. Ceilings come from the
TierPolicyEngine; the subscription decides which tier applies.

A record's period follows the billing-cycle day of the group being acted
on, falling back to the user's oldest group and then to the configured
default.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Union

from modules.billing.models import (
    Allow,
    ApproachingLimit,
    Deny,
    ResourceKind,
)
from modules.billing.policy import TierPolicyEngine
from modules.billing.service import SubscriptionService

from .exceptions import GroupRequiredError, InvalidDeltaError, QuotaExceededError
from .interfaces import IUsageRepository
from .models import UsageCounter, UsageRecord, UsageSummary
from .period import billing_period

if TYPE_CHECKING:
    from modules.groups.interfaces import IGroupRepository

logger = logging.getLogger(__name__)

# Where each user-level kind is counted on the UsageRecord.
RECORD_FIELDS: dict[ResourceKind, str] = {
    ResourceKind.GROUPS: "groups_count",
    ResourceKind.EXPENSES_PER_PERIOD: "total_expenses",
}

Decision = Union[Allow, ApproachingLimit, Deny]


class UsageTracker:
    """
    Tracks resource usage and enforces tier ceilings.

    ``consume`` is the only path that may push a counter up, and it does
    so with a single guarded increment so concurrent callers can never
    overshoot a ceiling.
    """

    def __init__(
        self,
        repository: IUsageRepository,
        subscriptions: SubscriptionService,
        policy: TierPolicyEngine,
        default_cycle_start_day: int = 1,
        groups: Optional["IGroupRepository"] = None,
    ):
        self._repository = repository
        self._subscriptions = subscriptions
        self._policy = policy
        self._cycle_day = default_cycle_start_day
        self._groups = groups

    def cycle_day_for(self, user_id: str, group: Optional[str] = None) -> int:
        """Billing-cycle start day that governs ``user_id``'s counters."""
        if self._groups is not None:
            if group is not None:
                target = self._groups.get_group(group)
                if target is not None:
                    return target.cycle_start_day
            owned = self._groups.list_groups(user_id)
            if owned:
                # Newest first, so the oldest group is last.
                return owned[-1].cycle_start_day
        return self._cycle_day

    async def get_current_record(
        self,
        user_id: str,
        cycle_start_day: Optional[int] = None,
        now: Optional[datetime] = None,
        group: Optional[str] = None,
    ) -> UsageRecord:
        """
        Return the record for the period containing ``now``.

        A new period starts with zero expenses; group and member gauges
        carry over from the latest earlier record.
        """
        now = now or datetime.now(timezone.utc)
        period = billing_period(now, cycle_start_day or self.cycle_day_for(user_id, group))

        record = self._repository.get_record(user_id, period)
        if record is not None:
            return record

        previous = self._repository.get_latest_record(user_id)
        carried_groups = 0
        carried_members = 0
        if previous is not None and previous.period_start < period.start:
            carried_groups = previous.groups_count
            carried_members = previous.total_members
            logger.info(
                f"Rolling usage for user {user_id} into period {period.start} "
                f"(carrying {carried_groups} groups, {carried_members} members)"
            )
        return self._repository.create_record_if_absent(
            user_id, period, groups_count=carried_groups, total_members=carried_members
        )

    async def check(
        self,
        user_id: str,
        kind: ResourceKind,
        requested_increment: int = 1,
        group: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Decision:
        """Evaluate an increment without changing any counter."""
        if requested_increment <= 0:
            raise InvalidDeltaError(requested_increment)
        subscription = await self._subscriptions.get_subscription(user_id)
        current = await self._current_value(user_id, kind, group, now)
        return self._policy.evaluate(subscription.tier, kind, current, requested_increment)

    async def consume(
        self,
        user_id: str,
        kind: ResourceKind,
        delta: int = 1,
        group: Optional[str] = None,
        now: Optional[datetime] = None,
        cycle_start_day: Optional[int] = None,
    ) -> Union[Allow, ApproachingLimit]:
        """
        Atomically check the ceiling and count ``delta`` units of ``kind``.

        Raises:
            SubscriptionInactiveError, SubscriptionExpiredError: Subscription can't be used
            GroupRequiredError: Per-group kind without a group
            QuotaExceededError: Ceiling would be exceeded; nothing was counted
        """
        if delta <= 0:
            raise InvalidDeltaError(delta)
        now = now or datetime.now(timezone.utc)
        subscription = await self._subscriptions.get_active_subscription(user_id, now)
        tier = subscription.tier
        limit = self._policy.ceiling(tier, kind)

        if kind.is_per_group and group is None:
            raise GroupRequiredError(kind.value)

        if kind == ResourceKind.MEMBERS_PER_GROUP:
            record = await self.get_current_record(user_id, cycle_start_day, now, group)
            updated = self._repository.increment_member_usage(
                group, user_id, record.period, delta, limit
            )
        elif kind.is_per_group:
            updated = self._repository.increment_group_usage(group, kind, delta, limit)
        else:
            record = await self.get_current_record(user_id, cycle_start_day, now, group)
            updated = self._repository.increment_usage(
                user_id, record.period, RECORD_FIELDS[kind], delta, limit
            )

        if updated is None:
            current = await self._current_value(user_id, kind, group, now, cycle_start_day)
            suggested = self._policy.suggest_upgrade(tier, kind)
            logger.info(
                f"Denied {kind.value} +{delta} for user {user_id} on {tier.value} tier "
                f"({current}/{limit})"
            )
            raise QuotaExceededError(
                kind=kind.value,
                current=current,
                limit=limit,
                current_tier=tier.value,
                suggested_tier=suggested.value if suggested else None,
                suggested_price_usd=self._policy.limits(suggested).price_usd if suggested else None,
            )

        return self._policy.standing(tier, kind, updated)

    async def release(
        self,
        user_id: str,
        kind: ResourceKind,
        delta: int = 1,
        group: Optional[str] = None,
        now: Optional[datetime] = None,
        cycle_start_day: Optional[int] = None,
    ) -> int:
        """Give back ``delta`` units after a removal. Never goes below zero."""
        if delta <= 0:
            raise InvalidDeltaError(delta)
        if kind.is_per_group and group is None:
            raise GroupRequiredError(kind.value)

        if kind == ResourceKind.MEMBERS_PER_GROUP:
            record = await self.get_current_record(user_id, cycle_start_day, now, group)
            remaining = self._repository.increment_member_usage(group, user_id, record.period, -delta)
            return remaining or 0
        if kind.is_per_group:
            remaining = self._repository.increment_group_usage(group, kind, -delta)
            return remaining or 0

        record = await self.get_current_record(user_id, cycle_start_day, now, group)
        remaining = self._repository.increment_usage(user_id, record.period, RECORD_FIELDS[kind], -delta)
        return remaining or 0

    async def summary(
        self,
        user_id: str,
        cycle_start_day: Optional[int] = None,
        now: Optional[datetime] = None,
        group: Optional[str] = None,
    ) -> UsageSummary:
        """Current-period counters for a user alongside their tier's ceilings."""
        now = now or datetime.now(timezone.utc)
        subscription = await self._subscriptions.get_subscription(user_id)
        record = await self.get_current_record(user_id, cycle_start_day, now, group)

        counters = []
        for kind in ResourceKind:
            limit = self._policy.ceiling(subscription.tier, kind)
            if kind.is_per_group:
                counters.append(UsageCounter(kind=kind, limit=limit))
                continue
            current = getattr(record, RECORD_FIELDS[kind])
            counters.append(UsageCounter(
                kind=kind,
                current=current,
                limit=limit,
                approaching_limit=self._policy.is_near_limit(subscription.tier, kind, current),
            ))

        return UsageSummary(
            user_id=user_id,
            tier=subscription.tier,
            period_start=record.period_start,
            period_end=record.period_end,
            groups_count=record.groups_count,
            total_expenses=record.total_expenses,
            total_members=record.total_members,
            counters=counters,
            generated_at=now,
        )

    async def _current_value(
        self,
        user_id: str,
        kind: ResourceKind,
        group: Optional[str],
        now: Optional[datetime],
        cycle_start_day: Optional[int] = None,
    ) -> int:
        if kind.is_per_group:
            if group is None:
                raise GroupRequiredError(kind.value)
            return self._repository.get_group_usage(group, kind)
        record = await self.get_current_record(user_id, cycle_start_day, now, group)
        return getattr(record, RECORD_FIELDS[kind])
