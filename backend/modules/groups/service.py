"""
Expense group service.

Group creation is tier-gated: a ``groups`` unit is consumed before the
insert and handed back if the insert fails. The owner counts as the
group's first member.
"""

import logging
from datetime import datetime
from typing import Optional

from modules.billing.models import ResourceKind
from modules.usage.period import clamp_cycle_day
from modules.usage.service import UsageTracker

from .exceptions import GroupNotFoundError, GroupAccessDeniedError
from .interfaces import IGroupRepository
from .models import CreateGroupResponse, ExpenseGroup

logger = logging.getLogger(__name__)


class GroupService:
    """Creates, lists and deletes expense groups under tier limits."""

    def __init__(self, repository: IGroupRepository, usage: UsageTracker):
        self._repository = repository
        self._usage = usage

    async def create_group(
        self,
        owner_id: str,
        name: str,
        cycle_start_day: int = 1,
        now: Optional[datetime] = None,
    ) -> CreateGroupResponse:
        """
        Raises:
            QuotaExceededError: Owner's tier allows no more groups
            SubscriptionInactiveError, SubscriptionExpiredError: Subscription can't be used
        """
        # A first group sets the billing cycle its owner is counted in.
        cycle_day = None if self._repository.list_groups(owner_id) else clamp_cycle_day(cycle_start_day)
        decision = await self._usage.consume(
            owner_id, ResourceKind.GROUPS, now=now, cycle_start_day=cycle_day
        )
        try:
            group = self._repository.create_group(owner_id, name, cycle_start_day)
        except Exception:
            logger.error(f"Group insert failed for user {owner_id}; releasing quota")
            await self._usage.release(
                owner_id, ResourceKind.GROUPS, now=now, cycle_start_day=cycle_day
            )
            raise

        await self._usage.consume(
            owner_id, ResourceKind.MEMBERS_PER_GROUP, group=group.id, now=now
        )
        logger.info(f"User {owner_id} created group {group.id}")
        return CreateGroupResponse(group=group, tier_decision=decision)

    async def list_groups(self, owner_id: str) -> list[ExpenseGroup]:
        return self._repository.list_groups(owner_id)

    async def get_group(self, group_id: str, acting_user: str) -> ExpenseGroup:
        """
        Raises:
            GroupNotFoundError: No such group
            GroupAccessDeniedError: Acting user doesn't own it
        """
        group = self._repository.get_group(group_id)
        if group is None:
            raise GroupNotFoundError(group_id)
        if group.owner_id != acting_user:
            raise GroupAccessDeniedError(group_id, acting_user)
        return group

    async def delete_group(
        self,
        group_id: str,
        acting_user: str,
        now: Optional[datetime] = None,
    ) -> None:
        group = await self.get_group(group_id, acting_user)
        cycle_day = self._usage.cycle_day_for(acting_user)
        # Gauge rows reference the group, so release before the delete.
        await self._usage.release(
            acting_user, ResourceKind.MEMBERS_PER_GROUP, group=group.id, now=now
        )
        if not self._repository.delete_group(group.id):
            raise GroupNotFoundError(group_id)
        await self._usage.release(
            acting_user, ResourceKind.GROUPS, now=now, cycle_start_day=cycle_day
        )
        logger.info(f"User {acting_user} deleted group {group_id}")
