"""
Usage tracking module interfaces.

The increment methods are the atomic check-and-increment primitives:
each applies ``delta`` only if the result stays within ``limit`` and
reports the new value, all as one indivisible step.
"""

from typing import Protocol, Optional, runtime_checkable

from modules.billing.models import ResourceKind

from .models import BillingPeriod, UsageRecord

# Columns of a usage record that can be incremented.
USAGE_FIELDS = ("groups_count", "total_expenses", "total_members")


@runtime_checkable
class IUsageRepository(Protocol):
    """Storage contract for usage records and per-group gauges."""

    def get_record(self, user_id: str, period: BillingPeriod) -> Optional[UsageRecord]:
        ...

    def get_latest_record(self, user_id: str) -> Optional[UsageRecord]:
        """Most recent record by period start, regardless of period."""
        ...

    def create_record_if_absent(
        self,
        user_id: str,
        period: BillingPeriod,
        groups_count: int = 0,
        total_members: int = 0,
    ) -> UsageRecord:
        """Insert a record for the period unless one exists; return the surviving row."""
        ...

    def increment_usage(
        self,
        user_id: str,
        period: BillingPeriod,
        field: str,
        delta: int,
        limit: Optional[int] = None,
    ) -> Optional[int]:
        """
        Add ``delta`` to ``field`` of the period's record.

        Returns the new value, or None if ``limit`` would be exceeded.
        Negative deltas never take the value below zero.
        """
        ...

    def get_group_usage(self, group_id: str, kind: ResourceKind) -> int:
        ...

    def increment_group_usage(
        self,
        group_id: str,
        kind: ResourceKind,
        delta: int,
        limit: Optional[int] = None,
    ) -> Optional[int]:
        """Same contract as increment_usage, for a per-group gauge."""
        ...

    def increment_member_usage(
        self,
        group_id: str,
        user_id: str,
        period: BillingPeriod,
        delta: int,
        limit: Optional[int] = None,
    ) -> Optional[int]:
        """
        Move a group's member gauge and the user's ``total_members`` together.

        The ceiling guards the group gauge only. Returns the gauge's new
        value, or None if nothing was changed.
        """
        ...
