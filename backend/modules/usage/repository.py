"""
Usage repository implementations.

InMemoryUsageRepository keeps each guarded increment inside a single lock
acquisition. SupabaseUsageRepository delegates guarded increments to the
``increment_usage_guarded``, ``increment_group_usage_guarded`` and
``increment_member_usage_guarded`` SQL functions, which do the check and
the update in one transaction.
"""

import threading
import uuid
from datetime import date
from typing import Any, Optional

from supabase import Client

from modules.billing.models import ResourceKind
from shared.exceptions import StorageUnavailableError
from shared.repository import BaseRepository
from .interfaces import USAGE_FIELDS
from .models import BillingPeriod, UsageRecord


def _apply(current: int, delta: int, limit: Optional[int]) -> Optional[int]:
    updated = max(current + delta, 0)
    if delta > 0 and limit is not None and updated > limit:
        return None
    return updated


class InMemoryUsageRepository:
    """Lock-guarded dictionaries of usage records and group gauges."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: dict[tuple[str, date, date], UsageRecord] = {}
        self._group_usage: dict[tuple[str, ResourceKind], int] = {}

    def get_record(self, user_id: str, period: BillingPeriod) -> Optional[UsageRecord]:
        return self._records.get((user_id, period.start, period.end))

    def get_latest_record(self, user_id: str) -> Optional[UsageRecord]:
        with self._lock:
            mine = [r for (uid, _, _), r in self._records.items() if uid == user_id]
        if not mine:
            return None
        return max(mine, key=lambda r: r.period_start)

    def create_record_if_absent(
        self,
        user_id: str,
        period: BillingPeriod,
        groups_count: int = 0,
        total_members: int = 0,
    ) -> UsageRecord:
        key = (user_id, period.start, period.end)
        with self._lock:
            existing = self._records.get(key)
            if existing is not None:
                return existing
            record = UsageRecord(
                id=str(uuid.uuid4()),
                user_id=user_id,
                period_start=period.start,
                period_end=period.end,
                groups_count=groups_count,
                total_members=total_members,
            )
            self._records[key] = record
            return record

    def increment_usage(
        self,
        user_id: str,
        period: BillingPeriod,
        field: str,
        delta: int,
        limit: Optional[int] = None,
    ) -> Optional[int]:
        if field not in USAGE_FIELDS:
            raise ValueError(f"Unknown usage field: {field}")
        key = (user_id, period.start, period.end)
        with self._lock:
            record = self._records.get(key)
            if record is None:
                raise KeyError(f"No usage record for {user_id} in {period.start}..{period.end}")
            updated = _apply(getattr(record, field), delta, limit)
            if updated is None:
                return None
            self._records[key] = record.model_copy(update={field: updated})
            return updated

    def get_group_usage(self, group_id: str, kind: ResourceKind) -> int:
        return self._group_usage.get((group_id, kind), 0)

    def increment_group_usage(
        self,
        group_id: str,
        kind: ResourceKind,
        delta: int,
        limit: Optional[int] = None,
    ) -> Optional[int]:
        key = (group_id, kind)
        with self._lock:
            updated = _apply(self._group_usage.get(key, 0), delta, limit)
            if updated is None:
                return None
            self._group_usage[key] = updated
            return updated

    def increment_member_usage(
        self,
        group_id: str,
        user_id: str,
        period: BillingPeriod,
        delta: int,
        limit: Optional[int] = None,
    ) -> Optional[int]:
        gauge_key = (group_id, ResourceKind.MEMBERS_PER_GROUP)
        record_key = (user_id, period.start, period.end)
        with self._lock:
            record = self._records.get(record_key)
            if record is None:
                raise KeyError(f"No usage record for {user_id} in {period.start}..{period.end}")
            updated = _apply(self._group_usage.get(gauge_key, 0), delta, limit)
            if updated is None:
                return None
            self._group_usage[gauge_key] = updated
            self._records[record_key] = record.model_copy(
                update={"total_members": max(record.total_members + delta, 0)}
            )
            return updated


class SupabaseUsageRepository(BaseRepository[UsageRecord]):
    """Usage on the ``user_usage`` and ``group_usage`` tables."""

    def __init__(self, db: Client):
        super().__init__(db)

    def get_record(self, user_id: str, period: BillingPeriod) -> Optional[UsageRecord]:
        with self._storage_call("get_usage_record"):
            result = (
                self._db.table("user_usage")
                .select("*")
                .eq("user_id", user_id)
                .eq("period_start", period.start.isoformat())
                .eq("period_end", period.end.isoformat())
                .execute()
            )
        if not result.data:
            return None
        return self._map_to_record(result.data[0])

    def get_latest_record(self, user_id: str) -> Optional[UsageRecord]:
        with self._storage_call("get_latest_usage_record"):
            result = (
                self._db.table("user_usage")
                .select("*")
                .eq("user_id", user_id)
                .order("period_start", desc=True)
                .limit(1)
                .execute()
            )
        if not result.data:
            return None
        return self._map_to_record(result.data[0])

    def create_record_if_absent(
        self,
        user_id: str,
        period: BillingPeriod,
        groups_count: int = 0,
        total_members: int = 0,
    ) -> UsageRecord:
        with self._storage_call("create_usage_record"):
            self._db.table("user_usage").upsert(
                {
                    "user_id": user_id,
                    "period_start": period.start.isoformat(),
                    "period_end": period.end.isoformat(),
                    "groups_count": groups_count,
                    "total_members": total_members,
                },
                on_conflict="user_id,period_start,period_end",
                ignore_duplicates=True,
            ).execute()
        record = self.get_record(user_id, period)
        if record is None:
            raise StorageUnavailableError(operation="create_usage_record")
        return record

    def increment_usage(
        self,
        user_id: str,
        period: BillingPeriod,
        field: str,
        delta: int,
        limit: Optional[int] = None,
    ) -> Optional[int]:
        if field not in USAGE_FIELDS:
            raise ValueError(f"Unknown usage field: {field}")
        with self._storage_call("increment_usage"):
            result = self._db.rpc("increment_usage_guarded", {
                "p_user_id": user_id,
                "p_period_start": period.start.isoformat(),
                "p_period_end": period.end.isoformat(),
                "p_field": field,
                "p_delta": delta,
                "p_limit": limit,
            }).execute()
        return result.data

    def get_group_usage(self, group_id: str, kind: ResourceKind) -> int:
        with self._storage_call("get_group_usage"):
            result = (
                self._db.table("group_usage")
                .select("count")
                .eq("group_id", group_id)
                .eq("kind", kind.value)
                .execute()
            )
        if not result.data:
            return 0
        return result.data[0]["count"]

    def increment_group_usage(
        self,
        group_id: str,
        kind: ResourceKind,
        delta: int,
        limit: Optional[int] = None,
    ) -> Optional[int]:
        with self._storage_call("increment_group_usage"):
            result = self._db.rpc("increment_group_usage_guarded", {
                "p_group_id": group_id,
                "p_kind": kind.value,
                "p_delta": delta,
                "p_limit": limit,
            }).execute()
        return result.data

    def increment_member_usage(
        self,
        group_id: str,
        user_id: str,
        period: BillingPeriod,
        delta: int,
        limit: Optional[int] = None,
    ) -> Optional[int]:
        with self._storage_call("increment_member_usage"):
            result = self._db.rpc("increment_member_usage_guarded", {
                "p_group_id": group_id,
                "p_user_id": user_id,
                "p_period_start": period.start.isoformat(),
                "p_period_end": period.end.isoformat(),
                "p_delta": delta,
                "p_limit": limit,
            }).execute()
        return result.data

    def _map_to_record(self, row: dict[str, Any]) -> UsageRecord:
        return UsageRecord(
            id=row["id"],
            user_id=row["user_id"],
            period_start=date.fromisoformat(row["period_start"]),
            period_end=date.fromisoformat(row["period_end"]),
            groups_count=row.get("groups_count", 0),
            total_expenses=row.get("total_expenses", 0),
            total_members=row.get("total_members", 0),
        )
