"""
Subscription repository implementations.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from supabase import Client

from shared.exceptions import NotFoundError
from shared.repository import BaseRepository
from .models import Subscription, SubscriptionStatus, SubscriptionTier


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class InMemorySubscriptionRepository:
    """Dictionary of subscriptions keyed by user ID."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: dict[str, Subscription] = {}

    def get_subscription(self, user_id: str) -> Optional[Subscription]:
        return self._subscriptions.get(user_id)

    def create_if_absent(self, user_id: str) -> Subscription:
        with self._lock:
            existing = self._subscriptions.get(user_id)
            if existing is not None:
                return existing
            now = datetime.now(timezone.utc)
            subscription = Subscription(
                id=str(uuid.uuid4()),
                user_id=user_id,
                created_at=now,
                updated_at=now,
            )
            self._subscriptions[user_id] = subscription
            return subscription

    def update_subscription(
        self,
        user_id: str,
        tier: Optional[SubscriptionTier] = None,
        status: Optional[SubscriptionStatus] = None,
        current_period_end: Optional[datetime] = None,
    ) -> Subscription:
        with self._lock:
            existing = self._subscriptions.get(user_id)
            if existing is None:
                raise NotFoundError(f"No subscription for user {user_id}", code="SUBSCRIPTION_NOT_FOUND")
            update: dict[str, Any] = {"updated_at": datetime.now(timezone.utc)}
            if tier is not None:
                update["tier"] = tier
            if status is not None:
                update["status"] = status
            if current_period_end is not None:
                update["current_period_end"] = current_period_end
            updated = existing.model_copy(update=update)
            self._subscriptions[user_id] = updated
            return updated


class SupabaseSubscriptionRepository(BaseRepository[Subscription]):
    """Subscriptions on the ``subscriptions`` table (unique on user_id)."""

    def __init__(self, db: Client):
        super().__init__(db)

    def get_subscription(self, user_id: str) -> Optional[Subscription]:
        with self._storage_call("get_subscription"):
            result = self._db.table("subscriptions").select("*").eq("user_id", user_id).execute()
        if not result.data:
            return None
        return self._map_to_subscription(result.data[0])

    def create_if_absent(self, user_id: str) -> Subscription:
        with self._storage_call("create_subscription"):
            self._db.table("subscriptions").upsert(
                {
                    "user_id": user_id,
                    "tier": SubscriptionTier.FREE.value,
                    "status": SubscriptionStatus.ACTIVE.value,
                },
                on_conflict="user_id",
                ignore_duplicates=True,
            ).execute()
        subscription = self.get_subscription(user_id)
        if subscription is None:
            raise NotFoundError(f"No subscription for user {user_id}", code="SUBSCRIPTION_NOT_FOUND")
        return subscription

    def update_subscription(
        self,
        user_id: str,
        tier: Optional[SubscriptionTier] = None,
        status: Optional[SubscriptionStatus] = None,
        current_period_end: Optional[datetime] = None,
    ) -> Subscription:
        update: dict[str, Any] = {"updated_at": datetime.now(timezone.utc).isoformat()}
        if tier is not None:
            update["tier"] = tier.value
        if status is not None:
            update["status"] = status.value
        if current_period_end is not None:
            update["current_period_end"] = current_period_end.isoformat()
        with self._storage_call("update_subscription"):
            result = self._db.table("subscriptions").update(update).eq("user_id", user_id).execute()
        if not result.data:
            raise NotFoundError(f"No subscription for user {user_id}", code="SUBSCRIPTION_NOT_FOUND")
        return self._map_to_subscription(result.data[0])

    def _map_to_subscription(self, row: dict[str, Any]) -> Subscription:
        return Subscription(
            id=row["id"],
            user_id=row["user_id"],
            tier=SubscriptionTier(row["tier"]),
            status=SubscriptionStatus(row["status"]),
            current_period_start=_parse_ts(row.get("current_period_start")),
            current_period_end=_parse_ts(row.get("current_period_end")),
            cancel_at_period_end=row.get("cancel_at_period_end", False),
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
        )
