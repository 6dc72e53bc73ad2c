"""
Expense group repository implementations.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from supabase import Client

from shared.repository import BaseRepository
from modules.usage.period import clamp_cycle_day
from .models import ExpenseGroup


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


class InMemoryGroupRepository:
    """Dictionary-backed group store."""

    def __init__(self):
        self._lock = threading.Lock()
        self._groups: dict[str, ExpenseGroup] = {}

    def create_group(self, owner_id: str, name: str, cycle_start_day: int = 1) -> ExpenseGroup:
        group = ExpenseGroup(
            id=str(uuid.uuid4()),
            name=name,
            owner_id=owner_id,
            cycle_start_day=clamp_cycle_day(cycle_start_day),
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._groups[group.id] = group
        return group

    def get_group(self, group_id: str) -> Optional[ExpenseGroup]:
        return self._groups.get(group_id)

    def list_groups(self, owner_id: str) -> list[ExpenseGroup]:
        with self._lock:
            owned = [g for g in self._groups.values() if g.owner_id == owner_id]
        return sorted(owned, key=lambda g: g.created_at, reverse=True)

    def delete_group(self, group_id: str) -> bool:
        with self._lock:
            return self._groups.pop(group_id, None) is not None


class SupabaseGroupRepository(BaseRepository[ExpenseGroup]):
    """Group store on the ``expense_groups`` table."""

    def __init__(self, db: Client):
        super().__init__(db)

    def create_group(self, owner_id: str, name: str, cycle_start_day: int = 1) -> ExpenseGroup:
        with self._storage_call("create_group"):
            result = self._db.table("expense_groups").insert({
                "name": name,
                "owner_id": owner_id,
                "cycle_start_day": clamp_cycle_day(cycle_start_day),
            }).execute()
        return self._map_to_group(result.data[0])

    def get_group(self, group_id: str) -> Optional[ExpenseGroup]:
        if not _is_uuid(group_id):
            return None
        with self._storage_call("get_group"):
            result = self._db.table("expense_groups").select("*").eq("id", group_id).execute()
        if not result.data:
            return None
        return self._map_to_group(result.data[0])

    def list_groups(self, owner_id: str) -> list[ExpenseGroup]:
        with self._storage_call("list_groups"):
            result = (
                self._db.table("expense_groups")
                .select("*")
                .eq("owner_id", owner_id)
                .order("created_at", desc=True)
                .execute()
            )
        return [self._map_to_group(row) for row in result.data]

    def delete_group(self, group_id: str) -> bool:
        if not _is_uuid(group_id):
            return False
        with self._storage_call("delete_group"):
            result = self._db.table("expense_groups").delete().eq("id", group_id).execute()
        return bool(result.data)

    def _map_to_group(self, row: dict[str, Any]) -> ExpenseGroup:
        return ExpenseGroup(
            id=row["id"],
            name=row["name"],
            owner_id=row["owner_id"],
            cycle_start_day=row.get("cycle_start_day") or 1,
            created_at=datetime.fromisoformat(row["created_at"].replace("Z", "+00:00")),
        )
