"""
Expense group interfaces.

IGroupDirectory is the read-only view the chat binding and usage modules
need; IGroupRepository adds the writes used by the groups routes.
"""

from typing import Protocol, Optional, runtime_checkable

from .models import ExpenseGroup


@runtime_checkable
class IGroupDirectory(Protocol):
    """Lookup of expense groups by ID."""

    def get_group(self, group_id: str) -> Optional[ExpenseGroup]:
        """Return the group, or None if it doesn't exist or the ID is malformed."""
        ...


@runtime_checkable
class IGroupRepository(IGroupDirectory, Protocol):
    """Storage contract for expense groups."""

    def create_group(self, owner_id: str, name: str, cycle_start_day: int) -> ExpenseGroup:
        ...

    def list_groups(self, owner_id: str) -> list[ExpenseGroup]:
        """Groups owned by ``owner_id``, newest first."""
        ...

    def delete_group(self, group_id: str) -> bool:
        """Delete a group. Returns False if it was already gone."""
        ...
