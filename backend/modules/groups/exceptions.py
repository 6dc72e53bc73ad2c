"""
Expense group exceptions.
"""

from shared.exceptions import NotFoundError, ForbiddenError


class GroupNotFoundError(NotFoundError):
    """Raised when a group doesn't exist."""

    def __init__(self, group_id: str):
        super().__init__(
            f"Group not found: {group_id}",
            code="GROUP_NOT_FOUND",
            details={"group_id": group_id},
        )


class GroupAccessDeniedError(ForbiddenError):
    """Raised when a user acts on a group they don't own."""

    def __init__(self, group_id: str, user_id: str):
        super().__init__(
            "Only the group owner may perform this action",
            code="GROUP_ACCESS_DENIED",
            details={"group_id": group_id, "user_id": user_id},
        )
