"""
Usage tracking module exceptions.
"""

from decimal import Decimal
from typing import Optional

from shared.exceptions import LimitExceededError, ValidationError


class QuotaExceededError(LimitExceededError):
    """
    Raised when creating a resource would exceed the tier ceiling.

    Details carry the numbers and the suggested upgrade so the client can
    render an upgrade prompt.
    """

    def __init__(
        self,
        kind: str,
        current: int,
        limit: int,
        current_tier: str,
        suggested_tier: Optional[str] = None,
        suggested_price_usd: Optional[Decimal] = None,
    ):
        message = f"You've reached your {kind} limit ({current}/{limit}) on the {current_tier} tier."
        if suggested_tier:
            message += (
                f" Consider upgrading to {suggested_tier.capitalize()}"
                f" for ${suggested_price_usd}/month to increase it."
            )
        super().__init__(
            message,
            code="LIMIT_EXCEEDED",
            details={
                "kind": kind,
                "current": current,
                "limit": limit,
                "current_tier": current_tier,
                "suggested_tier": suggested_tier,
                "suggested_price_usd": str(suggested_price_usd) if suggested_price_usd is not None else None,
            },
        )


class GroupRequiredError(ValidationError):
    """Raised when a per-group resource kind is used without a group."""

    def __init__(self, kind: str):
        super().__init__(
            f"Resource kind '{kind}' is counted per group; a group_id is required",
            code="GROUP_REQUIRED",
            details={"kind": kind},
        )


class InvalidDeltaError(ValidationError):
    """Raised when a usage delta is not a positive integer."""

    def __init__(self, delta: int):
        super().__init__(
            f"Usage delta must be positive, got {delta}",
            code="INVALID_DELTA",
            details={"delta": delta},
        )
