"""
Billing module exceptions.

These exceptions are raised by the billing module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from datetime import datetime
from typing import Optional

from shared.exceptions import ForbiddenError, PaymentRequiredError


class SubscriptionInactiveError(PaymentRequiredError):
    """Raised when a subscription's status is anything but active."""

    def __init__(self, user_id: str, status: str):
        super().__init__(
            "Your subscription is not active. Please renew your subscription.",
            code="SUBSCRIPTION_INACTIVE",
            details={"user_id": user_id, "status": status},
        )


class SubscriptionExpiredError(PaymentRequiredError):
    """Raised when an active subscription is past its period end."""

    def __init__(self, user_id: str, period_end: Optional[datetime] = None):
        super().__init__(
            "Your subscription has expired. Please renew your subscription.",
            code="SUBSCRIPTION_EXPIRED",
            details={
                "user_id": user_id,
                "current_period_end": period_end.isoformat() if period_end else None,
            },
        )


class FeatureNotAvailableError(ForbiddenError):
    """Raised when the current tier doesn't include a feature."""

    def __init__(self, feature: str, current_tier: str, required_tier: Optional[str] = None):
        super().__init__(
            f"Feature '{feature}' is not available on the {current_tier} tier",
            code="FEATURE_NOT_AVAILABLE",
            details={
                "feature": feature,
                "current_tier": current_tier,
                "required_tier": required_tier,
            },
        )
