"""
User-related endpoints.

Provides registration, password login and the current user's profile.
"""

from fastapi import APIRouter, Depends, status

from modules.auth.models import LoginRequest, RegisterRequest, TokenResponse, UserProfile
from modules.auth.service import UserService
from modules.billing.service import SubscriptionService
from shared.models import WebAuthContext

from ..dependencies import get_subscription_service, get_user_service
from ..middleware.auth import require_web_context

router = APIRouter()


@router.post("/register", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    users: UserService = Depends(get_user_service),
    subscriptions: SubscriptionService = Depends(get_subscription_service),
) -> UserProfile:
    """Create an account. New users start on the free tier."""
    user = await users.register(body.email, body.password)
    subscription = await subscriptions.get_subscription(user.id)
    return UserProfile(
        id=user.id,
        email=user.email,
        created_at=user.created_at,
        tier=subscription.tier.value,
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    users: UserService = Depends(get_user_service),
) -> TokenResponse:
    """Exchange email and password for a web bearer token."""
    result = await users.login(body.email, body.password)
    return TokenResponse(access_token=result.access_token, expires_at=result.expires_at)


@router.get("/me", response_model=UserProfile)
async def get_current_user_profile(
    context: WebAuthContext = Depends(require_web_context),
    users: UserService = Depends(get_user_service),
    subscriptions: SubscriptionService = Depends(get_subscription_service),
) -> UserProfile:
    """
    Get the current user's profile.

    Requires a web session.
    """
    user = await users.get_user(context.user_id)
    subscription = await subscriptions.get_subscription(user.id)
    return UserProfile(
        id=user.id,
        email=user.email,
        created_at=user.created_at,
        tier=subscription.tier.value,
    )
