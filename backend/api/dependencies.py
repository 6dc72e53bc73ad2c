"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its storage through an interface,
and this file picks the concrete implementations for the configured
storage backend ("memory" or "supabase").
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports (avoids import cycles at module load)
if TYPE_CHECKING:
    from modules.auth.interfaces import IUserRepository
    from modules.auth.relay import RelayRequestVerifier
    from modules.auth.resolver import AuthContextResolver
    from modules.auth.service import UserService
    from modules.auth.tokens import TokenAuthenticator
    from modules.billing.interfaces import ISubscriptionRepository
    from modules.billing.policy import TierPolicyEngine
    from modules.billing.service import SubscriptionService
    from modules.chat_binding.interfaces import IChatBindingRepository
    from modules.chat_binding.resolver import ChatBindingResolver
    from modules.chat_binding.service import BindRequestService, ChatBindingService
    from modules.groups.interfaces import IGroupRepository
    from modules.groups.service import GroupService
    from modules.usage.interfaces import IUsageRepository
    from modules.usage.service import UsageTracker


class ServiceContainer:
    """
    Container for all service instances.

    Services and repositories are created lazily on first access and cached
    within the container. Secrets reach the authenticators here, at
    construction, and nowhere else.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._instances: dict[str, object] = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    def _get(self, name: str, factory):
        if name not in self._instances:
            self._instances[name] = factory()
        return self._instances[name]

    @property
    def _uses_supabase(self) -> bool:
        return self._settings.storage_backend == "supabase"

    def _db(self):
        from shared.database import get_supabase_client
        return get_supabase_client()

    # -------------------------------------------------------------------------
    # Repositories
    # -------------------------------------------------------------------------

    @property
    def user_repository(self) -> "IUserRepository":
        def build():
            from modules.auth.repository import InMemoryUserRepository, SupabaseUserRepository
            if self._uses_supabase:
                return SupabaseUserRepository(self._db())
            return InMemoryUserRepository()
        return self._get("user_repository", build)

    @property
    def binding_repository(self) -> "IChatBindingRepository":
        def build():
            from modules.chat_binding.repository import (
                InMemoryChatBindingRepository,
                SupabaseChatBindingRepository,
            )
            if self._uses_supabase:
                return SupabaseChatBindingRepository(self._db())
            return InMemoryChatBindingRepository()
        return self._get("binding_repository", build)

    @property
    def subscription_repository(self) -> "ISubscriptionRepository":
        def build():
            from modules.billing.repository import (
                InMemorySubscriptionRepository,
                SupabaseSubscriptionRepository,
            )
            if self._uses_supabase:
                return SupabaseSubscriptionRepository(self._db())
            return InMemorySubscriptionRepository()
        return self._get("subscription_repository", build)

    @property
    def usage_repository(self) -> "IUsageRepository":
        def build():
            from modules.usage.repository import InMemoryUsageRepository, SupabaseUsageRepository
            if self._uses_supabase:
                return SupabaseUsageRepository(self._db())
            return InMemoryUsageRepository()
        return self._get("usage_repository", build)

    @property
    def group_repository(self) -> "IGroupRepository":
        def build():
            from modules.groups.repository import InMemoryGroupRepository, SupabaseGroupRepository
            if self._uses_supabase:
                return SupabaseGroupRepository(self._db())
            return InMemoryGroupRepository()
        return self._get("group_repository", build)

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    @property
    def tokens(self) -> "TokenAuthenticator":
        def build():
            from modules.auth.tokens import TokenAuthenticator
            return TokenAuthenticator(
                self._settings.jwt_secrets,
                ttl_seconds=self._settings.web_token_ttl_seconds,
            )
        return self._get("tokens", build)

    @property
    def relay(self) -> "RelayRequestVerifier":
        def build():
            from modules.auth.relay import RelayRequestVerifier
            return RelayRequestVerifier(self._settings.chat_relay_secrets)
        return self._get("relay", build)

    @property
    def binding_resolver(self) -> "ChatBindingResolver":
        def build():
            from modules.chat_binding.resolver import ChatBindingResolver
            return ChatBindingResolver(self.binding_repository)
        return self._get("binding_resolver", build)

    @property
    def auth_resolver(self) -> "AuthContextResolver":
        def build():
            from modules.auth.resolver import AuthContextResolver
            return AuthContextResolver(self.tokens, self.relay, self.binding_resolver)
        return self._get("auth_resolver", build)

    @property
    def users(self) -> "UserService":
        def build():
            from modules.auth.service import UserService
            return UserService(self.user_repository, self.tokens)
        return self._get("users", build)

    # -------------------------------------------------------------------------
    # Chat binding
    # -------------------------------------------------------------------------

    @property
    def bind_requests(self) -> "BindRequestService":
        def build():
            from modules.chat_binding.service import BindRequestService
            return BindRequestService(
                self.binding_repository,
                ttl_minutes=self._settings.bind_request_ttl_minutes,
                bind_url_base=self._settings.chat_bind_url,
            )
        return self._get("bind_requests", build)

    @property
    def chat_bindings(self) -> "ChatBindingService":
        def build():
            from modules.chat_binding.service import ChatBindingService
            return ChatBindingService(self.bind_requests, self.binding_repository, self.group_repository)
        return self._get("chat_bindings", build)

    # -------------------------------------------------------------------------
    # Billing, usage, groups
    # -------------------------------------------------------------------------

    @property
    def policy(self) -> "TierPolicyEngine":
        def build():
            from modules.billing.policy import TierPolicyEngine
            return TierPolicyEngine(approaching_ratio=self._settings.approaching_limit_ratio)
        return self._get("policy", build)

    @property
    def subscriptions(self) -> "SubscriptionService":
        def build():
            from modules.billing.service import SubscriptionService
            return SubscriptionService(self.subscription_repository)
        return self._get("subscriptions", build)

    @property
    def usage(self) -> "UsageTracker":
        def build():
            from modules.usage.service import UsageTracker
            return UsageTracker(
                self.usage_repository,
                self.subscriptions,
                self.policy,
                default_cycle_start_day=self._settings.default_cycle_start_day,
                groups=self.group_repository,
            )
        return self._get("usage", build)

    @property
    def groups(self) -> "GroupService":
        def build():
            from modules.groups.service import GroupService
            return GroupService(self.group_repository, self.usage)
        return self._get("groups", build)

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - in-memory stores start empty again.
        """
        self._instances.clear()


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_resolver() -> "AuthContextResolver":
    return get_container().auth_resolver


def get_relay_verifier() -> "RelayRequestVerifier":
    return get_container().relay


def get_user_service() -> "UserService":
    return get_container().users


def get_bind_request_service() -> "BindRequestService":
    return get_container().bind_requests


def get_chat_binding_service() -> "ChatBindingService":
    return get_container().chat_bindings


def get_subscription_service() -> "SubscriptionService":
    return get_container().subscriptions


def get_usage_tracker() -> "UsageTracker":
    return get_container().usage


def get_group_service() -> "GroupService":
    return get_container().groups
