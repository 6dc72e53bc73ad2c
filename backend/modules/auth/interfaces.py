"""
Authentication module interfaces.

Other modules should depend on these protocols, not the concrete
implementations. This enables testing with in-memory stores.
"""

from typing import Protocol, Optional, runtime_checkable

from modules.chat_binding.models import ChatBinding

from .models import User


@runtime_checkable
class IUserRepository(Protocol):
    """Storage contract for user accounts."""

    def create_user(self, email: str, password_hash: str) -> User:
        """
        Insert a new user.

        Raises:
            EmailAlreadyRegisteredError: If the email is already taken
        """
        ...

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        ...


@runtime_checkable
class IBindingResolver(Protocol):
    """Loads the live chat binding behind a relay request."""

    async def resolve(self, binding_id: str) -> ChatBinding:
        """
        Return the binding if it exists and is active.

        Raises:
            UnknownBindingError: No such binding
            RevokedBindingError: Binding exists but is no longer active
        """
        ...
