"""
Binding lookup for relay-authenticated requests.
"""

import uuid

from .exceptions import UnknownBindingError, RevokedBindingError
from .interfaces import IChatBindingRepository
from .models import ChatBinding


class ChatBindingResolver:
    """Loads a binding by ID and insists it is still live."""

    def __init__(self, repository: IChatBindingRepository):
        self._repository = repository

    async def resolve(self, binding_id: str) -> ChatBinding:
        """
        Raises:
            UnknownBindingError: ID is not a UUID or names no binding
            RevokedBindingError: Binding is no longer active
        """
        try:
            uuid.UUID(binding_id)
        except (ValueError, TypeError, AttributeError):
            raise UnknownBindingError(str(binding_id))

        binding = self._repository.get_binding(binding_id)
        if binding is None:
            raise UnknownBindingError(binding_id)
        if not binding.is_active:
            raise RevokedBindingError(binding_id)
        return binding
