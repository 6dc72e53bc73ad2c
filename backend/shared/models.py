"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field


class WebAuthContext(BaseModel):
    """
    Identity resolved from a bearer token issued to a web session.

    Web contexts are not scoped to a group; handlers check group
    membership themselves.
    """

    source: Literal["web"] = "web"
    user_id: str = Field(..., description="Authenticated user ID")

    model_config = {"frozen": True}

    @property
    def group_id(self) -> Optional[str]:
        return None


class ChatAuthContext(BaseModel):
    """
    Identity resolved from a relay-signed request on behalf of a bound chat.

    The acting user is whoever created the binding, and every write is
    confined to the bound group.
    """

    source: Literal["chat"] = "chat"
    user_id: str = Field(..., description="User who created the binding")
    group_id: str = Field(..., description="Group the chat is bound to")
    binding_id: str = Field(..., description="Binding that authorized the request")

    model_config = {"frozen": True}


AuthContext = Annotated[
    Union[WebAuthContext, ChatAuthContext],
    Field(discriminator="source"),
]
"""Per-request identity. Built fresh for every request and never persisted."""
