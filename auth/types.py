"""Pydantic models for the auth domain."""

from enum import Enum

from pydantic import BaseModel, Field


class Role(Enum):
    """Capability tags a member can hold within an organization."""

    ADMIN = "admin"
    MEMBER = "member"


class IdentityContext(BaseModel):
    """
    The pre-authenticated caller a note operation acts on behalf of.

    Built per request from the identity provider's answer. Never persisted.
    """

    member_id: str = Field(..., min_length=1)
    organization_id: str = Field(..., min_length=1)
    roles: frozenset[Role] = frozenset()

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles
