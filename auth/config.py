"""Authentication configuration."""

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Role tags are the identity provider's raw strings; they are mapped to
    Role values once, when the identity context is built.
    """

    session_cookie_name: str = Field(
        default="stytch_session",
        description="Cookie carrying the identity provider session token",
    )
    admin_role_tags: frozenset[str] = Field(
        default=frozenset({"stytch_admin"}),
        description="Provider role tags that grant the admin capability",
    )
    member_role_tags: frozenset[str] = Field(
        default=frozenset({"stytch_member"}),
        description="Provider role tags that grant the plain member capability",
    )
    public_paths: tuple[str, ...] = Field(
        default=(
            "/api/notes/status",
            "/health",
            "/docs",
            "/openapi.json",
        ),
        description="Paths served without authentication",
    )
