"""HTTP routes for identity introspection."""

from fastapi import APIRouter

from api.base import success_response
from utils.identity_context import get_current_identity


def create_identity_router() -> APIRouter:
    """Create router exposing the caller's resolved identity."""
    router = APIRouter(tags=["auth"])

    @router.get("/whoami")
    async def whoami():
        """Current member, organization and roles as the notes service sees them."""
        identity = get_current_identity()
        return success_response({
            "member_id": identity.member_id,
            "organization_id": identity.organization_id,
            "roles": sorted(role.value for role in identity.roles),
            "is_admin": identity.is_admin,
        }).model_dump(mode="json")

    return router
