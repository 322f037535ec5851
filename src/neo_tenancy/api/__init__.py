"""HTTP surface for neo-tenancy.

Exception handlers, router dependencies and a helper that bundles every
feature router so applications can mount the whole directory at once.
"""

from typing import Optional

from fastapi import APIRouter

from .dependencies import (
    get_current_user_id,
    get_tenancy_services,
    get_organization_service,
    get_member_service,
    get_team_service,
    get_invitation_service,
    require_operation_permission,
    require_invitation_permission,
)
from .exception_handlers import ExceptionHandlerRegistry, register_exception_handlers
from ..features.invitations.routers import invitation_router, organization_invitations_router
from ..features.members.routers import member_router
from ..features.organizations.routers import organization_router
from ..features.teams.routers import team_router


def create_tenancy_router(prefix: Optional[str] = None) -> APIRouter:
    """Bundle the organization, member, team and invitation routers.
    
    Args:
        prefix: Optional path prefix, e.g. ``/api/v1``
    """
    router = APIRouter(prefix=prefix or "")
    router.include_router(organization_router)
    router.include_router(member_router)
    router.include_router(team_router)
    router.include_router(organization_invitations_router)
    router.include_router(invitation_router)
    return router


__all__ = [
    # Dependencies
    "get_current_user_id",
    "get_tenancy_services",
    "get_organization_service",
    "get_member_service",
    "get_team_service",
    "get_invitation_service",
    "require_operation_permission",
    "require_invitation_permission",
    
    # Exception handling
    "ExceptionHandlerRegistry",
    "register_exception_handlers",
    
    # Routers
    "organization_router",
    "member_router",
    "team_router",
    "organization_invitations_router",
    "invitation_router",
    "create_tenancy_router",
]
