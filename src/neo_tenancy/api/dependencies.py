"""Router dependencies.

These are placeholders. Applications override ``get_current_user_id`` and
``get_tenancy_services`` through ``app.dependency_overrides``; the
per-feature service dependencies resolve from the latter.
"""

from typing import Callable

from fastapi import Depends, Path

from ..core.exceptions import NotFoundError
from ..factory import TenancyServices
from ..features.invitations.services.invitation_service import InvitationService
from ..features.members.services.member_service import MemberService
from ..features.organizations.services.organization_service import OrganizationService
from ..features.teams.services.team_service import TeamService


def get_current_user_id() -> str:
    """Placeholder for the authenticated actor dependency.
    
    Applications should override this with their authentication scheme
    and return the caller's user id.
    """
    raise NotImplementedError(
        "Applications must provide their own current user dependency"
    )


def get_tenancy_services() -> TenancyServices:
    """Placeholder for the wired services dependency.
    
    Applications should override this to return the ``TenancyServices``
    built by ``create_tenancy_services``.
    """
    raise NotImplementedError(
        "Applications must provide their own tenancy services dependency"
    )


def get_organization_service(services: TenancyServices = Depends(get_tenancy_services)) -> OrganizationService:
    return services.organizations


def get_member_service(services: TenancyServices = Depends(get_tenancy_services)) -> MemberService:
    return services.members


def get_team_service(services: TenancyServices = Depends(get_tenancy_services)) -> TeamService:
    return services.teams


def get_invitation_service(services: TenancyServices = Depends(get_tenancy_services)) -> InvitationService:
    return services.invitations


def require_operation_permission(operation: str) -> Callable:
    """Dependency factory running the fine-grained check for ``operation``.

    The organization comes from the ``organization_id`` path parameter.
    Operations the permission map leaves unguarded pass through.

    Usage:
        @router.post("", dependencies=[Depends(require_operation_permission("create_team"))])
    """
    async def permission_dependency(
        organization_id: str = Path(..., description="Organization ID"),
        user_id: str = Depends(get_current_user_id),
        services: TenancyServices = Depends(get_tenancy_services)
    ) -> str:
        await services.permissions.require_permission(user_id, operation, organization_id)
        return user_id

    return permission_dependency


def require_invitation_permission(operation: str) -> Callable:
    """Like ``require_operation_permission`` for routes keyed by ``invitation_id``."""
    async def permission_dependency(
        invitation_id: str = Path(..., description="Invitation ID"),
        user_id: str = Depends(get_current_user_id),
        services: TenancyServices = Depends(get_tenancy_services)
    ) -> str:
        details = await services.invitations.get_invitation(invitation_id)
        if details is None:
            raise NotFoundError("Invitation", invitation_id, message="Invitation not found")
        await services.permissions.require_permission(user_id, operation, details.invitation.organization_id)
        return user_id

    return permission_dependency
