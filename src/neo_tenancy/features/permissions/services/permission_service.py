"""Permission checks for directory operations.

Coarse gating uses the role hierarchy over Member rows and runs inside the
mutating transaction. ``require_permission`` layers the fine-grained
permission map on top through the authorization client.
"""

import logging
from typing import Optional

from ....config.constants import OrganizationStatus
from ....core.exceptions import ForbiddenError, NotFoundError
from ...authz.entities.protocols import AuthorizationClient
from ...authz.entities.scope import Scope
from ...directory.entities.protocols import DirectoryStore, DirectoryTransaction
from ...members.entities.member import Member
from ...organizations.entities.organization import Organization
from ..entities.role_hierarchy import PermissionCheck, RoleLike, has_at_least
from ..utils.permission_map import PermissionMap, permission_for

logger = logging.getLogger(__name__)


class PermissionService:
    """Role hierarchy gate plus optional fine-grained permission checks."""

    def __init__(
        self,
        store: DirectoryStore,
        authz_client: Optional[AuthorizationClient] = None,
        permission_map: Optional[PermissionMap] = None,
        enforce_organization_status: bool = True,
    ):
        self._store = store
        self._authz = authz_client
        self._permission_map = permission_map
        self._enforce_organization_status = enforce_organization_status

    async def check_permission(self, organization_id: str, user_id: str, min_role: RoleLike) -> PermissionCheck:
        """Non-raising role check; non-members get ``PermissionCheck(False, None)``."""
        async with self._store.transaction() as tx:
            member = await tx.get_member(organization_id, user_id)
        if member is None:
            return PermissionCheck(has_permission=False, current_role=None)
        return PermissionCheck(has_permission=has_at_least(member.role, min_role), current_role=member.role)

    @staticmethod
    async def get_organization_or_raise(tx: DirectoryTransaction, organization_id: str) -> Organization:
        organization = await tx.get_organization(organization_id)
        if organization is None:
            raise NotFoundError("Organization", organization_id)
        return organization

    @staticmethod
    async def require_membership(tx: DirectoryTransaction, organization_id: str, user_id: str) -> Member:
        """Return the caller's Member row or raise ForbiddenError."""
        member = await tx.get_member(organization_id, user_id)
        if member is None:
            raise ForbiddenError(
                "Not a member of this organization",
                details={"organization_id": organization_id, "user_id": user_id},
            )
        return member

    async def require_role(
        self,
        tx: DirectoryTransaction,
        organization_id: str,
        user_id: str,
        min_role: RoleLike,
        allow_suspended: bool = False,
    ) -> Member:
        """Mutation-time gate.

        Raises:
            ForbiddenError: Not a member, suspended, or below ``min_role``
        """
        member = await self.require_membership(tx, organization_id, user_id)
        if member.is_suspended and not allow_suspended:
            raise ForbiddenError("Your membership is suspended. You cannot perform this action.")
        if not has_at_least(member.role, min_role):
            required = getattr(min_role, "value", min_role)
            raise ForbiddenError(
                f"Insufficient permissions: requires {required} role or higher",
                details={"required_role": required, "current_role": member.role},
            )
        return member

    def require_active_organization(self, organization: Organization) -> None:
        """Reject mutations on suspended or archived organizations."""
        if not self._enforce_organization_status or organization.is_active:
            return
        if organization.status == OrganizationStatus.SUSPENDED:
            raise ForbiddenError("Organization is suspended", details={"organization_id": organization.id})
        raise ForbiddenError("Organization is archived", details={"organization_id": organization.id})

    async def require_permission(self, user_id: str, operation: str, organization_id: str) -> None:
        """Fine-grained check through the authorization client.

        Operations mapped to ``False`` (or missing from the map) are not checked.
        """
        permission = permission_for(operation, self._permission_map)
        if permission is None:
            return
        if self._authz is None:
            raise ForbiddenError(f"No authorization client configured to check {permission}")
        logger.debug(f"Checking {permission} for {user_id} in organization {organization_id}")
        await self._authz.require(user_id, permission, Scope.organization(organization_id))
