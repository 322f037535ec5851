"""Atomic ownership transfer.

Shared by ``OrganizationService.transfer_ownership`` and promotion to owner
through ``MemberService.update_member_role``. Runs inside the caller's
transaction: the organization's ``owner_id``, the previous owner's role and
the new owner's role change together or not at all.
"""

from dataclasses import dataclass
from typing import List

from ....config.constants import InvitationRole, OrgRole
from ....core.exceptions import ForbiddenError, InvalidArgumentError, InvalidStateError, NotFoundError
from ...authz.entities.commands import SyncCommand
from ...authz.services.sync_adapter import AuthorizationSyncAdapter
from ...directory.entities.protocols import DirectoryTransaction
from ...members.entities.member import Member
from ...organizations.entities.organization import Organization


@dataclass
class OwnershipTransfer:
    organization: Organization
    previous_owner: Member
    new_owner: Member
    new_owner_previous_role: str

    def sync_commands(self, changed_by: str) -> List[SyncCommand]:
        return AuthorizationSyncAdapter.ownership_transferred_commands(
            self.organization.id,
            self.previous_owner.user_id,
            self.previous_owner.role,
            self.new_owner.user_id,
            self.new_owner_previous_role,
            changed_by,
        )


async def transfer_ownership_in_transaction(
    tx: DirectoryTransaction,
    organization: Organization,
    actor_id: str,
    new_owner_id: str,
    previous_owner_role: str = OrgRole.ADMIN.value,
) -> OwnershipTransfer:
    """Move ownership from ``actor_id`` to ``new_owner_id``.

    Raises:
        ForbiddenError: Actor is not the current owner
        InvalidArgumentError: Same user, or ``previous_owner_role`` is not admin/member
        InvalidStateError: New owner is suspended
        NotFoundError: New owner is not a member
    """
    if organization.owner_id != actor_id:
        raise ForbiddenError("Only the current owner can transfer ownership")
    if new_owner_id == actor_id:
        raise InvalidArgumentError("New owner must be a different user")
    if previous_owner_role not in {r.value for r in InvitationRole}:
        raise InvalidArgumentError(f"Invalid role for the previous owner: {previous_owner_role}")

    new_owner = await tx.get_member(organization.id, new_owner_id)
    if new_owner is None:
        raise NotFoundError(
            "Member", new_owner_id, message="New owner must already be a member of the organization"
        )
    if new_owner.is_suspended:
        raise InvalidStateError("Cannot transfer ownership to a suspended member")
    current_owner = await tx.get_member(organization.id, actor_id)
    if current_owner is None:
        raise NotFoundError("Member", actor_id, message="Current owner has no membership record")

    organization.transfer_to(new_owner_id)
    organization = await tx.update_organization(organization)

    current_owner.change_role(previous_owner_role)
    current_owner = await tx.update_member(current_owner)

    new_owner_previous_role = new_owner.role
    new_owner.change_role(OrgRole.OWNER.value)
    new_owner = await tx.update_member(new_owner)

    return OwnershipTransfer(organization, current_owner, new_owner, new_owner_previous_role)
