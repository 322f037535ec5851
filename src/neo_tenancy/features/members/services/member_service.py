"""Member service.

Membership queries, role changes, suspension, removal and leaving. Removal
and leaving cascade through the organization's team memberships; the
matching relations are dropped from the authorization subsystem before the
organization role is revoked.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ....config.constants import (
    InvitationRole,
    MemberSortField,
    MemberStatus,
    MemberStatusFilter,
    OrgRole,
    SortOrder,
)
from ....core.exceptions import (
    AlreadyExistsError,
    AuthorizationSyncError,
    ForbiddenError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    error_code_for,
)
from ....utils.timezone import utc_now
from ....utils.uuid import generate_uuid_v7
from ...authz.services.sync_adapter import AuthorizationSyncAdapter
from ...directory.entities.bulk import BulkResult
from ...directory.entities.protocols import DirectoryTransaction
from ...directory.services.base import DirectoryServiceBase, check_limit, entity_validation
from ...directory.services.cascade_coordinator import CascadeCoordinator
from ...directory.utils.error_handling import directory_error_handler, log_directory_operation
from ...directory.utils.sorting import sort_by_field
from ...invitations.entities.invitation import email_domain
from ...organizations.entities.organization import Organization
from ...organizations.services.ownership import transfer_ownership_in_transaction
from ...pagination.entities import CursorPaginationRequest, CursorPaginationResponse
from ...pagination.utils import paginate_newest_first
from ...permissions.entities.role_hierarchy import PermissionCheck, RoleLike, get_role_rank, is_valid_role
from ..entities.member import Member

logger = logging.getLogger(__name__)

_GRANTABLE_ROLES = frozenset(r.value for r in InvitationRole)


def _status_for(status_filter: MemberStatusFilter) -> Optional[MemberStatus]:
    status_filter = MemberStatusFilter(status_filter)
    if status_filter == MemberStatusFilter.ALL:
        return None
    return MemberStatus(status_filter.value)


async def insert_member_in_transaction(
    tx: DirectoryTransaction,
    organization_id: str,
    user_id: str,
    role: str,
    member_limit: Optional[int] = None,
    duplicate_message: str = "User is already a member of this organization",
) -> Member:
    """Insert a non-owner member inside the caller's transaction.

    Raises:
        InvalidArgumentError: ``role`` is not admin or member
        AlreadyExistsError: ``user_id`` already has a member row
        LimitExceededError: ``member_limit`` reached (all statuses count)
    """
    if role not in _GRANTABLE_ROLES:
        raise InvalidArgumentError(f"Invalid role '{role}': must be one of {sorted(_GRANTABLE_ROLES)}")
    if await tx.get_member(organization_id, user_id) is not None:
        raise AlreadyExistsError(duplicate_message)

    if member_limit is not None:
        check_limit(
            member_limit,
            await tx.count_members(organization_id, None),
            f"Maximum number of members ({member_limit}) for this organization reached.",
        )

    now = utc_now()
    member = Member(
        id=generate_uuid_v7(),
        organization_id=organization_id,
        user_id=user_id,
        role=role,
        joined_at=now,
        created_at=now,
        updated_at=now,
    )
    return await tx.insert_member(member)


class MemberService(DirectoryServiceBase):
    """Service for organization membership operations."""

    def __init__(self, *args, cascade: Optional[CascadeCoordinator] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._cascade = cascade or CascadeCoordinator()

    # Queries

    @directory_error_handler("list members")
    async def list_members(
        self,
        actor_id: str,
        organization_id: str,
        status: MemberStatusFilter = MemberStatusFilter.ACTIVE,
        sort_by: MemberSortField = MemberSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> List[Member]:
        async with self._store.transaction() as tx:
            await self._permissions.get_organization_or_raise(tx, organization_id)
            await self._permissions.require_membership(tx, organization_id, actor_id)
            members = await tx.list_members(organization_id, _status_for(status))

        sort_by = MemberSortField(sort_by)
        key = (lambda m: get_role_rank(m.role)) if sort_by == MemberSortField.ROLE else None
        return sort_by_field(members, sort_by, sort_order, key=key)

    @directory_error_handler("list members page")
    async def list_members_paginated(
        self,
        actor_id: str,
        organization_id: str,
        pagination: CursorPaginationRequest,
        status: MemberStatusFilter = MemberStatusFilter.ACTIVE,
    ) -> CursorPaginationResponse[Member]:
        """One page of members, newest first. Status filter as ``list_members``."""
        async with self._store.transaction() as tx:
            await self._permissions.get_organization_or_raise(tx, organization_id)
            await self._permissions.require_membership(tx, organization_id, actor_id)
            members = await tx.list_members(organization_id, _status_for(status))

        with entity_validation():
            return paginate_newest_first(members, pagination)

    @directory_error_handler("count members")
    async def count_members(
        self,
        actor_id: str,
        organization_id: str,
        status: MemberStatusFilter = MemberStatusFilter.ACTIVE,
    ) -> int:
        async with self._store.transaction() as tx:
            await self._permissions.require_membership(tx, organization_id, actor_id)
            return await tx.count_members(organization_id, _status_for(status))

    @directory_error_handler("get member")
    async def get_member(self, actor_id: str, organization_id: str, user_id: str) -> Optional[Member]:
        """The member row for ``user_id``, or None when not a member."""
        async with self._store.transaction() as tx:
            await self._permissions.require_membership(tx, organization_id, actor_id)
            return await tx.get_member(organization_id, user_id)

    async def check_member_permission(
        self, organization_id: str, user_id: str, min_role: RoleLike
    ) -> PermissionCheck:
        """Non-raising role check, safe for non-members."""
        return await self._permissions.check_permission(organization_id, user_id, min_role)

    # Helpers

    async def _gate(
        self, tx: DirectoryTransaction, actor_id: str, organization_id: str, min_role: RoleLike = OrgRole.ADMIN
    ) -> Tuple[Organization, Member]:
        organization = await self._permissions.get_organization_or_raise(tx, organization_id)
        actor = await self._permissions.require_role(tx, organization_id, actor_id, min_role)
        self._permissions.require_active_organization(organization)
        return organization, actor

    @staticmethod
    async def _get_target(tx: DirectoryTransaction, organization_id: str, user_id: str) -> Member:
        member = await tx.get_member(organization_id, user_id)
        if member is None:
            raise NotFoundError("Member", user_id, message="Member not found")
        return member

    async def _insert_member(
        self, tx: DirectoryTransaction, organization_id: str, user_id: str, role: str
    ) -> Member:
        return await insert_member_in_transaction(
            tx, organization_id, user_id, role, self._settings.max_members_per_organization
        )

    # Mutations

    @directory_error_handler("add member")
    @log_directory_operation("add member", include_result_summary=True)
    async def add_member(
        self, actor_id: str, organization_id: str, user_id: str, role: str = OrgRole.MEMBER.value
    ) -> Member:
        """Add ``user_id`` directly. Requires admin; ``role`` is admin or member."""
        async with self._store.transaction() as tx:
            await self._gate(tx, actor_id, organization_id)
            member = await self._insert_member(tx, organization_id, user_id, role)

        await self._apply_sync(
            "add_member",
            AuthorizationSyncAdapter.member_added_commands(organization_id, user_id, role, actor_id),
        )
        await self._callbacks.on_member_added(member, actor_id)
        return member

    @directory_error_handler("join organization by domain")
    @log_directory_operation("join organization by domain", include_result_summary=True)
    async def join_by_domain(
        self, actor_id: str, organization_id: str, email: str, role: str = OrgRole.MEMBER.value
    ) -> Member:
        """Self-service join for users whose email domain the organization allows."""
        async with self._store.transaction() as tx:
            organization = await self._permissions.get_organization_or_raise(tx, organization_id)
            if not organization.is_active:
                raise ForbiddenError("Organization is not accepting new members by domain")
            if not organization.allowed_domains:
                raise ForbiddenError("Organization does not allow domain-based join")
            domain = email_domain(email)
            if domain is None or not organization.allows_domain(domain):
                raise ForbiddenError("Your email domain is not allowed to join this organization")
            if await tx.get_member(organization_id, actor_id) is not None:
                raise AlreadyExistsError("You are already a member of this organization")
            member = await self._insert_member(tx, organization_id, actor_id, role)

        logger.info(f"User {actor_id} joined organization {organization_id} via domain {domain}")
        await self._apply_sync(
            "join_by_domain",
            AuthorizationSyncAdapter.member_added_commands(organization_id, actor_id, role, actor_id),
        )
        await self._callbacks.on_member_added(member, actor_id)
        return member

    @directory_error_handler("remove member")
    @log_directory_operation("remove member")
    async def remove_member(self, actor_id: str, organization_id: str, user_id: str) -> None:
        """Remove a member and their team memberships. Requires admin."""
        async with self._store.transaction() as tx:
            organization, actor = await self._gate(tx, actor_id, organization_id)
            target = await self._get_target(tx, organization_id, user_id)
            if target.role == OrgRole.ADMIN.value and not actor.is_owner and target.user_id != actor_id:
                raise ForbiddenError("Only the owner can remove an admin")
            result = await self._cascade.remove_membership(tx, organization, target)

        await self._apply_sync(
            "remove_member",
            AuthorizationSyncAdapter.membership_removed_commands(
                organization_id, target.user_id, target.role, result.team_ids
            ),
        )
        await self._callbacks.on_member_removed(target, actor_id)

    @directory_error_handler("update member role")
    @log_directory_operation("update member role", include_result_summary=True)
    async def update_member_role(self, actor_id: str, organization_id: str, user_id: str, role: str) -> Member:
        """Change a member's role.

        Granting ``owner`` is an atomic ownership transfer that only the
        owner may perform; the previous owner becomes ``admin``. The owner's
        own role can only change through such a transfer. Admins may change
        members; only the owner may change another admin.
        """
        if not is_valid_role(role):
            raise InvalidArgumentError(f"Invalid role: {role}")

        async with self._store.transaction() as tx:
            organization, actor = await self._gate(tx, actor_id, organization_id)
            target = await self._get_target(tx, organization_id, user_id)
            old_role = target.role
            if old_role == role:
                return target

            if role == OrgRole.OWNER.value:
                if not actor.is_owner:
                    raise ForbiddenError("Only the owner can grant the owner role")
                transfer = await transfer_ownership_in_transaction(
                    tx, organization, actor_id, user_id, OrgRole.ADMIN.value
                )
                target = transfer.new_owner
                commands = transfer.sync_commands(actor_id)
            else:
                if target.is_owner:
                    raise ForbiddenError("Cannot change the owner's role. Transfer ownership first.")
                if old_role == OrgRole.ADMIN.value and not actor.is_owner and target.user_id != actor_id:
                    raise ForbiddenError("Only the owner can change an admin's role")
                target.change_role(role)
                target = await tx.update_member(target)
                commands = AuthorizationSyncAdapter.role_changed_commands(
                    organization_id, user_id, old_role, role, actor_id
                )

        logger.info(f"Changed role of {user_id} in {organization_id} from {old_role} to {role}")
        await self._apply_sync("update_member_role", commands)
        await self._callbacks.on_member_role_changed(target, old_role, actor_id)
        return target

    @directory_error_handler("suspend member")
    @log_directory_operation("suspend member")
    async def suspend_member(self, actor_id: str, organization_id: str, user_id: str) -> Member:
        """Suspend a member. Suspended members keep their role but cannot mutate."""
        async with self._store.transaction() as tx:
            organization, _ = await self._gate(tx, actor_id, organization_id)
            if user_id == organization.owner_id:
                raise ForbiddenError("Cannot suspend the organization owner. Transfer ownership first.")
            target = await self._get_target(tx, organization_id, user_id)
            if target.is_suspended:
                raise InvalidStateError("Member is already suspended")
            target.suspend()
            return await tx.update_member(target)

    @directory_error_handler("unsuspend member")
    @log_directory_operation("unsuspend member")
    async def unsuspend_member(self, actor_id: str, organization_id: str, user_id: str) -> Member:
        async with self._store.transaction() as tx:
            await self._gate(tx, actor_id, organization_id)
            target = await self._get_target(tx, organization_id, user_id)
            if not target.is_suspended:
                raise InvalidStateError("Member is not suspended")
            target.unsuspend()
            return await tx.update_member(target)

    @directory_error_handler("leave organization")
    @log_directory_operation("leave organization")
    async def leave_organization(self, actor_id: str, organization_id: str) -> None:
        """Leave an organization. The sole owner must transfer ownership first."""
        async with self._store.transaction() as tx:
            organization = await self._permissions.get_organization_or_raise(tx, organization_id)
            member = await tx.get_member(organization_id, actor_id)
            if member is None:
                raise NotFoundError("Member", actor_id, message="You are not a member of this organization")
            result = await self._cascade.remove_membership(tx, organization, member, leaving=True)

        await self._apply_sync(
            "leave_organization",
            AuthorizationSyncAdapter.membership_removed_commands(
                organization_id, member.user_id, member.role, result.team_ids
            ),
        )
        await self._callbacks.on_member_left(member)

    # Bulk

    @directory_error_handler("bulk add members")
    async def bulk_add_members(
        self, actor_id: str, organization_id: str, members: Sequence[Tuple[str, str]]
    ) -> BulkResult:
        """Add ``(user_id, role)`` pairs, each in its own unit of work.

        One failing item never aborts the batch; ``success`` lists the added
        user ids. Items that committed but failed to sync are also listed in
        ``success`` and their errors kept in ``sync_errors`` for retry.
        Permission failures for the caller abort the whole call.
        """
        async with self._store.transaction() as tx:
            await self._gate(tx, actor_id, organization_id)

        result = BulkResult()
        for user_id, role in members:
            try:
                await self.add_member(actor_id, organization_id, user_id, role)
            except AuthorizationSyncError as e:
                result.add_sync_error(user_id, e)
            except Exception as e:
                result.add_error(user_id, error_code_for(e), str(e))
                continue
            result.success.append(user_id)
        return result

    @directory_error_handler("bulk remove members")
    async def bulk_remove_members(
        self, actor_id: str, organization_id: str, user_ids: Sequence[str]
    ) -> BulkResult:
        """Remove members one unit of work at a time; ``success`` lists removed user ids."""
        async with self._store.transaction() as tx:
            await self._gate(tx, actor_id, organization_id)

        result = BulkResult()
        for user_id in user_ids:
            try:
                await self.remove_member(actor_id, organization_id, user_id)
            except AuthorizationSyncError as e:
                result.add_sync_error(user_id, e)
            except Exception as e:
                result.add_error(user_id, error_code_for(e), str(e))
                continue
            result.success.append(user_id)
        return result
