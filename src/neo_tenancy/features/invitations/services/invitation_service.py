"""Invitation service.

Identifier-based invitations (email, phone, username...) with the
``pending -> {accepted, cancelled, expired}`` lifecycle. Expiry is lazy:
every mutation first applies ``Invitation.transition_if_expired`` and, when
the flip happens, commits it before raising ``ExpiredError`` so concurrent
callers observe exactly one expiry.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ....config.constants import IdentifierType, InvitationRole, InvitationSortField, InvitationStatus, OrgRole, SortOrder
from ....core.exceptions import (
    AlreadyExistsError,
    ExpiredError,
    ForbiddenError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    error_code_for,
)
from ....utils.timezone import ensure_utc, hours_from_now, utc_now
from ....utils.uuid import generate_uuid_v7
from ...authz.entities.commands import SyncCommand
from ...authz.services.sync_adapter import AuthorizationSyncAdapter
from ...directory.entities.bulk import BulkResult
from ...directory.entities.protocols import DirectoryTransaction
from ...directory.services.base import DirectoryServiceBase, entity_validation
from ...directory.utils.error_handling import directory_error_handler, log_directory_operation
from ...directory.utils.sorting import sort_by_field
from ...members.entities.member import Member
from ...members.services.member_service import insert_member_in_transaction
from ...organizations.entities.organization import Organization
from ...pagination.entities import CursorPaginationRequest, CursorPaginationResponse
from ...pagination.utils import paginate_newest_first
from ...teams.entities.team import TeamMember
from ..entities.details import InvitationDetails
from ..entities.invitation import Invitation, normalize_identifier

logger = logging.getLogger(__name__)

_INVITABLE_ROLES = frozenset(r.value for r in InvitationRole)


class InvitationService(DirectoryServiceBase):
    """Service for invitation operations."""

    # Helpers

    @staticmethod
    async def _get_invitation_or_raise(tx: DirectoryTransaction, invitation_id: str) -> Invitation:
        invitation = await tx.get_invitation(invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation", invitation_id, message="Invitation not found")
        return invitation

    async def _gate(self, tx: DirectoryTransaction, actor_id: str, organization_id: str) -> Organization:
        organization = await self._permissions.get_organization_or_raise(tx, organization_id)
        await self._permissions.require_role(tx, organization_id, actor_id, OrgRole.ADMIN)
        self._permissions.require_active_organization(organization)
        return organization

    @staticmethod
    async def _expire_if_due(tx: DirectoryTransaction, invitation: Invitation) -> bool:
        """Persist the lazy expiry flip; True only for the caller that performed it."""
        if invitation.transition_if_expired():
            await tx.update_invitation(invitation)
            logger.info(f"Invitation {invitation.id} expired")
            return True
        return False

    async def _create(
        self,
        tx: DirectoryTransaction,
        actor_id: str,
        organization_id: str,
        identifier: str,
        role: str,
        expires_at: datetime,
        identifier_type: Optional[IdentifierType] = None,
        team_id: Optional[str] = None,
        message: Optional[str] = None,
        inviter_name: Optional[str] = None,
        cross_org_team_message: str = "Team must belong to the invitation organization",
    ) -> Invitation:
        if role not in _INVITABLE_ROLES:
            raise InvalidArgumentError(f"Invalid role '{role}': must be one of {sorted(_INVITABLE_ROLES)}")
        if not identifier or not identifier.strip():
            raise InvalidArgumentError("Invitee identifier cannot be empty")

        if team_id is not None:
            team = await tx.get_team(team_id)
            if team is None:
                raise NotFoundError("Team", team_id, message="Team not found")
            if team.organization_id != organization_id:
                raise ForbiddenError(cross_org_team_message)

        normalized = normalize_identifier(identifier)
        existing = await tx.find_invitation(organization_id, normalized, InvitationStatus.PENDING)
        if existing is not None and not await self._expire_if_due(tx, existing):
            raise AlreadyExistsError(
                "A pending invitation already exists for this identifier",
                details={"invitation_id": existing.id},
            )

        now = utc_now()
        with entity_validation():
            invitation = Invitation(
                id=generate_uuid_v7(),
                organization_id=organization_id,
                invitee_identifier=normalized,
                identifier_type=identifier_type,
                role=role,
                team_id=team_id,
                inviter_id=actor_id,
                inviter_name=inviter_name,
                message=message,
                expires_at=expires_at,
                created_at=now,
                updated_at=now,
            )
        return await tx.insert_invitation(invitation)

    def _default_expiry(self, expires_at: Optional[datetime]) -> datetime:
        if expires_at is not None:
            return ensure_utc(expires_at)
        return hours_from_now(self._settings.invitation_expiration_hours)

    # Queries

    @directory_error_handler("list invitations")
    async def list_invitations(
        self,
        actor_id: str,
        organization_id: str,
        status: Optional[InvitationStatus] = None,
        sort_by: InvitationSortField = InvitationSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> List[Invitation]:
        """Invitations of an organization. Stored statuses are returned as-is."""
        async with self._store.transaction() as tx:
            await self._permissions.get_organization_or_raise(tx, organization_id)
            await self._permissions.require_membership(tx, organization_id, actor_id)
            invitations = await tx.list_invitations(
                organization_id, InvitationStatus(status) if status is not None else None
            )
        return sort_by_field(invitations, InvitationSortField(sort_by), sort_order)

    @directory_error_handler("list invitations page")
    async def list_invitations_paginated(
        self,
        actor_id: str,
        organization_id: str,
        pagination: CursorPaginationRequest,
        status: Optional[InvitationStatus] = None,
    ) -> CursorPaginationResponse[Invitation]:
        """One page of the organization's invitations, newest first."""
        async with self._store.transaction() as tx:
            await self._permissions.get_organization_or_raise(tx, organization_id)
            await self._permissions.require_membership(tx, organization_id, actor_id)
            invitations = await tx.list_invitations(
                organization_id, InvitationStatus(status) if status is not None else None
            )

        with entity_validation():
            return paginate_newest_first(invitations, pagination)

    @directory_error_handler("count invitations")
    async def count_invitations(
        self, actor_id: str, organization_id: str, status: Optional[InvitationStatus] = None
    ) -> int:
        """Invitations of an organization in every status unless ``status`` is given."""
        async with self._store.transaction() as tx:
            await self._permissions.get_organization_or_raise(tx, organization_id)
            await self._permissions.require_membership(tx, organization_id, actor_id)
            invitations = await tx.list_invitations(
                organization_id, InvitationStatus(status) if status is not None else None
            )
        return len(invitations)

    @directory_error_handler("get invitation")
    async def get_invitation(self, invitation_id: str) -> Optional[InvitationDetails]:
        """Public lookup used by accept pages; None when unknown."""
        async with self._store.transaction() as tx:
            invitation = await tx.get_invitation(invitation_id)
            if invitation is None:
                return None
            organization = await tx.get_organization(invitation.organization_id)
        if organization is None:
            return None
        return InvitationDetails(
            invitation=invitation,
            organization_name=organization.name,
            is_expired=invitation.is_expired(),
        )

    @directory_error_handler("get pending invitations for identifier")
    async def get_pending_invitations_for_identifier(self, identifier: str) -> List[InvitationDetails]:
        """Pending, unexpired invitations addressed to ``identifier`` across organizations."""
        now = utc_now()
        results: List[InvitationDetails] = []
        async with self._store.transaction() as tx:
            invitations = await tx.list_invitations_for_identifier(
                normalize_identifier(identifier), InvitationStatus.PENDING
            )
            for invitation in invitations:
                if invitation.is_expired(now):
                    continue
                organization = await tx.get_organization(invitation.organization_id)
                if organization is None:
                    continue
                results.append(
                    InvitationDetails(invitation=invitation, organization_name=organization.name, is_expired=False)
                )
        return sort_by_field(results, "created_at", key=lambda d: d.invitation.created_at)

    # Mutations

    @directory_error_handler("invite member")
    @log_directory_operation("invite member", include_result_summary=True)
    async def invite_member(
        self,
        actor_id: str,
        organization_id: str,
        identifier: str,
        role: str = OrgRole.MEMBER.value,
        identifier_type: Optional[IdentifierType] = None,
        team_id: Optional[str] = None,
        message: Optional[str] = None,
        inviter_name: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> Invitation:
        """Invite ``identifier`` to the organization. Requires admin.

        ``expires_at`` defaults to now plus ``invitation_expiration_hours``.
        A previous pending invitation that is already past due is flipped to
        expired and does not block the new one.
        """
        async with self._store.transaction() as tx:
            await self._gate(tx, actor_id, organization_id)
            invitation = await self._create(
                tx,
                actor_id,
                organization_id,
                identifier,
                role,
                self._default_expiry(expires_at),
                identifier_type=identifier_type,
                team_id=team_id,
                message=message,
                inviter_name=inviter_name,
            )

        logger.info(f"Invited {invitation.invitee_identifier} to {organization_id} as {role}")
        await self._callbacks.on_invitation_created(invitation)
        return invitation

    @directory_error_handler("bulk invite members")
    async def bulk_invite_members(
        self,
        actor_id: str,
        organization_id: str,
        invitations: Sequence[Dict[str, Any]],
        inviter_name: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> BulkResult:
        """Create several invitations sharing one ``expires_at``.

        Each item is a mapping with ``identifier`` and ``role`` plus optional
        ``identifier_type``, ``team_id`` and ``message``. Items commit one by
        one; failures are reported per normalized identifier.
        """
        async with self._store.transaction() as tx:
            await self._gate(tx, actor_id, organization_id)

        shared_expiry = self._default_expiry(expires_at)
        result = BulkResult()
        for item in invitations:
            identifier = normalize_identifier(item.get("identifier") or "")
            try:
                async with self._store.transaction() as tx:
                    invitation = await self._create(
                        tx,
                        actor_id,
                        organization_id,
                        identifier,
                        item.get("role", OrgRole.MEMBER.value),
                        shared_expiry,
                        identifier_type=item.get("identifier_type"),
                        team_id=item.get("team_id"),
                        message=item.get("message"),
                        inviter_name=inviter_name,
                        cross_org_team_message="Team must belong to the organization",
                    )
            except Exception as e:
                result.add_error(identifier, error_code_for(e), str(e))
                continue
            result.success.append(invitation)
            await self._callbacks.on_invitation_created(invitation)

        logger.info(
            f"Bulk invite to {organization_id}: {len(result.success)} created, {len(result.errors)} failed"
        )
        return result

    @directory_error_handler("accept invitation")
    @log_directory_operation("accept invitation", include_result_summary=True)
    async def accept_invitation(
        self, actor_id: str, invitation_id: str, accepting_identifier: Optional[str] = None
    ) -> Member:
        """Accept an invitation as ``actor_id``.

        Creates the member with the invited role and, for team invitations,
        ensures the team membership. When ``accepting_identifier`` is given
        it must match the invited identifier.

        Returns:
            The created Member

        Raises:
            NotFoundError: Unknown invitation
            InvalidStateError: Invitation not pending, or its team is gone
            ExpiredError: Invitation past due (the flip is persisted)
            AlreadyExistsError: ``actor_id`` is already a member
            ForbiddenError: ``accepting_identifier`` mismatch
        """
        expired = False
        team_member: Optional[TeamMember] = None
        async with self._store.transaction() as tx:
            invitation = await self._get_invitation_or_raise(tx, invitation_id)
            invitation.ensure_pending()
            if await self._expire_if_due(tx, invitation):
                expired = True
            else:
                if await tx.get_member(invitation.organization_id, actor_id) is not None:
                    raise AlreadyExistsError("You are already a member of this organization")
                if accepting_identifier is not None and (
                    normalize_identifier(accepting_identifier) != invitation.invitee_identifier
                ):
                    raise ForbiddenError("Invitation email does not match authenticated user")

                member = await insert_member_in_transaction(
                    tx,
                    invitation.organization_id,
                    actor_id,
                    invitation.role,
                    self._settings.max_members_per_organization,
                    duplicate_message="You are already a member of this organization",
                )

                if invitation.team_id is not None:
                    team = await tx.get_team(invitation.team_id)
                    if team is None or team.organization_id != invitation.organization_id:
                        raise InvalidStateError("Invitation team is invalid for this organization")
                    if await tx.get_team_member(team.id, actor_id) is None:
                        team_member = await tx.insert_team_member(
                            TeamMember(id=generate_uuid_v7(), team_id=team.id, user_id=actor_id)
                        )

                invitation.accept()
                invitation = await tx.update_invitation(invitation)

        if expired:
            raise ExpiredError("Invitation has expired", details={"invitation_id": invitation_id})

        commands: List[SyncCommand] = AuthorizationSyncAdapter.member_added_commands(
            invitation.organization_id, actor_id, invitation.role, invitation.inviter_id
        )
        if team_member is not None:
            commands += AuthorizationSyncAdapter.team_member_added_commands(team_member.team_id, actor_id)

        logger.info(f"User {actor_id} accepted invitation {invitation_id} to {invitation.organization_id}")
        await self._apply_sync("accept_invitation", commands)
        await self._callbacks.on_invitation_accepted(invitation, member)
        return member

    @directory_error_handler("resend invitation")
    @log_directory_operation("resend invitation")
    async def resend_invitation(self, actor_id: str, invitation_id: str) -> Invitation:
        """Signal re-delivery of a pending, unexpired invitation. ``expires_at`` is unchanged."""
        expired = False
        async with self._store.transaction() as tx:
            invitation = await self._get_invitation_or_raise(tx, invitation_id)
            await self._gate(tx, actor_id, invitation.organization_id)
            if not invitation.is_pending:
                raise InvalidStateError(
                    f"Cannot resend {invitation.status.value} invitation",
                    details={"invitation_id": invitation.id, "status": invitation.status.value},
                )
            expired = await self._expire_if_due(tx, invitation)

        if expired:
            raise ExpiredError(
                "Invitation has expired. Please create a new one.", details={"invitation_id": invitation_id}
            )

        await self._callbacks.on_invitation_resent(invitation)
        return invitation

    @directory_error_handler("cancel invitation")
    @log_directory_operation("cancel invitation")
    async def cancel_invitation(self, actor_id: str, invitation_id: str) -> Invitation:
        """Cancel a pending invitation, past due or not. Requires admin."""
        async with self._store.transaction() as tx:
            invitation = await self._get_invitation_or_raise(tx, invitation_id)
            await self._gate(tx, actor_id, invitation.organization_id)
            invitation.ensure_pending()
            invitation.cancel()
            invitation = await tx.update_invitation(invitation)
        return invitation
