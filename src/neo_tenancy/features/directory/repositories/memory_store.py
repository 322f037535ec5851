"""In-process directory store.

Tables are plain dicts keyed by id. A transaction works on a private,
shallow copy of every table and swaps it in on commit, so a failed unit of
work leaves nothing behind. Entities are copied on the way in and on the way
out; stored objects are never mutated in place. Units of work are applied
one at a time, which makes every transaction serializable.
"""

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional, TypeVar

from ....config.constants import InvitationStatus, MemberStatus
from ....core.exceptions import AlreadyExistsError, NotFoundError
from ...organizations.entities.organization import Organization
from ...members.entities.member import Member
from ...teams.entities.team import Team, TeamMember
from ...invitations.entities.invitation import Invitation, normalize_identifier

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _detach(entity: T) -> T:
    return copy.deepcopy(entity)


@dataclass
class _Tables:
    organizations: Dict[str, Organization] = field(default_factory=dict)
    members: Dict[str, Member] = field(default_factory=dict)
    teams: Dict[str, Team] = field(default_factory=dict)
    team_members: Dict[str, TeamMember] = field(default_factory=dict)
    invitations: Dict[str, Invitation] = field(default_factory=dict)

    def snapshot(self) -> "_Tables":
        return _Tables(
            organizations=dict(self.organizations),
            members=dict(self.members),
            teams=dict(self.teams),
            team_members=dict(self.team_members),
            invitations=dict(self.invitations),
        )


class InMemoryDirectoryTransaction:
    """DirectoryTransaction over a private snapshot of the tables."""

    def __init__(self, tables: _Tables):
        self._t = tables

    # Organizations

    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        org = self._t.organizations.get(organization_id)
        return _detach(org) if org else None

    async def get_organization_by_slug(self, slug: str) -> Optional[Organization]:
        for org in self._t.organizations.values():
            if org.slug == slug:
                return _detach(org)
        return None

    async def list_organizations(self) -> List[Organization]:
        return [_detach(org) for org in self._t.organizations.values()]

    async def insert_organization(self, organization: Organization) -> Organization:
        if organization.id in self._t.organizations:
            raise AlreadyExistsError(f"Organization '{organization.id}' already exists")
        if any(org.slug == organization.slug for org in self._t.organizations.values()):
            raise AlreadyExistsError(
                f"Organization slug '{organization.slug}' is already taken",
                details={"slug": organization.slug},
            )
        self._t.organizations[organization.id] = _detach(organization)
        return _detach(organization)

    async def update_organization(self, organization: Organization) -> Organization:
        if organization.id not in self._t.organizations:
            raise NotFoundError("Organization", organization.id)
        if any(
            org.slug == organization.slug and org.id != organization.id
            for org in self._t.organizations.values()
        ):
            raise AlreadyExistsError(
                f"Organization slug '{organization.slug}' is already taken",
                details={"slug": organization.slug},
            )
        self._t.organizations[organization.id] = _detach(organization)
        return _detach(organization)

    async def delete_organization(self, organization_id: str) -> bool:
        return self._t.organizations.pop(organization_id, None) is not None

    # Members

    async def get_member(self, organization_id: str, user_id: str) -> Optional[Member]:
        for member in self._t.members.values():
            if member.organization_id == organization_id and member.user_id == user_id:
                return _detach(member)
        return None

    async def list_members(
        self, organization_id: str, status: Optional[MemberStatus] = None
    ) -> List[Member]:
        return [
            _detach(member)
            for member in self._t.members.values()
            if member.organization_id == organization_id
            and (status is None or member.status == status)
        ]

    async def count_members(self, organization_id: str, status: Optional[MemberStatus] = None) -> int:
        return sum(
            1
            for member in self._t.members.values()
            if member.organization_id == organization_id
            and (status is None or member.status == status)
        )

    async def list_memberships_for_user(self, user_id: str) -> List[Member]:
        return [_detach(m) for m in self._t.members.values() if m.user_id == user_id]

    async def insert_member(self, member: Member) -> Member:
        if any(
            m.organization_id == member.organization_id and m.user_id == member.user_id
            for m in self._t.members.values()
        ):
            raise AlreadyExistsError(
                "User is already a member of this organization",
                details={"organization_id": member.organization_id, "user_id": member.user_id},
            )
        self._t.members[member.id] = _detach(member)
        return _detach(member)

    async def update_member(self, member: Member) -> Member:
        if member.id not in self._t.members:
            raise NotFoundError("Member", member.id)
        self._t.members[member.id] = _detach(member)
        return _detach(member)

    async def delete_member(self, member_id: str) -> bool:
        return self._t.members.pop(member_id, None) is not None

    async def delete_members_by_organization(self, organization_id: str) -> int:
        doomed = [mid for mid, m in self._t.members.items() if m.organization_id == organization_id]
        for member_id in doomed:
            del self._t.members[member_id]
        return len(doomed)

    # Teams

    async def get_team(self, team_id: str) -> Optional[Team]:
        team = self._t.teams.get(team_id)
        return _detach(team) if team else None

    async def get_team_by_slug(self, organization_id: str, slug: str) -> Optional[Team]:
        for team in self._t.teams.values():
            if team.organization_id == organization_id and team.slug == slug:
                return _detach(team)
        return None

    async def list_teams(self, organization_id: str) -> List[Team]:
        return [_detach(t) for t in self._t.teams.values() if t.organization_id == organization_id]

    async def count_teams(self, organization_id: str) -> int:
        return sum(1 for t in self._t.teams.values() if t.organization_id == organization_id)

    async def list_child_teams(self, team_id: str) -> List[Team]:
        return [_detach(t) for t in self._t.teams.values() if t.parent_team_id == team_id]

    def _team_slug_taken(self, team: Team) -> bool:
        return any(
            t.organization_id == team.organization_id and t.slug == team.slug and t.id != team.id
            for t in self._t.teams.values()
        )

    async def insert_team(self, team: Team) -> Team:
        if self._team_slug_taken(team):
            raise AlreadyExistsError(
                f"Team slug '{team.slug}' is already taken in this organization",
                details={"organization_id": team.organization_id, "slug": team.slug},
            )
        self._t.teams[team.id] = _detach(team)
        return _detach(team)

    async def update_team(self, team: Team) -> Team:
        if team.id not in self._t.teams:
            raise NotFoundError("Team", team.id)
        if self._team_slug_taken(team):
            raise AlreadyExistsError(
                f"Team slug '{team.slug}' is already taken in this organization",
                details={"organization_id": team.organization_id, "slug": team.slug},
            )
        self._t.teams[team.id] = _detach(team)
        return _detach(team)

    async def delete_team(self, team_id: str) -> bool:
        return self._t.teams.pop(team_id, None) is not None

    # Team members

    async def get_team_member(self, team_id: str, user_id: str) -> Optional[TeamMember]:
        for tm in self._t.team_members.values():
            if tm.team_id == team_id and tm.user_id == user_id:
                return _detach(tm)
        return None

    async def list_team_members(self, team_id: str) -> List[TeamMember]:
        return [_detach(tm) for tm in self._t.team_members.values() if tm.team_id == team_id]

    async def list_team_memberships_for_user(self, organization_id: str, user_id: str) -> List[TeamMember]:
        org_team_ids = {t.id for t in self._t.teams.values() if t.organization_id == organization_id}
        return [
            _detach(tm)
            for tm in self._t.team_members.values()
            if tm.user_id == user_id and tm.team_id in org_team_ids
        ]

    async def insert_team_member(self, team_member: TeamMember) -> TeamMember:
        if any(
            tm.team_id == team_member.team_id and tm.user_id == team_member.user_id
            for tm in self._t.team_members.values()
        ):
            raise AlreadyExistsError(
                "User is already a member of this team",
                details={"team_id": team_member.team_id, "user_id": team_member.user_id},
            )
        self._t.team_members[team_member.id] = _detach(team_member)
        return _detach(team_member)

    async def update_team_member(self, team_member: TeamMember) -> TeamMember:
        if team_member.id not in self._t.team_members:
            raise NotFoundError("TeamMember", team_member.id)
        self._t.team_members[team_member.id] = _detach(team_member)
        return _detach(team_member)

    async def delete_team_member(self, team_member_id: str) -> bool:
        return self._t.team_members.pop(team_member_id, None) is not None

    async def delete_team_members_by_team(self, team_id: str) -> int:
        doomed = [tid for tid, tm in self._t.team_members.items() if tm.team_id == team_id]
        for team_member_id in doomed:
            del self._t.team_members[team_member_id]
        return len(doomed)

    # Invitations

    async def get_invitation(self, invitation_id: str) -> Optional[Invitation]:
        invitation = self._t.invitations.get(invitation_id)
        return _detach(invitation) if invitation else None

    async def find_invitation(
        self, organization_id: str, invitee_identifier: str, status: InvitationStatus
    ) -> Optional[Invitation]:
        identifier = normalize_identifier(invitee_identifier)
        for inv in self._t.invitations.values():
            if (
                inv.organization_id == organization_id
                and inv.invitee_identifier == identifier
                and inv.status == status
            ):
                return _detach(inv)
        return None

    async def list_invitations(
        self, organization_id: str, status: Optional[InvitationStatus] = None
    ) -> List[Invitation]:
        return [
            _detach(inv)
            for inv in self._t.invitations.values()
            if inv.organization_id == organization_id and (status is None or inv.status == status)
        ]

    async def list_invitations_for_identifier(
        self, invitee_identifier: str, status: Optional[InvitationStatus] = None
    ) -> List[Invitation]:
        identifier = normalize_identifier(invitee_identifier)
        return [
            _detach(inv)
            for inv in self._t.invitations.values()
            if inv.invitee_identifier == identifier and (status is None or inv.status == status)
        ]

    def _pending_duplicate(self, invitation: Invitation) -> bool:
        return invitation.is_pending and any(
            inv.id != invitation.id
            and inv.is_pending
            and inv.organization_id == invitation.organization_id
            and inv.invitee_identifier == invitation.invitee_identifier
            for inv in self._t.invitations.values()
        )

    async def insert_invitation(self, invitation: Invitation) -> Invitation:
        if self._pending_duplicate(invitation):
            raise AlreadyExistsError(
                "A pending invitation already exists for this identifier",
                details={
                    "organization_id": invitation.organization_id,
                    "invitee_identifier": invitation.invitee_identifier,
                },
            )
        self._t.invitations[invitation.id] = _detach(invitation)
        return _detach(invitation)

    async def update_invitation(self, invitation: Invitation) -> Invitation:
        if invitation.id not in self._t.invitations:
            raise NotFoundError("Invitation", invitation.id)
        self._t.invitations[invitation.id] = _detach(invitation)
        return _detach(invitation)

    async def delete_invitations_by_organization(self, organization_id: str) -> int:
        doomed = [iid for iid, inv in self._t.invitations.items() if inv.organization_id == organization_id]
        for invitation_id in doomed:
            del self._t.invitations[invitation_id]
        return len(doomed)


class InMemoryDirectoryStore:
    """DirectoryStore keeping every table in process memory."""

    def __init__(self):
        self._tables = _Tables()
        self._commit_boundary = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[InMemoryDirectoryTransaction]:
        async with self._commit_boundary:
            working = self._tables.snapshot()
            yield InMemoryDirectoryTransaction(working)
            self._tables = working
            logger.debug("In-memory directory transaction committed")
