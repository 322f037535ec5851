"""Cascade coordinator.

Multi-record cleanup for member removal, leaving, team deletion and
organization deletion. Every method runs inside the caller's transaction
and reports what it removed so the authorization facts can be dropped
after commit.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ....config.constants import OrgRole
from ....core.exceptions import ForbiddenError
from ...members.entities.member import Member
from ...organizations.entities.organization import Organization
from ...teams.entities.team import Team
from ..entities.protocols import DirectoryTransaction

logger = logging.getLogger(__name__)


@dataclass
class CascadeResult:
    """Records removed by one cascade.

    ``member_roles`` holds ``(user_id, role)`` pairs and ``team_relations``
    holds ``(team_id, user_id)`` pairs, both in removal order.
    """

    organization_id: str
    member_roles: List[Tuple[str, str]] = field(default_factory=list)
    team_relations: List[Tuple[str, str]] = field(default_factory=list)
    reparented_team_ids: List[str] = field(default_factory=list)
    teams_deleted: int = 0
    invitations_deleted: int = 0

    @property
    def members_deleted(self) -> int:
        return len(self.member_roles)

    @property
    def team_ids(self) -> List[str]:
        return [team_id for team_id, _ in self.team_relations]


class CascadeCoordinator:
    """Applies dependent-record cleanup in dependency order."""

    async def remove_membership(
        self,
        tx: DirectoryTransaction,
        organization: Organization,
        member: Member,
        leaving: bool = False,
    ) -> CascadeResult:
        """Drop a member and every team membership they hold in the organization.

        Raises:
            ForbiddenError: Target is the owner, or the sole owner is leaving
        """
        if leaving and member.is_owner:
            owners = [
                m for m in await tx.list_members(organization.id, None)
                if m.role == OrgRole.OWNER.value
            ]
            if len(owners) <= 1:
                raise ForbiddenError("Cannot leave: you are the last owner")

        if member.is_owner or member.user_id == organization.owner_id:
            raise ForbiddenError("Cannot remove the organization owner. Transfer ownership first.")

        result = CascadeResult(organization_id=organization.id)
        for team_member in await tx.list_team_memberships_for_user(organization.id, member.user_id):
            await tx.delete_team_member(team_member.id)
            result.team_relations.append((team_member.team_id, member.user_id))

        await tx.delete_member(member.id)
        result.member_roles.append((member.user_id, member.role))

        logger.debug(
            f"Removed member {member.user_id} from {organization.id} "
            f"with {len(result.team_relations)} team membership(s)"
        )
        return result

    async def delete_team(self, tx: DirectoryTransaction, team: Team) -> CascadeResult:
        """Re-parent children to the team's parent, then drop its memberships and the team."""
        result = CascadeResult(organization_id=team.organization_id)

        for child in await tx.list_child_teams(team.id):
            child.move_to(team.parent_team_id)
            await tx.update_team(child)
            result.reparented_team_ids.append(child.id)

        for team_member in await tx.list_team_members(team.id):
            result.team_relations.append((team.id, team_member.user_id))
        await tx.delete_team_members_by_team(team.id)

        await tx.delete_team(team.id)
        result.teams_deleted = 1

        logger.debug(
            f"Deleted team {team.id}: re-parented {len(result.reparented_team_ids)} child team(s), "
            f"removed {len(result.team_relations)} team membership(s)"
        )
        return result

    async def delete_organization(self, tx: DirectoryTransaction, organization: Organization) -> CascadeResult:
        """Delete team memberships, teams, invitations, members, then the organization."""
        result = CascadeResult(organization_id=organization.id)
        teams = await tx.list_teams(organization.id)

        for team in teams:
            for team_member in await tx.list_team_members(team.id):
                result.team_relations.append((team.id, team_member.user_id))
            await tx.delete_team_members_by_team(team.id)

        # Children before parents so no row references a deleted team
        for team in sorted(teams, key=lambda t: _team_depth(t, teams), reverse=True):
            await tx.delete_team(team.id)
            result.teams_deleted += 1

        result.invitations_deleted = await tx.delete_invitations_by_organization(organization.id)

        members = await tx.list_members(organization.id, None)
        result.member_roles.extend((m.user_id, m.role) for m in members)
        await tx.delete_members_by_organization(organization.id)

        await tx.delete_organization(organization.id)

        logger.info(
            f"Cascade for organization {organization.id}: {result.teams_deleted} team(s), "
            f"{len(result.team_relations)} team membership(s), {result.invitations_deleted} invitation(s), "
            f"{result.members_deleted} member(s)"
        )
        return result


def _team_depth(team: Team, teams: List[Team]) -> int:
    by_id: Dict[str, Team] = {t.id: t for t in teams}
    depth = 0
    current = team
    while current.parent_team_id is not None and current.parent_team_id in by_id and depth < len(teams):
        current = by_id[current.parent_team_id]
        depth += 1
    return depth
