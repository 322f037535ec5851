"""Team service.

Hierarchical teams within an organization and their memberships. Parent
changes are validated by ``TeamHierarchyGuard`` inside the mutating
transaction; team membership changes are mirrored as ``user -member-> team``
relations in the authorization subsystem.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ....config.constants import TEAM_SLUG_FALLBACK, OrgRole, SortOrder, TeamMemberSortField, TeamSortField
from ....core.exceptions import AlreadyExistsError, ForbiddenError, NotFoundError
from ....utils.timezone import utc_now
from ....utils.uuid import generate_uuid_v7
from ...authz.services.sync_adapter import AuthorizationSyncAdapter
from ...directory.entities.protocols import DirectoryTransaction
from ...directory.services.base import DirectoryServiceBase, check_limit, entity_validation
from ...directory.services.cascade_coordinator import CascadeCoordinator, CascadeResult
from ...directory.services.slug_allocator import SlugAllocator, slugify
from ...directory.utils.error_handling import directory_error_handler, log_directory_operation
from ...directory.utils.sorting import sort_by_field
from ...organizations.entities.organization import Organization
from ...pagination.entities import CursorPaginationRequest, CursorPaginationResponse
from ...pagination.utils import paginate_newest_first
from ..entities.team import Team, TeamMember, TeamTreeNode
from .hierarchy_guard import TeamHierarchyGuard

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class TeamService(DirectoryServiceBase):
    """Service for team and team membership operations."""

    def __init__(
        self,
        *args,
        slug_allocator: Optional[SlugAllocator] = None,
        hierarchy_guard: Optional[TeamHierarchyGuard] = None,
        cascade: Optional[CascadeCoordinator] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self._slugs = slug_allocator or SlugAllocator()
        self._guard = hierarchy_guard or TeamHierarchyGuard()
        self._cascade = cascade or CascadeCoordinator()

    # Helpers

    @staticmethod
    async def _get_team_or_raise(tx: DirectoryTransaction, team_id: str) -> Team:
        team = await tx.get_team(team_id)
        if team is None:
            raise NotFoundError("Team", team_id, message="Team not found")
        return team

    async def _gate_team(
        self, tx: DirectoryTransaction, actor_id: str, team_id: str
    ) -> Tuple[Organization, Team]:
        team = await self._get_team_or_raise(tx, team_id)
        organization = await self._permissions.get_organization_or_raise(tx, team.organization_id)
        await self._permissions.require_role(tx, organization.id, actor_id, OrgRole.ADMIN)
        self._permissions.require_active_organization(organization)
        return organization, team

    # Queries

    @directory_error_handler("list teams")
    async def list_teams(
        self,
        actor_id: str,
        organization_id: str,
        parent_team_id: Optional[str] = UNSET,
        sort_by: TeamSortField = TeamSortField.NAME,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> List[Team]:
        """Teams of an organization.

        ``parent_team_id`` filters by parent when given; pass None for root
        teams only.
        """
        async with self._store.transaction() as tx:
            await self._permissions.require_membership(tx, organization_id, actor_id)
            teams = await tx.list_teams(organization_id)

        if parent_team_id is not UNSET:
            teams = [t for t in teams if t.parent_team_id == parent_team_id]
        return sort_by_field(teams, TeamSortField(sort_by), sort_order)

    @directory_error_handler("list teams page")
    async def list_teams_paginated(
        self, actor_id: str, organization_id: str, pagination: CursorPaginationRequest
    ) -> CursorPaginationResponse[Team]:
        """One page of the organization's teams, newest first."""
        async with self._store.transaction() as tx:
            await self._permissions.require_membership(tx, organization_id, actor_id)
            teams = await tx.list_teams(organization_id)

        with entity_validation():
            return paginate_newest_first(teams, pagination)

    @directory_error_handler("list teams as tree")
    async def list_teams_as_tree(self, actor_id: str, organization_id: str) -> List[TeamTreeNode]:
        """Root teams with nested children, each level sorted by name."""
        async with self._store.transaction() as tx:
            await self._permissions.require_membership(tx, organization_id, actor_id)
            teams = await tx.list_teams(organization_id)

        known_ids = {team.id for team in teams}
        children: Dict[Optional[str], List[Team]] = {}
        for team in sort_by_field(teams, TeamSortField.NAME):
            parent = team.parent_team_id if team.parent_team_id in known_ids else None
            children.setdefault(parent, []).append(team)

        def build(parent_id: Optional[str]) -> List[TeamTreeNode]:
            return [TeamTreeNode(team=team, children=build(team.id)) for team in children.get(parent_id, [])]

        return build(None)

    @directory_error_handler("count teams")
    async def count_teams(self, actor_id: str, organization_id: str) -> int:
        async with self._store.transaction() as tx:
            await self._permissions.require_membership(tx, organization_id, actor_id)
            return await tx.count_teams(organization_id)

    @directory_error_handler("get team")
    async def get_team(self, actor_id: str, team_id: str) -> Team:
        async with self._store.transaction() as tx:
            team = await self._get_team_or_raise(tx, team_id)
            await self._permissions.require_membership(tx, team.organization_id, actor_id)
        return team

    @directory_error_handler("list team members")
    async def list_team_members(
        self,
        actor_id: str,
        team_id: str,
        sort_by: TeamMemberSortField = TeamMemberSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> List[TeamMember]:
        async with self._store.transaction() as tx:
            team = await self._get_team_or_raise(tx, team_id)
            await self._permissions.require_membership(tx, team.organization_id, actor_id)
            members = await tx.list_team_members(team_id)
        return sort_by_field(members, TeamMemberSortField(sort_by), sort_order)

    @directory_error_handler("list team members page")
    async def list_team_members_paginated(
        self, actor_id: str, team_id: str, pagination: CursorPaginationRequest
    ) -> CursorPaginationResponse[TeamMember]:
        async with self._store.transaction() as tx:
            team = await self._get_team_or_raise(tx, team_id)
            await self._permissions.require_membership(tx, team.organization_id, actor_id)
            members = await tx.list_team_members(team_id)

        with entity_validation():
            return paginate_newest_first(members, pagination)

    @directory_error_handler("check team membership")
    async def is_team_member(self, actor_id: str, team_id: str, user_id: str) -> bool:
        """True when ``user_id`` belongs to the team; False for unknown teams."""
        async with self._store.transaction() as tx:
            team = await tx.get_team(team_id)
            if team is None:
                return False
            await self._permissions.require_membership(tx, team.organization_id, actor_id)
            return await tx.get_team_member(team_id, user_id) is not None

    # Team mutations

    @directory_error_handler("create team")
    @log_directory_operation("create team", include_result_summary=True)
    async def create_team(
        self,
        actor_id: str,
        organization_id: str,
        name: str,
        slug: Optional[str] = None,
        description: Optional[str] = None,
        parent_team_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Team:
        """Create a team. Requires admin; the slug is unique within the organization."""
        async with self._store.transaction() as tx:
            organization = await self._permissions.get_organization_or_raise(tx, organization_id)
            await self._permissions.require_role(tx, organization_id, actor_id, OrgRole.ADMIN)
            self._permissions.require_active_organization(organization)

            limit = self._settings.max_teams_per_organization
            if limit is not None:
                check_limit(
                    limit,
                    await tx.count_teams(organization_id),
                    f"Maximum number of teams ({limit}) for this organization reached.",
                )

            await self._guard.validate_parent(tx, organization_id, None, parent_team_id)
            candidate = slugify(slug or name, TEAM_SLUG_FALLBACK)
            unique_slug = await self._slugs.allocate(tx, candidate, organization_id)

            now = utc_now()
            with entity_validation():
                team = Team(
                    id=generate_uuid_v7(),
                    organization_id=organization_id,
                    name=name.strip() if name else name,
                    slug=unique_slug,
                    description=description,
                    parent_team_id=parent_team_id,
                    metadata=dict(metadata or {}),
                    created_at=now,
                    updated_at=now,
                )
            team = await tx.insert_team(team)

        logger.info(f"Created team {team.id} ({team.slug}) in organization {organization_id}")
        await self._callbacks.on_team_created(team, actor_id)
        return team

    @directory_error_handler("update team")
    @log_directory_operation("update team")
    async def update_team(
        self,
        actor_id: str,
        team_id: str,
        name: Optional[str] = None,
        slug: Optional[str] = None,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        parent_team_id: Optional[str] = UNSET,
    ) -> Team:
        """Patch a team. A given ``parent_team_id`` (None for root) is re-validated."""
        async with self._store.transaction() as tx:
            organization, team = await self._gate_team(tx, actor_id, team_id)

            if parent_team_id is not UNSET:
                await self._guard.validate_parent(tx, organization.id, team.id, parent_team_id)
                team.move_to(parent_team_id)

            with entity_validation():
                if name is not None:
                    team.rename(name)
                if slug is not None:
                    candidate = slugify(slug, TEAM_SLUG_FALLBACK)
                    if candidate != team.slug:
                        team.change_slug(await self._slugs.allocate(tx, candidate, organization.id))
                team.update_details(description=description, metadata=metadata)
            team = await tx.update_team(team)
        return team

    @directory_error_handler("delete team")
    @log_directory_operation("delete team")
    async def delete_team(self, actor_id: str, team_id: str) -> CascadeResult:
        """Delete a team; children move up to its parent."""
        async with self._store.transaction() as tx:
            _, team = await self._gate_team(tx, actor_id, team_id)
            result = await self._cascade.delete_team(tx, team)

        await self._apply_sync(
            "delete_team",
            AuthorizationSyncAdapter.team_deleted_commands(team.id, [user for _, user in result.team_relations]),
        )
        await self._callbacks.on_team_deleted(team, actor_id)
        return result

    # Team membership mutations

    @directory_error_handler("add team member")
    @log_directory_operation("add team member")
    async def add_team_member(
        self, actor_id: str, team_id: str, user_id: str, role: Optional[str] = None
    ) -> TeamMember:
        """Add an organization member to a team. Requires admin."""
        async with self._store.transaction() as tx:
            organization, team = await self._gate_team(tx, actor_id, team_id)
            if await tx.get_member(organization.id, user_id) is None:
                raise ForbiddenError("User must be a member of the organization first")
            if await tx.get_team_member(team_id, user_id) is not None:
                raise AlreadyExistsError("User is already a member of this team")
            team_member = await tx.insert_team_member(
                TeamMember(id=generate_uuid_v7(), team_id=team_id, user_id=user_id, role=role)
            )

        await self._apply_sync("add_team_member", AuthorizationSyncAdapter.team_member_added_commands(team_id, user_id))
        await self._callbacks.on_team_member_added(team_member, actor_id)
        return team_member

    @directory_error_handler("remove team member")
    @log_directory_operation("remove team member")
    async def remove_team_member(self, actor_id: str, team_id: str, user_id: str) -> None:
        async with self._store.transaction() as tx:
            await self._gate_team(tx, actor_id, team_id)
            team_member = await tx.get_team_member(team_id, user_id)
            if team_member is None:
                raise NotFoundError("TeamMember", user_id, message="User is not a member of this team")
            await tx.delete_team_member(team_member.id)

        await self._apply_sync(
            "remove_team_member", AuthorizationSyncAdapter.team_member_removed_commands(team_id, user_id)
        )
        await self._callbacks.on_team_member_removed(team_member, actor_id)

    @directory_error_handler("update team member role")
    async def update_team_member_role(
        self, actor_id: str, team_id: str, user_id: str, role: Optional[str]
    ) -> TeamMember:
        """Set the free-form team role. Team roles are not synced."""
        async with self._store.transaction() as tx:
            await self._gate_team(tx, actor_id, team_id)
            team_member = await tx.get_team_member(team_id, user_id)
            if team_member is None:
                raise NotFoundError("TeamMember", user_id, message="User is not a member of this team")
            team_member.change_role(role)
            return await tx.update_team_member(team_member)
