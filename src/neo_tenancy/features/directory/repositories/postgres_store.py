"""PostgreSQL directory store built on asyncpg.

Every unit of work runs inside one SERIALIZABLE transaction. Unique indexes
back every uniqueness invariant, so concurrent writers that slip past a
read-side check still fail at insert time.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg
from asyncpg import Connection, Record

from ....config.constants import InvitationStatus, MemberStatus
from ....core.exceptions import AlreadyExistsError, DatabaseError, NotFoundError, TransactionError
from ....database.connection import DatabaseManager, parse_row_count
from ...organizations.entities.organization import Organization, OrganizationSettings
from ...members.entities.member import Member
from ...teams.entities.team import Team, TeamMember
from ...invitations.entities.invitation import Invitation, normalize_identifier
from ..utils.queries import (
    ORGANIZATION_INSERT,
    ORGANIZATION_UPDATE,
    ORGANIZATION_GET_BY_ID,
    ORGANIZATION_GET_BY_SLUG,
    ORGANIZATION_LIST_ALL,
    ORGANIZATION_DELETE,
    MEMBER_INSERT,
    MEMBER_UPDATE,
    MEMBER_GET_BY_ORGANIZATION_AND_USER,
    MEMBER_LIST_BY_ORGANIZATION,
    MEMBER_COUNT_BY_ORGANIZATION,
    MEMBER_LIST_BY_USER,
    MEMBER_DELETE,
    MEMBER_DELETE_BY_ORGANIZATION,
    TEAM_INSERT,
    TEAM_UPDATE,
    TEAM_GET_BY_ID,
    TEAM_GET_BY_SLUG,
    TEAM_LIST_BY_ORGANIZATION,
    TEAM_COUNT_BY_ORGANIZATION,
    TEAM_LIST_CHILDREN,
    TEAM_DELETE,
    TEAM_MEMBER_INSERT,
    TEAM_MEMBER_UPDATE,
    TEAM_MEMBER_GET,
    TEAM_MEMBER_LIST_BY_TEAM,
    TEAM_MEMBER_LIST_BY_ORGANIZATION_AND_USER,
    TEAM_MEMBER_DELETE,
    TEAM_MEMBER_DELETE_BY_TEAM,
    INVITATION_INSERT,
    INVITATION_UPDATE,
    INVITATION_GET_BY_ID,
    INVITATION_FIND,
    INVITATION_LIST_BY_ORGANIZATION,
    INVITATION_LIST_BY_IDENTIFIER,
    INVITATION_DELETE_BY_ORGANIZATION,
)

logger = logging.getLogger(__name__)


def _json_field(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return dict(value)


def _str_or_none(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _status_value(status: Any) -> Optional[str]:
    return None if status is None else getattr(status, "value", status)


class PostgresDirectoryTransaction:
    """DirectoryTransaction issuing SQL on one connection inside an open transaction."""

    def __init__(self, connection: Connection, schema: str):
        self._conn = connection
        self._schema = schema

    def _q(self, query: str) -> str:
        return query.format(schema=self._schema)

    async def _insert(self, query: str, params: List[Any], conflict_message: str) -> Record:
        try:
            return await self._conn.fetchrow(self._q(query), *params)
        except asyncpg.UniqueViolationError as e:
            logger.info(f"Unique violation: {conflict_message} ({e.constraint_name})")
            raise AlreadyExistsError(conflict_message, details={"constraint": e.constraint_name}) from e

    # Row mapping

    def _map_row_to_organization(self, row: Record) -> Organization:
        return Organization(
            id=str(row["id"]),
            name=row["name"],
            slug=row["slug"],
            owner_id=row["owner_id"],
            logo=row["logo"],
            metadata=_json_field(row["metadata"]),
            settings=OrganizationSettings.from_dict(_json_field(row["settings"])),
            allowed_domains=list(row["allowed_domains"] or []),
            status=row["status"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _map_row_to_member(self, row: Record) -> Member:
        return Member(
            id=str(row["id"]),
            organization_id=str(row["organization_id"]),
            user_id=row["user_id"],
            role=row["role"],
            status=row["status"],
            suspended_at=row["suspended_at"],
            joined_at=row["joined_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _map_row_to_team(self, row: Record) -> Team:
        return Team(
            id=str(row["id"]),
            organization_id=str(row["organization_id"]),
            name=row["name"],
            slug=row["slug"],
            parent_team_id=_str_or_none(row["parent_team_id"]),
            description=row["description"],
            metadata=_json_field(row["metadata"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _map_row_to_team_member(self, row: Record) -> TeamMember:
        return TeamMember(
            id=str(row["id"]),
            team_id=str(row["team_id"]),
            user_id=row["user_id"],
            role=row["role"],
            created_at=row["created_at"],
        )

    def _map_row_to_invitation(self, row: Record) -> Invitation:
        return Invitation(
            id=str(row["id"]),
            organization_id=str(row["organization_id"]),
            invitee_identifier=row["invitee_identifier"],
            identifier_type=row["identifier_type"],
            role=row["role"],
            team_id=_str_or_none(row["team_id"]),
            inviter_id=row["inviter_id"],
            inviter_name=row["inviter_name"],
            message=row["message"],
            status=row["status"],
            expires_at=row["expires_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    # Organizations

    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        row = await self._conn.fetchrow(self._q(ORGANIZATION_GET_BY_ID), organization_id)
        return self._map_row_to_organization(row) if row else None

    async def get_organization_by_slug(self, slug: str) -> Optional[Organization]:
        row = await self._conn.fetchrow(self._q(ORGANIZATION_GET_BY_SLUG), slug)
        return self._map_row_to_organization(row) if row else None

    async def list_organizations(self) -> List[Organization]:
        rows = await self._conn.fetch(self._q(ORGANIZATION_LIST_ALL))
        return [self._map_row_to_organization(row) for row in rows]

    def _organization_params(self, org: Organization) -> List[Any]:
        return [
            org.id, org.name, org.slug, org.owner_id, org.logo,
            json.dumps(org.metadata or {}), json.dumps(org.settings.to_dict()),
            list(org.allowed_domains), org.status.value,
        ]

    async def insert_organization(self, organization: Organization) -> Organization:
        params = self._organization_params(organization) + [organization.created_at, organization.updated_at]
        row = await self._insert(
            ORGANIZATION_INSERT, params, f"Organization slug '{organization.slug}' is already taken"
        )
        logger.info(f"Created organization {organization.id} with slug '{organization.slug}'")
        return self._map_row_to_organization(row)

    async def update_organization(self, organization: Organization) -> Organization:
        params = self._organization_params(organization) + [organization.updated_at]
        row = await self._insert(
            ORGANIZATION_UPDATE, params, f"Organization slug '{organization.slug}' is already taken"
        )
        if row is None:
            raise NotFoundError("Organization", organization.id)
        return self._map_row_to_organization(row)

    async def delete_organization(self, organization_id: str) -> bool:
        status = await self._conn.execute(self._q(ORGANIZATION_DELETE), organization_id)
        return parse_row_count(status) > 0

    # Members

    async def get_member(self, organization_id: str, user_id: str) -> Optional[Member]:
        row = await self._conn.fetchrow(self._q(MEMBER_GET_BY_ORGANIZATION_AND_USER), organization_id, user_id)
        return self._map_row_to_member(row) if row else None

    async def list_members(
        self, organization_id: str, status: Optional[MemberStatus] = None
    ) -> List[Member]:
        rows = await self._conn.fetch(self._q(MEMBER_LIST_BY_ORGANIZATION), organization_id, _status_value(status))
        return [self._map_row_to_member(row) for row in rows]

    async def count_members(self, organization_id: str, status: Optional[MemberStatus] = None) -> int:
        return await self._conn.fetchval(
            self._q(MEMBER_COUNT_BY_ORGANIZATION), organization_id, _status_value(status)
        )

    async def list_memberships_for_user(self, user_id: str) -> List[Member]:
        rows = await self._conn.fetch(self._q(MEMBER_LIST_BY_USER), user_id)
        return [self._map_row_to_member(row) for row in rows]

    async def insert_member(self, member: Member) -> Member:
        params = [
            member.id, member.organization_id, member.user_id, member.role, member.status.value,
            member.suspended_at, member.joined_at, member.created_at, member.updated_at,
        ]
        row = await self._insert(MEMBER_INSERT, params, "User is already a member of this organization")
        return self._map_row_to_member(row)

    async def update_member(self, member: Member) -> Member:
        row = await self._conn.fetchrow(
            self._q(MEMBER_UPDATE),
            member.id, member.role, member.status.value, member.suspended_at, member.joined_at, member.updated_at,
        )
        if row is None:
            raise NotFoundError("Member", member.id)
        return self._map_row_to_member(row)

    async def delete_member(self, member_id: str) -> bool:
        status = await self._conn.execute(self._q(MEMBER_DELETE), member_id)
        return parse_row_count(status) > 0

    async def delete_members_by_organization(self, organization_id: str) -> int:
        status = await self._conn.execute(self._q(MEMBER_DELETE_BY_ORGANIZATION), organization_id)
        return parse_row_count(status)

    # Teams

    async def get_team(self, team_id: str) -> Optional[Team]:
        row = await self._conn.fetchrow(self._q(TEAM_GET_BY_ID), team_id)
        return self._map_row_to_team(row) if row else None

    async def get_team_by_slug(self, organization_id: str, slug: str) -> Optional[Team]:
        row = await self._conn.fetchrow(self._q(TEAM_GET_BY_SLUG), organization_id, slug)
        return self._map_row_to_team(row) if row else None

    async def list_teams(self, organization_id: str) -> List[Team]:
        rows = await self._conn.fetch(self._q(TEAM_LIST_BY_ORGANIZATION), organization_id)
        return [self._map_row_to_team(row) for row in rows]

    async def count_teams(self, organization_id: str) -> int:
        return await self._conn.fetchval(self._q(TEAM_COUNT_BY_ORGANIZATION), organization_id)

    async def list_child_teams(self, team_id: str) -> List[Team]:
        rows = await self._conn.fetch(self._q(TEAM_LIST_CHILDREN), team_id)
        return [self._map_row_to_team(row) for row in rows]

    async def insert_team(self, team: Team) -> Team:
        params = [
            team.id, team.organization_id, team.name, team.slug, team.parent_team_id,
            team.description, json.dumps(team.metadata or {}), team.created_at, team.updated_at,
        ]
        row = await self._insert(TEAM_INSERT, params, f"Team slug '{team.slug}' is already taken in this organization")
        return self._map_row_to_team(row)

    async def update_team(self, team: Team) -> Team:
        params = [
            team.id, team.name, team.slug, team.parent_team_id, team.description,
            json.dumps(team.metadata or {}), team.updated_at,
        ]
        row = await self._insert(TEAM_UPDATE, params, f"Team slug '{team.slug}' is already taken in this organization")
        if row is None:
            raise NotFoundError("Team", team.id)
        return self._map_row_to_team(row)

    async def delete_team(self, team_id: str) -> bool:
        status = await self._conn.execute(self._q(TEAM_DELETE), team_id)
        return parse_row_count(status) > 0

    # Team members

    async def get_team_member(self, team_id: str, user_id: str) -> Optional[TeamMember]:
        row = await self._conn.fetchrow(self._q(TEAM_MEMBER_GET), team_id, user_id)
        return self._map_row_to_team_member(row) if row else None

    async def list_team_members(self, team_id: str) -> List[TeamMember]:
        rows = await self._conn.fetch(self._q(TEAM_MEMBER_LIST_BY_TEAM), team_id)
        return [self._map_row_to_team_member(row) for row in rows]

    async def list_team_memberships_for_user(self, organization_id: str, user_id: str) -> List[TeamMember]:
        rows = await self._conn.fetch(self._q(TEAM_MEMBER_LIST_BY_ORGANIZATION_AND_USER), organization_id, user_id)
        return [self._map_row_to_team_member(row) for row in rows]

    async def insert_team_member(self, team_member: TeamMember) -> TeamMember:
        params = [team_member.id, team_member.team_id, team_member.user_id, team_member.role, team_member.created_at]
        row = await self._insert(TEAM_MEMBER_INSERT, params, "User is already a member of this team")
        return self._map_row_to_team_member(row)

    async def update_team_member(self, team_member: TeamMember) -> TeamMember:
        row = await self._conn.fetchrow(self._q(TEAM_MEMBER_UPDATE), team_member.id, team_member.role)
        if row is None:
            raise NotFoundError("TeamMember", team_member.id)
        return self._map_row_to_team_member(row)

    async def delete_team_member(self, team_member_id: str) -> bool:
        status = await self._conn.execute(self._q(TEAM_MEMBER_DELETE), team_member_id)
        return parse_row_count(status) > 0

    async def delete_team_members_by_team(self, team_id: str) -> int:
        status = await self._conn.execute(self._q(TEAM_MEMBER_DELETE_BY_TEAM), team_id)
        return parse_row_count(status)

    # Invitations

    async def get_invitation(self, invitation_id: str) -> Optional[Invitation]:
        row = await self._conn.fetchrow(self._q(INVITATION_GET_BY_ID), invitation_id)
        return self._map_row_to_invitation(row) if row else None

    async def find_invitation(
        self, organization_id: str, invitee_identifier: str, status: InvitationStatus
    ) -> Optional[Invitation]:
        row = await self._conn.fetchrow(
            self._q(INVITATION_FIND), organization_id, normalize_identifier(invitee_identifier), status.value
        )
        return self._map_row_to_invitation(row) if row else None

    async def list_invitations(
        self, organization_id: str, status: Optional[InvitationStatus] = None
    ) -> List[Invitation]:
        rows = await self._conn.fetch(self._q(INVITATION_LIST_BY_ORGANIZATION), organization_id, _status_value(status))
        return [self._map_row_to_invitation(row) for row in rows]

    async def list_invitations_for_identifier(
        self, invitee_identifier: str, status: Optional[InvitationStatus] = None
    ) -> List[Invitation]:
        rows = await self._conn.fetch(
            self._q(INVITATION_LIST_BY_IDENTIFIER), normalize_identifier(invitee_identifier), _status_value(status)
        )
        return [self._map_row_to_invitation(row) for row in rows]

    async def insert_invitation(self, invitation: Invitation) -> Invitation:
        params = [
            invitation.id, invitation.organization_id, invitation.invitee_identifier,
            _status_value(invitation.identifier_type), invitation.role, invitation.team_id,
            invitation.inviter_id, invitation.inviter_name, invitation.message,
            invitation.status.value, invitation.expires_at, invitation.created_at, invitation.updated_at,
        ]
        row = await self._insert(
            INVITATION_INSERT, params, "A pending invitation already exists for this identifier"
        )
        return self._map_row_to_invitation(row)

    async def update_invitation(self, invitation: Invitation) -> Invitation:
        row = await self._conn.fetchrow(
            self._q(INVITATION_UPDATE),
            invitation.id, invitation.role, invitation.team_id, invitation.message,
            invitation.status.value, invitation.expires_at, invitation.updated_at,
        )
        if row is None:
            raise NotFoundError("Invitation", invitation.id)
        return self._map_row_to_invitation(row)

    async def delete_invitations_by_organization(self, organization_id: str) -> int:
        status = await self._conn.execute(self._q(INVITATION_DELETE_BY_ORGANIZATION), organization_id)
        return parse_row_count(status)


class PostgresDirectoryStore:
    """DirectoryStore backed by PostgreSQL through a DatabaseManager."""

    def __init__(self, database: DatabaseManager, schema: str):
        """Initialize with a database manager.

        Args:
            database: Pool owner from neo_tenancy.database
            schema: Directory schema name
        """
        self._db = database
        self._schema = schema

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[PostgresDirectoryTransaction]:
        try:
            async with self._db.transaction(isolation="serializable") as connection:
                yield PostgresDirectoryTransaction(connection, self._schema)
        except asyncpg.SerializationError as e:
            logger.warning(f"Directory transaction aborted by a concurrent writer: {e}")
            raise TransactionError("Concurrent update detected; retry the operation") from e
        except asyncpg.PostgresError as e:
            logger.error(f"Directory transaction failed: {e}")
            raise DatabaseError(f"Directory transaction failed: {e}") from e

    async def create_schema(self) -> None:
        """Create directory tables if they are missing."""
        await self._db.apply_migration("V001__tenant_directory.sql", self._schema)
