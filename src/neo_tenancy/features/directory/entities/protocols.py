"""Protocol definitions for the directory store.

The store is the only concurrency-control mechanism of the tenant directory:
every operation runs as one serializable unit of work opened with
``DirectoryStore.transaction()``. Leaving the context normally commits;
raising rolls back every write made through the transaction.
"""

from abc import abstractmethod
from typing import AsyncContextManager, List, Optional, Protocol, runtime_checkable

from ....config.constants import InvitationStatus, MemberStatus
from ...organizations.entities.organization import Organization
from ...members.entities.member import Member
from ...teams.entities.team import Team, TeamMember
from ...invitations.entities.invitation import Invitation


@runtime_checkable
class DirectoryTransaction(Protocol):
    """Record access within one unit of work.

    Inserts enforce the uniqueness invariants and raise AlreadyExistsError.
    Returned entities are detached copies; call the matching ``update_*``
    to persist changes.
    """

    # Organizations

    @abstractmethod
    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        ...

    @abstractmethod
    async def get_organization_by_slug(self, slug: str) -> Optional[Organization]:
        ...

    @abstractmethod
    async def list_organizations(self) -> List[Organization]:
        ...

    @abstractmethod
    async def insert_organization(self, organization: Organization) -> Organization:
        ...

    @abstractmethod
    async def update_organization(self, organization: Organization) -> Organization:
        ...

    @abstractmethod
    async def delete_organization(self, organization_id: str) -> bool:
        ...

    # Members

    @abstractmethod
    async def get_member(self, organization_id: str, user_id: str) -> Optional[Member]:
        ...

    @abstractmethod
    async def list_members(
        self, organization_id: str, status: Optional[MemberStatus] = None
    ) -> List[Member]:
        ...

    @abstractmethod
    async def count_members(self, organization_id: str, status: Optional[MemberStatus] = None) -> int:
        ...

    @abstractmethod
    async def list_memberships_for_user(self, user_id: str) -> List[Member]:
        ...

    @abstractmethod
    async def insert_member(self, member: Member) -> Member:
        ...

    @abstractmethod
    async def update_member(self, member: Member) -> Member:
        ...

    @abstractmethod
    async def delete_member(self, member_id: str) -> bool:
        ...

    @abstractmethod
    async def delete_members_by_organization(self, organization_id: str) -> int:
        ...

    # Teams

    @abstractmethod
    async def get_team(self, team_id: str) -> Optional[Team]:
        ...

    @abstractmethod
    async def get_team_by_slug(self, organization_id: str, slug: str) -> Optional[Team]:
        ...

    @abstractmethod
    async def list_teams(self, organization_id: str) -> List[Team]:
        ...

    @abstractmethod
    async def count_teams(self, organization_id: str) -> int:
        ...

    @abstractmethod
    async def list_child_teams(self, team_id: str) -> List[Team]:
        ...

    @abstractmethod
    async def insert_team(self, team: Team) -> Team:
        ...

    @abstractmethod
    async def update_team(self, team: Team) -> Team:
        ...

    @abstractmethod
    async def delete_team(self, team_id: str) -> bool:
        ...

    # Team members

    @abstractmethod
    async def get_team_member(self, team_id: str, user_id: str) -> Optional[TeamMember]:
        ...

    @abstractmethod
    async def list_team_members(self, team_id: str) -> List[TeamMember]:
        ...

    @abstractmethod
    async def list_team_memberships_for_user(self, organization_id: str, user_id: str) -> List[TeamMember]:
        ...

    @abstractmethod
    async def insert_team_member(self, team_member: TeamMember) -> TeamMember:
        ...

    @abstractmethod
    async def update_team_member(self, team_member: TeamMember) -> TeamMember:
        ...

    @abstractmethod
    async def delete_team_member(self, team_member_id: str) -> bool:
        ...

    @abstractmethod
    async def delete_team_members_by_team(self, team_id: str) -> int:
        ...

    # Invitations

    @abstractmethod
    async def get_invitation(self, invitation_id: str) -> Optional[Invitation]:
        ...

    @abstractmethod
    async def find_invitation(
        self, organization_id: str, invitee_identifier: str, status: InvitationStatus
    ) -> Optional[Invitation]:
        ...

    @abstractmethod
    async def list_invitations(
        self, organization_id: str, status: Optional[InvitationStatus] = None
    ) -> List[Invitation]:
        ...

    @abstractmethod
    async def list_invitations_for_identifier(
        self, invitee_identifier: str, status: Optional[InvitationStatus] = None
    ) -> List[Invitation]:
        ...

    @abstractmethod
    async def insert_invitation(self, invitation: Invitation) -> Invitation:
        ...

    @abstractmethod
    async def update_invitation(self, invitation: Invitation) -> Invitation:
        ...

    @abstractmethod
    async def delete_invitations_by_organization(self, organization_id: str) -> int:
        ...


@runtime_checkable
class DirectoryStore(Protocol):
    """Persistent home of organizations, members, teams and invitations."""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[DirectoryTransaction]:
        """Open a serializable unit of work."""
        ...
