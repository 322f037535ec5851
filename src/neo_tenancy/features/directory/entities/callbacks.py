"""Lifecycle callbacks.

Applications subclass ``TenancyCallbacks`` and override the hooks they need.
Hooks run after the directory transaction commits and the authorization
sync has been applied. Exceptions raised by a hook propagate to the caller.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...invitations.entities.invitation import Invitation
    from ...members.entities.member import Member
    from ...organizations.entities.organization import Organization
    from ...teams.entities.team import Team, TeamMember


class TenancyCallbacks:
    """No-op base for directory lifecycle hooks."""
    
    async def on_organization_created(self, organization: "Organization", owner: "Member") -> None:
        pass
    
    async def on_organization_deleted(self, organization: "Organization", actor_id: str) -> None:
        pass
    
    async def on_member_added(self, member: "Member", actor_id: str) -> None:
        pass
    
    async def on_member_removed(self, member: "Member", actor_id: str) -> None:
        pass
    
    async def on_member_role_changed(self, member: "Member", old_role: str, actor_id: str) -> None:
        pass
    
    async def on_member_left(self, member: "Member") -> None:
        pass
    
    async def on_team_created(self, team: "Team", actor_id: str) -> None:
        pass
    
    async def on_team_deleted(self, team: "Team", actor_id: str) -> None:
        pass
    
    async def on_team_member_added(self, team_member: "TeamMember", actor_id: str) -> None:
        pass
    
    async def on_team_member_removed(self, team_member: "TeamMember", actor_id: str) -> None:
        pass
    
    async def on_invitation_created(self, invitation: "Invitation") -> None:
        pass
    
    async def on_invitation_resent(self, invitation: "Invitation") -> None:
        pass
    
    async def on_invitation_accepted(self, invitation: "Invitation", member: "Member") -> None:
        pass
