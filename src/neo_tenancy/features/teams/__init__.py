"""Teams feature package.

Teams nest inside one organization through ``parent_team_id``; team members
must already belong to the organization.
"""

from .entities import Team, TeamMember, TeamTreeNode
from .models import (
    CreateTeamRequest,
    UpdateTeamRequest,
    AddTeamMemberRequest,
    UpdateTeamMemberRoleRequest,
    TeamResponse,
    TeamTreeNodeResponse,
    TeamMemberResponse,
    TeamMembershipResponse,
    TeamCountResponse,
    TeamDeletionResponse,
)

__all__ = [
    "Team",
    "TeamMember",
    "TeamTreeNode",
    "CreateTeamRequest",
    "UpdateTeamRequest",
    "AddTeamMemberRequest",
    "UpdateTeamMemberRoleRequest",
    "TeamResponse",
    "TeamTreeNodeResponse",
    "TeamMemberResponse",
    "TeamMembershipResponse",
    "TeamCountResponse",
    "TeamDeletionResponse",
]
