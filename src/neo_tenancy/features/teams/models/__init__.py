"""Team request/response models."""

from .requests import (
    CreateTeamRequest,
    UpdateTeamRequest,
    AddTeamMemberRequest,
    UpdateTeamMemberRoleRequest,
)
from .responses import (
    TeamResponse,
    TeamTreeNodeResponse,
    TeamMemberResponse,
    TeamMembershipResponse,
    TeamCountResponse,
    TeamDeletionResponse,
)

__all__ = [
    # Request models
    "CreateTeamRequest",
    "UpdateTeamRequest",
    "AddTeamMemberRequest",
    "UpdateTeamMemberRoleRequest",
    
    # Response models
    "TeamResponse",
    "TeamTreeNodeResponse",
    "TeamMemberResponse",
    "TeamMembershipResponse",
    "TeamCountResponse",
    "TeamDeletionResponse",
]
