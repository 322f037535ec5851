"""Team response models."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..entities.team import Team, TeamMember, TeamTreeNode


class TeamResponse(BaseModel):
    id: str = Field(..., description="Team ID")
    organization_id: str
    name: str
    slug: str
    description: Optional[str] = None
    parent_team_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime
    
    @classmethod
    def from_entity(cls, team: Team) -> "TeamResponse":
        """Create response from team entity."""
        return cls(
            id=team.id,
            organization_id=team.organization_id,
            name=team.name,
            slug=team.slug,
            description=team.description,
            parent_team_id=team.parent_team_id,
            metadata=team.metadata or {},
            created_at=team.created_at,
            updated_at=team.updated_at,
        )


class TeamTreeNodeResponse(BaseModel):
    team: TeamResponse
    children: List["TeamTreeNodeResponse"] = Field(default_factory=list)
    
    @classmethod
    def from_entity(cls, node: TeamTreeNode) -> "TeamTreeNodeResponse":
        return cls(
            team=TeamResponse.from_entity(node.team),
            children=[cls.from_entity(child) for child in node.children],
        )


TeamTreeNodeResponse.model_rebuild()


class TeamMemberResponse(BaseModel):
    id: str
    team_id: str
    user_id: str
    role: Optional[str] = None
    created_at: datetime
    
    @classmethod
    def from_entity(cls, team_member: TeamMember) -> "TeamMemberResponse":
        return cls(
            id=team_member.id,
            team_id=team_member.team_id,
            user_id=team_member.user_id,
            role=team_member.role,
            created_at=team_member.created_at,
        )


class TeamMembershipResponse(BaseModel):
    team_id: str
    user_id: str
    is_member: bool


class TeamCountResponse(BaseModel):
    count: int


class TeamDeletionResponse(BaseModel):
    team_id: str
    reparented_team_ids: List[str] = Field(default_factory=list)
    team_memberships_deleted: int
