"""Team request models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class CreateTeamRequest(BaseModel):
    name: str = Field(..., description="Team display name")
    slug: Optional[str] = Field(None, description="Slug unique within the organization")
    description: Optional[str] = Field(None, description="Team description")
    parent_team_id: Optional[str] = Field(None, description="Parent team in the same organization")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Opaque metadata")
    
    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Team name cannot be empty")
        return v.strip()


class UpdateTeamRequest(BaseModel):
    """Partial update.
    
    ``parent_team_id`` is only applied when present in the payload; an
    explicit ``null`` moves the team to the root.
    """
    
    name: Optional[str] = Field(None, description="Team display name")
    slug: Optional[str] = Field(None, description="New slug")
    description: Optional[str] = Field(None, description="Team description")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Replacement metadata")
    parent_team_id: Optional[str] = Field(None, description="New parent, null for root")
    
    @property
    def changes_parent(self) -> bool:
        return "parent_team_id" in self.model_fields_set


class AddTeamMemberRequest(BaseModel):
    user_id: str = Field(..., description="Organization member to add")
    role: Optional[str] = Field(None, description="Free-form team role, e.g. lead")


class UpdateTeamMemberRoleRequest(BaseModel):
    role: Optional[str] = Field(None, description="Free-form team role, null to clear")
