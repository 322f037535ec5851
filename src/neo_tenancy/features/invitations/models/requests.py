"""Invitation request models."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ....config.constants import IdentifierType, InvitationRole


class CreateInvitationRequest(BaseModel):
    """Invite a user by email, phone, username or another identifier."""
    
    identifier: str = Field(..., description="Invitee identifier; stored trimmed and lowercased")
    role: InvitationRole = Field(InvitationRole.MEMBER, description="Role granted on acceptance")
    identifier_type: Optional[IdentifierType] = Field(None, description="Kind of identifier")
    team_id: Optional[str] = Field(None, description="Team joined on acceptance")
    message: Optional[str] = Field(None, description="Personal message for the invitee")
    inviter_name: Optional[str] = Field(None, description="Display name of the inviter")
    expires_at: Optional[datetime] = Field(None, description="Defaults to now + 48 hours")
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "identifier": "bob@example.com",
                "identifier_type": "email",
                "role": "admin",
                "message": "Welcome aboard!",
            }
        }
    )
    
    @field_validator("identifier")
    @classmethod
    def validate_identifier(cls, v):
        if not v or not v.strip():
            raise ValueError("Invitee identifier cannot be empty")
        return v.strip().lower()


class BulkInvitationItem(BaseModel):
    identifier: str
    role: InvitationRole = InvitationRole.MEMBER
    identifier_type: Optional[IdentifierType] = None
    team_id: Optional[str] = None
    message: Optional[str] = None
    
    def to_item(self) -> Dict[str, Any]:
        item = self.model_dump()
        item["role"] = self.role.value
        return item


class BulkInviteRequest(BaseModel):
    """All created invitations share one ``expires_at``."""
    
    invitations: List[BulkInvitationItem] = Field(..., min_length=1)
    inviter_name: Optional[str] = None
    expires_at: Optional[datetime] = None


class AcceptInvitationRequest(BaseModel):
    accepting_identifier: Optional[str] = Field(
        None, description="Caller's verified identifier; must match the invitation when given"
    )
