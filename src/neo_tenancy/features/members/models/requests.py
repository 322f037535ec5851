"""Member request models."""

from typing import List

from pydantic import BaseModel, Field, field_validator

from ....config.constants import InvitationRole, OrgRole


class AddMemberRequest(BaseModel):
    """Add an existing user directly, without an invitation."""
    
    user_id: str = Field(..., description="User to add")
    role: InvitationRole = Field(InvitationRole.MEMBER, description="Granted role")


class UpdateMemberRoleRequest(BaseModel):
    """Granting ``owner`` transfers ownership; the previous owner becomes admin."""
    
    role: OrgRole = Field(..., description="New role")


class JoinByDomainRequest(BaseModel):
    email: str = Field(..., description="Caller's verified email address")
    role: InvitationRole = Field(InvitationRole.MEMBER, description="Role to join with")
    
    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v.strip().lower()


class BulkAddMembersRequest(BaseModel):
    members: List[AddMemberRequest] = Field(..., min_length=1, description="Users to add")


class BulkRemoveMembersRequest(BaseModel):
    user_ids: List[str] = Field(..., min_length=1, description="Users to remove")
