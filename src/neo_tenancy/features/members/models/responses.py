"""Member response models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ....config.constants import MemberStatus
from ...permissions.entities.role_hierarchy import PermissionCheck
from ..entities.member import Member


class MemberResponse(BaseModel):
    id: str = Field(..., description="Member ID")
    organization_id: str
    user_id: str
    role: str
    status: MemberStatus
    suspended_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    
    @classmethod
    def from_entity(cls, member: Member) -> "MemberResponse":
        """Create response from member entity."""
        return cls(
            id=member.id,
            organization_id=member.organization_id,
            user_id=member.user_id,
            role=member.role,
            status=member.status,
            suspended_at=member.suspended_at,
            joined_at=member.joined_at,
            created_at=member.created_at,
            updated_at=member.updated_at,
        )


class MemberCountResponse(BaseModel):
    count: int


class PermissionCheckResponse(BaseModel):
    has_permission: bool
    current_role: Optional[str] = None
    
    @classmethod
    def from_entity(cls, check: PermissionCheck) -> "PermissionCheckResponse":
        return cls(has_permission=check.has_permission, current_role=check.current_role)
