"""Invitation response models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ....config.constants import IdentifierType, InvitationStatus
from ..entities.details import InvitationDetails
from ..entities.invitation import Invitation


class InvitationResponse(BaseModel):
    id: str = Field(..., description="Invitation ID")
    organization_id: str
    invitee_identifier: str
    identifier_type: Optional[IdentifierType] = None
    role: str
    team_id: Optional[str] = None
    inviter_id: str
    inviter_name: Optional[str] = None
    message: Optional[str] = None
    status: InvitationStatus
    expires_at: datetime
    is_expired: bool = Field(..., description="Derived from expires_at at read time")
    created_at: datetime
    
    @classmethod
    def from_entity(cls, invitation: Invitation) -> "InvitationResponse":
        """Create response from invitation entity."""
        return cls(
            id=invitation.id,
            organization_id=invitation.organization_id,
            invitee_identifier=invitation.invitee_identifier,
            identifier_type=invitation.identifier_type,
            role=invitation.role,
            team_id=invitation.team_id,
            inviter_id=invitation.inviter_id,
            inviter_name=invitation.inviter_name,
            message=invitation.message,
            status=invitation.status,
            expires_at=invitation.expires_at,
            is_expired=invitation.is_expired(),
            created_at=invitation.created_at,
        )


class InvitationDetailsResponse(InvitationResponse):
    """Invitation as shown on an accept page."""
    
    organization_name: str
    
    @classmethod
    def from_details(cls, details: InvitationDetails) -> "InvitationDetailsResponse":
        base = InvitationResponse.from_entity(details.invitation).model_dump()
        base["is_expired"] = details.is_expired
        return cls(organization_name=details.organization_name, **base)


class ResendInvitationResponse(BaseModel):
    """Identifying fields the caller uses to re-deliver the invitation."""
    
    invitation_id: str
    invitee_identifier: str
    expires_at: datetime
