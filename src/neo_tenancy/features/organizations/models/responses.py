"""Organization response models."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ....config.constants import OrganizationStatus
from ..entities.membership import UserOrganization
from ..entities.organization import Organization
from .requests import OrganizationSettingsModel


class OrganizationResponse(BaseModel):
    """Full organization response model."""

    id: str = Field(..., description="Organization ID")
    name: str = Field(..., description="Organization display name")
    slug: str = Field(..., description="Organization slug")
    owner_id: str = Field(..., description="Current owner user ID")
    logo: Optional[str] = Field(None, description="Logo URL or storage key")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Opaque metadata")
    settings: OrganizationSettingsModel = Field(default_factory=OrganizationSettingsModel)
    allowed_domains: List[str] = Field(default_factory=list)
    status: OrganizationStatus = Field(..., description="Lifecycle status")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "01890f4e-6a7b-7c3d-9e2f-0a1b2c3d4e5f",
                "name": "Acme Corporation",
                "slug": "acme-corp",
                "owner_id": "alice",
                "logo": None,
                "metadata": {},
                "settings": {"require_invitation_to_join": True},
                "allowed_domains": ["acme.com"],
                "status": "active",
                "created_at": "2024-01-01T09:00:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
            }
        }
    )

    @classmethod
    def from_entity(cls, organization: Organization) -> "OrganizationResponse":
        """Create response from organization entity."""
        return cls(
            id=organization.id,
            name=organization.name,
            slug=organization.slug,
            owner_id=organization.owner_id,
            logo=organization.logo,
            metadata=organization.metadata or {},
            settings=OrganizationSettingsModel.from_entity(organization.settings),
            allowed_domains=list(organization.allowed_domains),
            status=organization.status,
            created_at=organization.created_at,
            updated_at=organization.updated_at,
        )


class UserOrganizationResponse(BaseModel):
    """An organization the caller belongs to, with the caller's role."""

    organization: OrganizationResponse
    role: str = Field(..., description="Caller's role in the organization")
    joined_at: Optional[datetime] = Field(None, description="When the caller joined")

    @classmethod
    def from_entity(cls, membership: UserOrganization) -> "UserOrganizationResponse":
        return cls(
            organization=OrganizationResponse.from_entity(membership.organization),
            role=membership.role,
            joined_at=membership.member.joined_at,
        )


class OrganizationDeletionResponse(BaseModel):
    """Counts of records removed by a cascading organization delete.

    Built from the ``CascadeResult`` returned by ``delete_organization``.
    """

    organization_id: str
    members_deleted: int
    teams_deleted: int
    invitations_deleted: int
    team_memberships_deleted: int

    @classmethod
    def from_result(cls, result) -> "OrganizationDeletionResponse":
        return cls(
            organization_id=result.organization_id,
            members_deleted=result.members_deleted,
            teams_deleted=result.teams_deleted,
            invitations_deleted=result.invitations_deleted,
            team_memberships_deleted=len(result.team_relations),
        )
