"""Organization request models."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ....config.constants import InvitationRole, OrganizationStatus
from ..entities.organization import OrganizationSettings


class OrganizationSettingsModel(BaseModel):
    """Join policy flags."""

    allow_public_signup: Optional[bool] = Field(None, description="Anyone may sign up")
    require_invitation_to_join: Optional[bool] = Field(None, description="Joining requires an invitation")

    def to_entity(self) -> OrganizationSettings:
        return OrganizationSettings(
            allow_public_signup=self.allow_public_signup,
            require_invitation_to_join=self.require_invitation_to_join,
        )

    @classmethod
    def from_entity(cls, settings: OrganizationSettings) -> "OrganizationSettingsModel":
        return cls(
            allow_public_signup=settings.allow_public_signup,
            require_invitation_to_join=settings.require_invitation_to_join,
        )


def _validate_name(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.strip():
        raise ValueError("Name cannot be empty")
    return v.strip() if v is not None else v


class CreateOrganizationRequest(BaseModel):
    """Request model for creating an organization.

    The caller becomes the owner. The slug is derived from the name when
    omitted and suffixed with ``-N`` when taken.
    """

    name: str = Field(..., description="Organization display name")
    slug: Optional[str] = Field(None, description="Organization slug (auto-generated if not provided)")
    logo: Optional[str] = Field(None, description="Logo URL or storage key")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Opaque metadata")
    settings: Optional[OrganizationSettingsModel] = Field(None, description="Join policy flags")
    allowed_domains: List[str] = Field(default_factory=list, description="Email domains allowed to self-join")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Acme Corporation",
                "slug": "acme-corp",
                "metadata": {"plan": "enterprise"},
                "settings": {"require_invitation_to_join": True},
                "allowed_domains": ["acme.com"],
            }
        }
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _validate_name(v)


class UpdateOrganizationRequest(BaseModel):
    """Request model for updating an organization. All fields optional."""

    name: Optional[str] = Field(None, description="Organization display name")
    slug: Optional[str] = Field(None, description="New slug")
    logo: Optional[str] = Field(None, description="Logo URL or storage key")
    clear_logo: bool = Field(False, description="Remove the current logo")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Replacement metadata")
    settings: Optional[OrganizationSettingsModel] = Field(None, description="Replacement join policy")
    allowed_domains: Optional[List[str]] = Field(None, description="Replacement allowed domains")
    status: Optional[OrganizationStatus] = Field(None, description="Lifecycle status")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _validate_name(v)


class TransferOwnershipRequest(BaseModel):
    new_owner_id: str = Field(..., description="Existing member who becomes owner")
    previous_owner_role: InvitationRole = Field(
        InvitationRole.ADMIN, description="Role the current owner keeps after the transfer"
    )
