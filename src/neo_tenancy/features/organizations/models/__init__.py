"""Organization request/response models."""

from .requests import (
    OrganizationSettingsModel,
    CreateOrganizationRequest,
    UpdateOrganizationRequest,
    TransferOwnershipRequest,
)
from .responses import (
    OrganizationResponse,
    UserOrganizationResponse,
    OrganizationDeletionResponse,
)

__all__ = [
    # Request models
    "OrganizationSettingsModel",
    "CreateOrganizationRequest",
    "UpdateOrganizationRequest",
    "TransferOwnershipRequest",
    
    # Response models
    "OrganizationResponse",
    "UserOrganizationResponse",
    "OrganizationDeletionResponse",
]
