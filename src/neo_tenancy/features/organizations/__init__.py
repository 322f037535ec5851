"""Organizations feature package.

Organization entities and API models. Services and routers live in
``organizations.services`` and ``organizations.routers``.
"""

from .entities import Organization, OrganizationSettings, SLUG_PATTERN, UserOrganization
from .models import (
    # Request models
    OrganizationSettingsModel,
    CreateOrganizationRequest,
    UpdateOrganizationRequest,
    TransferOwnershipRequest,
    
    # Response models
    OrganizationResponse,
    UserOrganizationResponse,
    OrganizationDeletionResponse,
)

__all__ = [
    # Entities
    "Organization",
    "OrganizationSettings",
    "SLUG_PATTERN",
    "UserOrganization",
    
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
