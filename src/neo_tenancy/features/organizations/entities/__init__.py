from .organization import Organization, OrganizationSettings, SLUG_PATTERN
from .membership import UserOrganization

__all__ = ["Organization", "OrganizationSettings", "SLUG_PATTERN", "UserOrganization"]
