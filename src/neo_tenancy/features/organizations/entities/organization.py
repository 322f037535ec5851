"""Organization domain entity.

An organization is a tenant: an isolated namespace owning members, teams and
invitations. Exactly one user owns it at any time.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ....config.constants import OrganizationStatus
from ....utils.timezone import utc_now

SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')


@dataclass
class OrganizationSettings:
    """Join policy flags. ``None`` means the flag was never set."""
    
    allow_public_signup: Optional[bool] = None
    require_invitation_to_join: Optional[bool] = None
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("allow_public_signup", self.allow_public_signup),
                ("require_invitation_to_join", self.require_invitation_to_join),
            )
            if value is not None
        }
    
    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "OrganizationSettings":
        data = data or {}
        return cls(
            allow_public_signup=data.get("allow_public_signup"),
            require_invitation_to_join=data.get("require_invitation_to_join"),
        )


@dataclass
class Organization:
    """Organization domain entity."""
    
    # Core Identity
    id: str
    name: str
    slug: str  # globally unique
    owner_id: str
    
    # Branding and opaque data
    logo: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    settings: OrganizationSettings = field(default_factory=OrganizationSettings)
    allowed_domains: List[str] = field(default_factory=list)
    
    # Lifecycle
    status: OrganizationStatus = OrganizationStatus.ACTIVE
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    
    def __post_init__(self):
        """Post-initialization validation."""
        if not self.name or not self.name.strip():
            raise ValueError("Organization name cannot be empty")
        if not SLUG_PATTERN.match(self.slug):
            raise ValueError(f"Invalid organization slug format: {self.slug}")
        if not self.owner_id:
            raise ValueError("Organization must have an owner")
        if not isinstance(self.status, OrganizationStatus):
            self.status = OrganizationStatus(self.status)
        if isinstance(self.settings, dict):
            self.settings = OrganizationSettings.from_dict(self.settings)
        self.allowed_domains = [d.strip().lower() for d in self.allowed_domains if d and d.strip()]
    
    @property
    def is_active(self) -> bool:
        return self.status == OrganizationStatus.ACTIVE
    
    def allows_domain(self, domain: str) -> bool:
        """Check whether users from ``domain`` may join without an invitation."""
        return domain.strip().lower() in self.allowed_domains
    
    def rename(self, name: str) -> None:
        if not name or not name.strip():
            raise ValueError("Organization name cannot be empty")
        self.name = name.strip()
        self.updated_at = utc_now()
    
    def change_slug(self, slug: str) -> None:
        if not SLUG_PATTERN.match(slug):
            raise ValueError(f"Invalid organization slug format: {slug}")
        self.slug = slug
        self.updated_at = utc_now()
    
    def set_status(self, status: OrganizationStatus) -> None:
        self.status = OrganizationStatus(status)
        self.updated_at = utc_now()
    
    def transfer_to(self, new_owner_id: str) -> None:
        """Point ownership at another user. Member roles are updated by the caller."""
        self.owner_id = new_owner_id
        self.updated_at = utc_now()
    
    def update_details(
        self,
        logo: Optional[str] = None,
        clear_logo: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
        settings: Optional[OrganizationSettings] = None,
        allowed_domains: Optional[List[str]] = None,
    ) -> None:
        if clear_logo:
            self.logo = None
        elif logo is not None:
            self.logo = logo
        if metadata is not None:
            self.metadata = dict(metadata)
        if settings is not None:
            self.settings = settings
        if allowed_domains is not None:
            self.allowed_domains = [d.strip().lower() for d in allowed_domains if d and d.strip()]
        self.updated_at = utc_now()
