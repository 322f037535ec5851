"""Team domain entities.

This module defines the Team and TeamMember entities and the tree node used
for hierarchical listings.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime

from ....utils.timezone import utc_now
from ...organizations.entities.organization import SLUG_PATTERN


@dataclass
class Team:
    """Team domain entity.
    
    Represents a named sub-grouping within an organization, optionally nested
    under a parent team of the same organization.
    """
    
    # Core Identity
    id: str
    organization_id: str
    name: str
    slug: str  # unique within the organization
    description: Optional[str] = None
    
    # Hierarchy
    parent_team_id: Optional[str] = None
    
    # Customization
    metadata: Dict[str, Any] = field(default_factory=dict)
    
    # Lifecycle
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    
    def __post_init__(self):
        """Post-initialization validation."""
        if not self.name or not self.name.strip():
            raise ValueError("Team name cannot be empty")
        if not SLUG_PATTERN.match(self.slug):
            raise ValueError(f"Invalid team slug format: {self.slug}")
    
    @property
    def is_root_team(self) -> bool:
        """Check if team is a root team (no parent)."""
        return self.parent_team_id is None
    
    def rename(self, name: str) -> None:
        if not name or not name.strip():
            raise ValueError("Team name cannot be empty")
        self.name = name.strip()
        self.updated_at = utc_now()
    
    def change_slug(self, slug: str) -> None:
        if not SLUG_PATTERN.match(slug):
            raise ValueError(f"Invalid team slug format: {slug}")
        self.slug = slug
        self.updated_at = utc_now()
    
    def move_to(self, parent_team_id: Optional[str]) -> None:
        """Re-parent the team. Callers validate the hierarchy first."""
        self.parent_team_id = parent_team_id
        self.updated_at = utc_now()
    
    def update_details(
        self,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if description is not None:
            self.description = description
        if metadata is not None:
            self.metadata = dict(metadata)
        self.updated_at = utc_now()


@dataclass
class TeamMember:
    """A user's membership in one team, unique per ``(team_id, user_id)``."""
    
    id: str
    team_id: str
    user_id: str
    role: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    
    def change_role(self, role: Optional[str]) -> None:
        self.role = role


@dataclass
class TeamTreeNode:
    team: Team
    children: List["TeamTreeNode"] = field(default_factory=list)
