"""Organization as seen by one of its members."""

from dataclasses import dataclass

from ...members.entities.member import Member
from .organization import Organization


@dataclass
class UserOrganization:
    """An organization together with the listing user's membership."""
    
    organization: Organization
    member: Member
    
    @property
    def role(self) -> str:
        return self.member.role
