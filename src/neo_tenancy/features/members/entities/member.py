"""Member domain entity.

A member is a user's role-bearing association with one organization,
unique per ``(organization_id, user_id)``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ....config.constants import MemberStatus, OrgRole
from ....utils.timezone import utc_now


@dataclass
class Member:
    """Member domain entity."""
    
    id: str
    organization_id: str
    user_id: str
    role: str
    status: MemberStatus = MemberStatus.ACTIVE
    suspended_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    
    def __post_init__(self):
        if not self.user_id:
            raise ValueError("Member must reference a user")
        if not self.role:
            raise ValueError("Member role cannot be empty")
        if not isinstance(self.status, MemberStatus):
            self.status = MemberStatus(self.status)
    
    @property
    def is_owner(self) -> bool:
        return self.role == OrgRole.OWNER.value
    
    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE
    
    @property
    def is_suspended(self) -> bool:
        return self.status == MemberStatus.SUSPENDED
    
    def change_role(self, role: str) -> None:
        self.role = role
        self.updated_at = utc_now()
    
    def suspend(self) -> None:
        now = utc_now()
        self.status = MemberStatus.SUSPENDED
        self.suspended_at = now
        self.updated_at = now
    
    def unsuspend(self) -> None:
        self.status = MemberStatus.ACTIVE
        self.suspended_at = None
        self.updated_at = utc_now()
