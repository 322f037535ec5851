"""Members feature package.

Organization membership: roles, suspension, domain join and bulk changes.
"""

from .entities import Member
from .models import (
    AddMemberRequest,
    UpdateMemberRoleRequest,
    JoinByDomainRequest,
    BulkAddMembersRequest,
    BulkRemoveMembersRequest,
    MemberResponse,
    MemberCountResponse,
    PermissionCheckResponse,
)

__all__ = [
    "Member",
    "AddMemberRequest",
    "UpdateMemberRoleRequest",
    "JoinByDomainRequest",
    "BulkAddMembersRequest",
    "BulkRemoveMembersRequest",
    "MemberResponse",
    "MemberCountResponse",
    "PermissionCheckResponse",
]
