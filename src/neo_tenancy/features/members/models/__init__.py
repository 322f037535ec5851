"""Member request/response models."""

from .requests import (
    AddMemberRequest,
    UpdateMemberRoleRequest,
    JoinByDomainRequest,
    BulkAddMembersRequest,
    BulkRemoveMembersRequest,
)
from .responses import MemberResponse, MemberCountResponse, PermissionCheckResponse

__all__ = [
    # Request models
    "AddMemberRequest",
    "UpdateMemberRoleRequest",
    "JoinByDomainRequest",
    "BulkAddMembersRequest",
    "BulkRemoveMembersRequest",
    
    # Response models
    "MemberResponse",
    "MemberCountResponse",
    "PermissionCheckResponse",
]
