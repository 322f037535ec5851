"""Default permission vocabulary for tenancy operations.

``DEFAULT_TENANTS_PERMISSION_MAP`` maps each guarded operation to the
permission string an authorization client checks for it;
``DEFAULT_ROLE_PERMISSIONS`` lists the permissions each organization role
grants. Applications override either by passing their own mappings.
"""

from typing import Dict, FrozenSet, Mapping, Optional, Union

DEFAULT_TENANTS_PERMISSION_MAP: Dict[str, str] = {
    "update_organization": "organizations:update",
    "delete_organization": "organizations:delete",
    "add_member": "members:add",
    "remove_member": "members:remove",
    "update_member_role": "members:updateRole",
    "create_team": "teams:create",
    "update_team": "teams:update",
    "delete_team": "teams:delete",
    "add_team_member": "teams:addMember",
    "remove_team_member": "teams:removeMember",
    "invite_member": "invitations:create",
    "resend_invitation": "invitations:resend",
    "cancel_invitation": "invitations:cancel",
}

DEFAULT_ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "owner": frozenset({
        "organizations:read", "organizations:update", "organizations:delete",
        "members:add", "members:remove", "members:updateRole", "members:list",
        "teams:create", "teams:update", "teams:delete", "teams:addMember",
        "teams:removeMember", "teams:list",
        "invitations:create", "invitations:cancel", "invitations:resend", "invitations:list",
    }),
    "admin": frozenset({
        "organizations:read", "organizations:update",
        "members:add", "members:remove", "members:list",
        "teams:create", "teams:update", "teams:delete", "teams:addMember",
        "teams:removeMember", "teams:list",
        "invitations:create", "invitations:cancel", "invitations:resend", "invitations:list",
    }),
    "member": frozenset({
        "organizations:read", "members:list", "teams:list", "invitations:list",
    }),
}

PermissionMap = Mapping[str, Union[str, bool]]


def build_permission_map(overrides: Optional[PermissionMap] = None) -> Dict[str, Union[str, bool]]:
    """Merge overrides into the defaults. ``False`` disables the check for an operation."""
    merged: Dict[str, Union[str, bool]] = dict(DEFAULT_TENANTS_PERMISSION_MAP)
    if overrides:
        unknown = set(overrides) - set(DEFAULT_TENANTS_PERMISSION_MAP)
        if unknown:
            raise ValueError(f"Unknown operations in permission map: {sorted(unknown)}")
        merged.update(overrides)
    return merged


def permission_for(operation: str, permission_map: Optional[PermissionMap] = None) -> Optional[str]:
    """Permission string guarding ``operation``, or None when unguarded."""
    mapping = permission_map if permission_map is not None else DEFAULT_TENANTS_PERMISSION_MAP
    permission = mapping.get(operation)
    if not permission:
        return None
    return str(permission)
