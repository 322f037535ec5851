"""Permissions feature package.

Role hierarchy evaluation (``owner > admin > member``) and the
operation-to-permission map used for fine-grained checks.
"""

from .entities import ROLE_RANKS, PermissionCheck, get_role_rank, has_at_least, is_valid_role
from .utils import DEFAULT_TENANTS_PERMISSION_MAP, DEFAULT_ROLE_PERMISSIONS, build_permission_map, permission_for
from .services import PermissionService

__all__ = [
    "ROLE_RANKS",
    "PermissionCheck",
    "get_role_rank",
    "has_at_least",
    "is_valid_role",
    "DEFAULT_TENANTS_PERMISSION_MAP",
    "DEFAULT_ROLE_PERMISSIONS",
    "build_permission_map",
    "permission_for",
    "PermissionService",
]
