from .permission_map import (
    DEFAULT_TENANTS_PERMISSION_MAP,
    DEFAULT_ROLE_PERMISSIONS,
    build_permission_map,
    permission_for,
)

__all__ = [
    "DEFAULT_TENANTS_PERMISSION_MAP",
    "DEFAULT_ROLE_PERMISSIONS",
    "build_permission_map",
    "permission_for",
]
