from .role_hierarchy import (
    ROLE_RANKS,
    PermissionCheck,
    get_role_rank,
    has_at_least,
    is_valid_role,
)

__all__ = ["ROLE_RANKS", "PermissionCheck", "get_role_rank", "has_at_least", "is_valid_role"]
