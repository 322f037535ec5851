"""Role hierarchy evaluation.

A fixed total order over organization roles: ``owner > admin > member``.
Unknown role names rank below every known role.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union

from ....config.constants import OrgRole

ROLE_RANKS: Dict[str, int] = {
    OrgRole.OWNER.value: 3,
    OrgRole.ADMIN.value: 2,
    OrgRole.MEMBER.value: 1,
}

RoleLike = Union[OrgRole, str]


def _role_name(role: Optional[RoleLike]) -> Optional[str]:
    if role is None:
        return None
    return role.value if isinstance(role, OrgRole) else role


def get_role_rank(role: Optional[RoleLike]) -> int:
    """Numerical level for comparison (higher = more privileged)."""
    return ROLE_RANKS.get(_role_name(role), 0)


def has_at_least(actual_role: Optional[RoleLike], required_role: RoleLike) -> bool:
    """True when ``actual_role`` ranks at or above ``required_role``."""
    if actual_role is None:
        return False
    return get_role_rank(actual_role) >= get_role_rank(required_role)


def is_valid_role(role: Optional[RoleLike]) -> bool:
    return _role_name(role) in ROLE_RANKS


@dataclass(frozen=True)
class PermissionCheck:
    """Result of a non-raising role check."""
    
    has_permission: bool
    current_role: Optional[str] = None
