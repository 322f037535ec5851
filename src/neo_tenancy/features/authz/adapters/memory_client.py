"""In-process authorization client.

Keeps role assignments and relation tuples in sets, which makes every write
idempotent by construction. ``can`` resolves permissions through the
role-to-permission table.
"""

import logging
from datetime import datetime
from typing import Dict, FrozenSet, List, Mapping, Optional, Set, Tuple

from ....core.exceptions import ForbiddenError
from ....utils.timezone import utc_now
from ...permissions.utils.permission_map import DEFAULT_ROLE_PERMISSIONS
from ..entities.scope import Relation, Scope

logger = logging.getLogger(__name__)

_Assignment = Tuple[str, str, Optional[Scope]]
_MISSING = object()


class InMemoryAuthorizationClient:
    """AuthorizationClient holding its facts in memory."""

    def __init__(self, role_permissions: Optional[Mapping[str, FrozenSet[str]]] = None):
        self._role_permissions = dict(role_permissions or DEFAULT_ROLE_PERMISSIONS)
        self._assignments: Dict[_Assignment, Optional[datetime]] = {}
        self._relations: Set[Relation] = set()

    @staticmethod
    def _assignment_id(key: _Assignment) -> str:
        user_id, role, scope = key
        return f"{user_id}:{role}@{scope or 'global'}"

    async def assign_role(
        self,
        user_id: str,
        role: str,
        scope: Scope,
        expires_at: Optional[datetime] = None,
        assigned_by: Optional[str] = None,
    ) -> str:
        key = (user_id, role, scope)
        self._assignments[key] = expires_at
        logger.debug(f"Assigned role {role} to {user_id} in {scope} (by {assigned_by})")
        return self._assignment_id(key)

    async def revoke_role(self, user_id: str, role: str, scope: Scope) -> bool:
        return self._assignments.pop((user_id, role, scope), _MISSING) is not _MISSING

    async def add_relation(
        self, subject_type: str, subject_id: str, relation: str, object_type: str, object_id: str
    ) -> str:
        rel = Relation(subject_type, subject_id, relation, object_type, object_id)
        self._relations.add(rel)
        return str(rel)

    async def remove_relation(
        self, subject_type: str, subject_id: str, relation: str, object_type: str, object_id: str
    ) -> bool:
        rel = Relation(subject_type, subject_id, relation, object_type, object_id)
        if rel in self._relations:
            self._relations.remove(rel)
            return True
        return False

    def get_user_roles(self, user_id: str, scope: Optional[Scope] = None) -> List[str]:
        now = utc_now()
        return sorted(
            role
            for (uid, role, role_scope), expires_at in self._assignments.items()
            if uid == user_id
            and (scope is None or role_scope == scope)
            and (expires_at is None or expires_at > now)
        )

    def has_relation(self, relation: Relation) -> bool:
        return relation in self._relations

    @property
    def relations(self) -> FrozenSet[Relation]:
        return frozenset(self._relations)

    @property
    def assignment_count(self) -> int:
        return len(self._assignments)

    async def can(self, user_id: str, permission: str, scope: Optional[Scope] = None) -> bool:
        return any(
            permission in self._role_permissions.get(role, frozenset())
            for role in self.get_user_roles(user_id, scope)
        )

    async def require(self, user_id: str, permission: str, scope: Optional[Scope] = None) -> None:
        if not await self.can(user_id, permission, scope):
            raise ForbiddenError(
                f"Permission denied: {permission}",
                details={"user_id": user_id, "permission": permission, "scope": str(scope) if scope else None},
            )

