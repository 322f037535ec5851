"""
PostgreSQL-backed authorization client.

Stores role assignments and relation tuples in the authorization schema.
Writes are idempotent through ``ON CONFLICT`` clauses; permission checks
join assignments with the role-permission table and may be cached in Redis.
"""
import logging
from datetime import datetime
from typing import FrozenSet, List, Mapping, Optional

from ....config.constants import DatabaseSchemas
from ....core.exceptions import ForbiddenError
from ....database.connection import DatabaseManager, parse_row_count
from ....utils.uuid import generate_uuid_v7
from ...permissions.utils.permission_map import DEFAULT_ROLE_PERMISSIONS
from ..entities.scope import Scope
from ..utils.queries import (
    PERMISSION_CHECK,
    RELATION_DELETE,
    RELATION_GET_ID,
    RELATION_INSERT,
    ROLE_ASSIGNMENT_DELETE,
    ROLE_ASSIGNMENT_LIST_ACTIVE_ROLES,
    ROLE_ASSIGNMENT_UPSERT,
    ROLE_PERMISSION_INSERT,
)
from .redis_cache import RedisPermissionCache

logger = logging.getLogger(__name__)


class PostgresAuthorizationClient:
    """AuthorizationClient over the ``role_assignments`` and ``relations`` tables."""

    def __init__(
        self,
        database: DatabaseManager,
        schema: str = DatabaseSchemas.AUTHZ,
        cache: Optional[RedisPermissionCache] = None,
    ):
        self.db = database
        self.schema = schema
        self.cache = cache

    async def _invalidate(self, user_id: str) -> None:
        if self.cache is not None:
            await self.cache.invalidate_user(user_id)

    async def seed_role_permissions(
        self, role_permissions: Optional[Mapping[str, FrozenSet[str]]] = None
    ) -> int:
        """Load the role-to-permission table. Existing pairs are kept."""
        count = 0
        async with self.db.transaction(isolation="read_committed") as conn:
            for role, permissions in (role_permissions or DEFAULT_ROLE_PERMISSIONS).items():
                for permission in sorted(permissions):
                    await conn.execute(ROLE_PERMISSION_INSERT.format(schema=self.schema), role, permission)
                    count += 1
        logger.info(f"Seeded {count} role permissions into {self.schema}")
        return count

    async def assign_role(
        self,
        user_id: str,
        role: str,
        scope: Scope,
        expires_at: Optional[datetime] = None,
        assigned_by: Optional[str] = None,
    ) -> str:
        query = ROLE_ASSIGNMENT_UPSERT.format(schema=self.schema)
        assignment_id = await self.db.fetchval(
            query, generate_uuid_v7(), user_id, role, scope.type, scope.id, expires_at, assigned_by
        )
        await self._invalidate(user_id)
        logger.debug(f"Assigned role {role} to {user_id} in {scope}")
        return str(assignment_id)

    async def revoke_role(self, user_id: str, role: str, scope: Scope) -> bool:
        query = ROLE_ASSIGNMENT_DELETE.format(schema=self.schema)
        status = await self.db.execute(query, user_id, role, scope.type, scope.id)
        await self._invalidate(user_id)
        return parse_row_count(status) > 0

    async def add_relation(
        self, subject_type: str, subject_id: str, relation: str, object_type: str, object_id: str
    ) -> str:
        args = (subject_type, subject_id, relation, object_type, object_id)
        async with self.db.transaction(isolation="read_committed") as conn:
            await conn.execute(RELATION_INSERT.format(schema=self.schema), generate_uuid_v7(), *args)
            relation_id = await conn.fetchval(RELATION_GET_ID.format(schema=self.schema), *args)
        return str(relation_id)

    async def remove_relation(
        self, subject_type: str, subject_id: str, relation: str, object_type: str, object_id: str
    ) -> bool:
        query = RELATION_DELETE.format(schema=self.schema)
        status = await self.db.execute(query, subject_type, subject_id, relation, object_type, object_id)
        return parse_row_count(status) > 0

    async def get_user_roles(self, user_id: str, scope: Optional[Scope] = None) -> List[str]:
        query = ROLE_ASSIGNMENT_LIST_ACTIVE_ROLES.format(schema=self.schema)
        rows = await self.db.fetch(
            query, user_id, scope.type if scope else None, scope.id if scope else None
        )
        return [row["role"] for row in rows]

    async def can(self, user_id: str, permission: str, scope: Optional[Scope] = None) -> bool:
        scope_key = str(scope) if scope else "global"
        if self.cache is not None:
            cached = await self.cache.get_permission_check(user_id, scope_key, permission)
            if cached is not None:
                return cached

        query = PERMISSION_CHECK.format(schema=self.schema)
        allowed = bool(await self.db.fetchval(
            query, user_id, permission, scope.type if scope else None, scope.id if scope else None
        ))

        if self.cache is not None:
            await self.cache.set_permission_check(user_id, scope_key, permission, allowed)
        return allowed

    async def require(self, user_id: str, permission: str, scope: Optional[Scope] = None) -> None:
        if not await self.can(user_id, permission, scope):
            raise ForbiddenError(
                f"Permission denied: {permission}",
                details={"user_id": user_id, "permission": permission, "scope": str(scope) if scope else None},
            )
