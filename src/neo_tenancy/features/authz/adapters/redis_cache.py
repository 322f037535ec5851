"""
Redis cache for authorization permission checks.

Cache failures never fail a check: they are logged and treated as a miss.
"""
import logging
from typing import Optional

import redis.asyncio as redis

from ....config.constants import CacheKeys

logger = logging.getLogger(__name__)


class RedisPermissionCache:
    """Caches ``can`` results keyed by user, scope and permission."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = "neo_tenancy", ttl: int = 600):
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._ttl = ttl

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "neo_tenancy", ttl: int = 600) -> "RedisPermissionCache":
        return cls(redis.from_url(url), key_prefix=key_prefix, ttl=ttl)

    def _key(self, user_id: str, scope: str, permission: str) -> str:
        return f"{self._key_prefix}:" + CacheKeys.PERMISSION_CHECK.format(
            user_id=user_id, scope=scope, permission=permission
        )

    async def get_permission_check(self, user_id: str, scope: str, permission: str) -> Optional[bool]:
        """Get cached permission check result."""
        try:
            result = await self._redis.get(self._key(user_id, scope, permission))
            if result is not None:
                if isinstance(result, bytes):
                    result = result.decode()
                return result == "true"
            return None
        except redis.RedisError as e:
            logger.warning(f"Failed to get permission check from cache: {e}")
            return None

    async def set_permission_check(self, user_id: str, scope: str, permission: str, result: bool) -> None:
        """Cache permission check result."""
        try:
            await self._redis.setex(self._key(user_id, scope, permission), self._ttl, "true" if result else "false")
        except redis.RedisError as e:
            logger.warning(f"Failed to cache permission check: {e}")

    async def invalidate_user(self, user_id: str) -> int:
        """Drop every cached check for a user. Returns the number of keys deleted."""
        pattern = f"{self._key_prefix}:" + CacheKeys.USER_PATTERN.format(user_id=user_id)
        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
            if not keys:
                return 0
            return await self._redis.delete(*keys)
        except redis.RedisError as e:
            logger.warning(f"Failed to invalidate permission cache for user {user_id}: {e}")
            return 0

    async def close(self) -> None:
        await self._redis.aclose()
