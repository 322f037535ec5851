"""Authorization client implementations."""

from .memory_client import InMemoryAuthorizationClient
from .postgres_client import PostgresAuthorizationClient
from .redis_cache import RedisPermissionCache

__all__ = ["InMemoryAuthorizationClient", "PostgresAuthorizationClient", "RedisPermissionCache"]
