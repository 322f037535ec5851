"""Authorization sync feature.

Keeps an external authorization subsystem consistent with the directory:
role assignments per organization scope and ``user -member-> team``
relations.
"""

from .entities import AuthorizationClient, Relation, Scope, SyncAction, SyncCommand
from .services import AuthorizationSyncAdapter
from .adapters import InMemoryAuthorizationClient, PostgresAuthorizationClient, RedisPermissionCache

__all__ = [
    "AuthorizationClient",
    "Relation",
    "Scope",
    "SyncAction",
    "SyncCommand",
    "AuthorizationSyncAdapter",
    "InMemoryAuthorizationClient",
    "PostgresAuthorizationClient",
    "RedisPermissionCache",
]
