"""Shared plumbing for the directory operation services.

Every mutating operation follows the same shape: open one store
transaction, gate on the caller's role, mutate (guards included), commit,
apply the authorization commands, then run the lifecycle callbacks.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from ....config.settings import TenancySettings, get_settings
from ....core.exceptions import InvalidArgumentError, LimitExceededError
from ...authz.entities.commands import SyncCommand
from ...authz.services.sync_adapter import AuthorizationSyncAdapter
from ...permissions.services.permission_service import PermissionService
from ..entities.callbacks import TenancyCallbacks
from ..entities.protocols import DirectoryStore

logger = logging.getLogger(__name__)


@contextmanager
def entity_validation() -> Iterator[None]:
    """Surface entity ``ValueError`` validation failures as InvalidArgumentError."""
    try:
        yield
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e


def check_limit(limit: Optional[int], current: int, message: str) -> None:
    if limit is not None and current >= limit:
        raise LimitExceededError(message, limit=limit, current=current)


class DirectoryServiceBase:
    """Dependencies common to every directory service."""

    def __init__(
        self,
        store: DirectoryStore,
        sync_adapter: AuthorizationSyncAdapter,
        permissions: Optional[PermissionService] = None,
        callbacks: Optional[TenancyCallbacks] = None,
        settings: Optional[TenancySettings] = None,
    ):
        self._store = store
        self._sync = sync_adapter
        self._settings = settings or get_settings()
        self._permissions = permissions or PermissionService(
            store,
            authz_client=sync_adapter.client,
            enforce_organization_status=self._settings.enforce_organization_status,
        )
        self._callbacks = callbacks or TenancyCallbacks()

    @property
    def store(self) -> DirectoryStore:
        return self._store

    @property
    def permissions(self) -> PermissionService:
        return self._permissions

    async def _apply_sync(self, operation: str, commands: Sequence[SyncCommand]) -> None:
        await self._sync.apply(operation, commands)
