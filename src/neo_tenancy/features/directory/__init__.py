"""Tenant directory core.

Storage protocols and backends, lifecycle callbacks, bulk results and the
error-handling decorators shared by every directory service. The services
in ``directory.services`` depend on the permissions feature and are imported
from there directly.
"""

from .entities import BulkItemError, BulkResult, DirectoryStore, DirectoryTransaction, TenancyCallbacks
from .repositories import InMemoryDirectoryStore, PostgresDirectoryStore
from .utils import directory_error_handler, log_directory_operation

__all__ = [
    "BulkItemError",
    "BulkResult",
    "DirectoryStore",
    "DirectoryTransaction",
    "TenancyCallbacks",
    "InMemoryDirectoryStore",
    "PostgresDirectoryStore",
    "directory_error_handler",
    "log_directory_operation",
]
