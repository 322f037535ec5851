from .protocols import DirectoryStore, DirectoryTransaction
from .callbacks import TenancyCallbacks
from .bulk import BulkItemError, BulkResult

__all__ = ["DirectoryStore", "DirectoryTransaction", "TenancyCallbacks", "BulkItemError", "BulkResult"]
