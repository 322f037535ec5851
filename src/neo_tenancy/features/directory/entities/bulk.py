"""Per-item results of bulk operations."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ....core.exceptions import AuthorizationSyncError


@dataclass(frozen=True)
class BulkItemError:
    """A failed bulk item: the input identifier plus the error code and message."""
    
    identifier: str
    code: str
    message: str
    
    def to_dict(self) -> Dict[str, str]:
        return {"identifier": self.identifier, "code": self.code, "message": self.message}


@dataclass
class BulkResult:
    """Outcome of a bulk operation: succeeded items and per-item errors.
    
    ``sync_errors`` maps the identifier of an item whose directory write
    committed but whose authorization sync failed to that failure. Such items
    are also listed in ``success``; pass each error to
    ``AuthorizationSyncAdapter.retry`` to converge.
    """
    
    success: List[Any] = field(default_factory=list)
    errors: List[BulkItemError] = field(default_factory=list)
    sync_errors: Dict[str, AuthorizationSyncError] = field(default_factory=dict)
    
    @property
    def all_succeeded(self) -> bool:
        return not self.errors and not self.sync_errors
    
    def add_error(self, identifier: str, code: str, message: str) -> None:
        self.errors.append(BulkItemError(identifier, code, message))
    
    def add_sync_error(self, identifier: str, error: AuthorizationSyncError) -> None:
        self.sync_errors[identifier] = error
