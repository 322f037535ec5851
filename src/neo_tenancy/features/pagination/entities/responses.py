"""Pagination response entities."""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class CursorPaginationResponse(Generic[T]):
    """One page of a cursor-paginated listing."""

    items: List[T] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def has_next(self) -> bool:
        """Check if there are more items."""
        return self.has_more and self.next_cursor is not None

    @property
    def cursor_info(self) -> Dict[str, Any]:
        return {
            "items_count": self.count,
            "has_next": self.has_next,
            "next_cursor": self.next_cursor,
        }
