"""Pagination request entities."""

from dataclasses import dataclass
from typing import Optional

MAX_PAGE_SIZE = 1000


@dataclass(frozen=True)
class CursorPaginationRequest:
    """Cursor-based pagination request.

    ``cursor_after`` is the ``next_cursor`` of the previous page; leave it
    unset for the first page.
    """

    limit: int = 50
    cursor_after: Optional[str] = None

    def __post_init__(self):
        if self.limit < 1 or self.limit > MAX_PAGE_SIZE:
            raise ValueError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")
