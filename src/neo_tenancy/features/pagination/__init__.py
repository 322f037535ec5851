"""Cursor pagination for directory listings.

Listings are walked newest first on ``(created_at, id)``; the cursor is an
opaque urlsafe-base64 JSON token naming the last item of the previous page.
"""

from .entities import CursorPaginationRequest, CursorPaginationResponse
from .utils import decode_cursor, encode_cursor, paginate_newest_first

__all__ = [
    "CursorPaginationRequest",
    "CursorPaginationResponse",
    "decode_cursor",
    "encode_cursor",
    "paginate_newest_first",
]
