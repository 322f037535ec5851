"""Keyset cursors over ``(created_at, id)``."""

import base64
import json
from datetime import datetime
from typing import Any, Dict, List, Sequence, Tuple, TypeVar

from ....utils.timezone import ensure_utc
from ..entities.requests import CursorPaginationRequest
from ..entities.responses import CursorPaginationResponse

T = TypeVar("T")


def encode_cursor(data: Dict[str, Any]) -> str:
    """Encode cursor data to an unpadded urlsafe base64 string."""
    json_str = json.dumps(data, separators=(",", ":"), sort_keys=True)
    return base64.urlsafe_b64encode(json_str.encode()).decode().rstrip("=")


def decode_cursor(cursor: str) -> Dict[str, Any]:
    """Decode a cursor produced by ``encode_cursor``.

    Raises:
        ValueError: the cursor is not a base64 JSON object
    """
    padding = 4 - (len(cursor) % 4)
    if padding != 4:
        cursor += "=" * padding

    try:
        data = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
        raise ValueError(f"Invalid cursor format: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Invalid cursor format: expected an object")
    return data


def _sort_key(item: Any) -> Tuple[datetime, str]:
    return ensure_utc(item.created_at), item.id


def _cursor_key(cursor: str) -> Tuple[datetime, str]:
    data = decode_cursor(cursor)
    try:
        return ensure_utc(datetime.fromisoformat(data["created_at"])), str(data["id"])
    except (KeyError, TypeError) as e:
        raise ValueError(f"Invalid cursor format: {e!r}") from e


def paginate_newest_first(items: Sequence[T], pagination: CursorPaginationRequest) -> CursorPaginationResponse[T]:
    """Page ``items`` by ``created_at`` descending, ties broken by ``id`` descending."""
    ordered: List[T] = sorted(items, key=_sort_key, reverse=True)
    if pagination.cursor_after:
        after = _cursor_key(pagination.cursor_after)
        ordered = [item for item in ordered if _sort_key(item) < after]

    page = ordered[:pagination.limit]
    has_more = len(ordered) > pagination.limit

    next_cursor = None
    if page and has_more:
        last = page[-1]
        next_cursor = encode_cursor({"created_at": ensure_utc(last.created_at).isoformat(), "id": last.id})

    return CursorPaginationResponse(items=page, next_cursor=next_cursor, has_more=has_more)
