from .requests import CursorPaginationRequest
from .responses import CursorPaginationResponse

__all__ = ["CursorPaginationRequest", "CursorPaginationResponse"]
