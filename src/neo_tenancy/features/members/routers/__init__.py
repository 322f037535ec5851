"""Member routers."""

from .member_router import router as member_router

__all__ = ["member_router"]
