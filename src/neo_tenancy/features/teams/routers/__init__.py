"""Team routers."""

from .team_router import router as team_router

__all__ = ["team_router"]
