"""Organization routers.

Ready-to-use FastAPI router that applications include directly.
"""

from .organization_router import router as organization_router

__all__ = ["organization_router"]
