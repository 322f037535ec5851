"""Invitation routers."""

from .invitation_router import invitation_router, organization_invitations_router

__all__ = ["invitation_router", "organization_invitations_router"]
