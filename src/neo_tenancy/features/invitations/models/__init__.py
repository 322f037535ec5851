"""Invitation request/response models."""

from .requests import (
    CreateInvitationRequest,
    BulkInvitationItem,
    BulkInviteRequest,
    AcceptInvitationRequest,
)
from .responses import InvitationResponse, InvitationDetailsResponse, ResendInvitationResponse

__all__ = [
    # Request models
    "CreateInvitationRequest",
    "BulkInvitationItem",
    "BulkInviteRequest",
    "AcceptInvitationRequest",
    
    # Response models
    "InvitationResponse",
    "InvitationDetailsResponse",
    "ResendInvitationResponse",
]
