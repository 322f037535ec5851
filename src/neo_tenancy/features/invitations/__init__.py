"""Invitations feature package."""

from .entities import Invitation, InvitationDetails, normalize_identifier, email_domain
from .models import (
    CreateInvitationRequest,
    BulkInvitationItem,
    BulkInviteRequest,
    AcceptInvitationRequest,
    InvitationResponse,
    InvitationDetailsResponse,
    ResendInvitationResponse,
)

__all__ = [
    "Invitation",
    "InvitationDetails",
    "normalize_identifier",
    "email_domain",
    "CreateInvitationRequest",
    "BulkInvitationItem",
    "BulkInviteRequest",
    "AcceptInvitationRequest",
    "InvitationResponse",
    "InvitationDetailsResponse",
    "ResendInvitationResponse",
]
