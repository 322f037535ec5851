"""Read models returned by invitation lookups."""

from dataclasses import dataclass

from .invitation import Invitation


@dataclass(frozen=True)
class InvitationDetails:
    """An invitation with its organization's name and derived expiry flag.
    
    ``is_expired`` is computed at read time and never persisted, so a pending
    invitation may report ``is_expired=True`` until a mutation flips it.
    """
    
    invitation: Invitation
    organization_name: str
    is_expired: bool
