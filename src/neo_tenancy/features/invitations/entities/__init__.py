from .invitation import Invitation, normalize_identifier, email_domain
from .details import InvitationDetails

__all__ = ["Invitation", "InvitationDetails", "normalize_identifier", "email_domain"]
