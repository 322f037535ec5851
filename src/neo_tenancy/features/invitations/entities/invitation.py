"""Invitation domain entity and its state machine.

States: ``pending -> {accepted, cancelled, expired}``. All non-pending states
are terminal. Expiry is evaluated lazily: ``is_expired`` is derived from
``expires_at`` and the transition to ``expired`` is applied explicitly by
``transition_if_expired`` when a mutation first inspects the invitation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ....config.constants import IdentifierType, InvitationStatus
from ....core.exceptions import InvalidStateError
from ....utils.timezone import ensure_utc, utc_now


def normalize_identifier(identifier: str) -> str:
    """Canonical form used for storage and lookups."""
    return identifier.strip().lower()


def email_domain(identifier: str) -> Optional[str]:
    """Return the lowercased domain of an email address, or None."""
    normalized = normalize_identifier(identifier)
    at = normalized.rfind("@")
    if at <= 0 or at == len(normalized) - 1:
        return None
    return normalized[at + 1:]


@dataclass
class Invitation:
    """Invitation domain entity."""

    id: str
    organization_id: str
    invitee_identifier: str
    role: str
    inviter_id: str
    expires_at: datetime
    identifier_type: Optional[IdentifierType] = None
    team_id: Optional[str] = None
    inviter_name: Optional[str] = None
    message: Optional[str] = None
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        if not self.invitee_identifier or not self.invitee_identifier.strip():
            raise ValueError("Invitee identifier cannot be empty")
        self.invitee_identifier = normalize_identifier(self.invitee_identifier)
        self.expires_at = ensure_utc(self.expires_at)
        if not isinstance(self.status, InvitationStatus):
            self.status = InvitationStatus(self.status)
        if self.identifier_type is not None and not isinstance(self.identifier_type, IdentifierType):
            self.identifier_type = IdentifierType(self.identifier_type)

    @property
    def is_pending(self) -> bool:
        return self.status == InvitationStatus.PENDING

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Derived predicate; never persisted."""
        return (now or utc_now()) > self.expires_at

    def ensure_pending(self) -> None:
        """Raise InvalidStateError naming the current status unless pending."""
        if not self.is_pending:
            raise InvalidStateError(
                f"Invitation has already been {self.status.value}",
                details={"invitation_id": self.id, "status": self.status.value},
            )

    def transition_if_expired(self, now: Optional[datetime] = None) -> bool:
        """Flip a pending, past-due invitation to ``expired``.

        Returns True only for the call that performed the transition.
        """
        if self.is_pending and self.is_expired(now):
            self._move_to(InvitationStatus.EXPIRED)
            return True
        return False

    def accept(self) -> None:
        self.ensure_pending()
        self._move_to(InvitationStatus.ACCEPTED)

    def cancel(self) -> None:
        self.ensure_pending()
        self._move_to(InvitationStatus.CANCELLED)

    def _move_to(self, status: InvitationStatus) -> None:
        self.status = status
        self.updated_at = utc_now()
