"""Protocol for the external authorization subsystem.

Every write command is idempotent: re-assigning a held role or re-adding a
present relation is a no-op, and revoking or removing something absent
returns False instead of failing.
"""

from abc import abstractmethod
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from .scope import Scope


@runtime_checkable
class AuthorizationClient(Protocol):
    """Command interface of the authorization service."""
    
    @abstractmethod
    async def assign_role(
        self,
        user_id: str,
        role: str,
        scope: Scope,
        expires_at: Optional[datetime] = None,
        assigned_by: Optional[str] = None,
    ) -> str:
        """Assign a role in scope; returns the assignment id."""
        ...
    
    @abstractmethod
    async def revoke_role(self, user_id: str, role: str, scope: Scope) -> bool:
        """Revoke a role; True when an assignment was removed."""
        ...
    
    @abstractmethod
    async def add_relation(
        self,
        subject_type: str,
        subject_id: str,
        relation: str,
        object_type: str,
        object_id: str,
    ) -> str:
        """Record a relation tuple; returns the relation id."""
        ...
    
    @abstractmethod
    async def remove_relation(
        self,
        subject_type: str,
        subject_id: str,
        relation: str,
        object_type: str,
        object_id: str,
    ) -> bool:
        """Delete a relation tuple; True when one was removed."""
        ...
    
    @abstractmethod
    async def can(self, user_id: str, permission: str, scope: Optional[Scope] = None) -> bool:
        """Check a permission without raising."""
        ...
    
    @abstractmethod
    async def require(self, user_id: str, permission: str, scope: Optional[Scope] = None) -> None:
        """Raise ForbiddenError unless the user holds the permission."""
        ...
