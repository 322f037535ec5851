"""Sync commands issued to the authorization subsystem."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .scope import Relation, Scope


class SyncAction(str, Enum):
    ASSIGN_ROLE = "assign_role"
    REVOKE_ROLE = "revoke_role"
    ADD_RELATION = "add_relation"
    REMOVE_RELATION = "remove_relation"


@dataclass(frozen=True)
class SyncCommand:
    """One idempotent authorization write."""
    
    action: SyncAction
    user_id: Optional[str] = None
    role: Optional[str] = None
    scope: Optional[Scope] = None
    relation: Optional[Relation] = None
    assigned_by: Optional[str] = None
    
    def __str__(self) -> str:
        if self.relation is not None:
            return f"{self.action.value}({self.relation})"
        return f"{self.action.value}({self.user_id}, {self.role}, {self.scope})"
    
    @classmethod
    def assign_role(cls, user_id: str, role: str, scope: Scope, assigned_by: Optional[str] = None) -> "SyncCommand":
        return cls(SyncAction.ASSIGN_ROLE, user_id=user_id, role=role, scope=scope, assigned_by=assigned_by)
    
    @classmethod
    def revoke_role(cls, user_id: str, role: str, scope: Scope) -> "SyncCommand":
        return cls(SyncAction.REVOKE_ROLE, user_id=user_id, role=role, scope=scope)
    
    @classmethod
    def add_relation(cls, relation: Relation) -> "SyncCommand":
        return cls(SyncAction.ADD_RELATION, relation=relation)
    
    @classmethod
    def remove_relation(cls, relation: Relation) -> "SyncCommand":
        return cls(SyncAction.REMOVE_RELATION, relation=relation)
