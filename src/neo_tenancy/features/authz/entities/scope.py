"""Authorization scope and relation value objects."""

from dataclasses import dataclass

from ....config.constants import AuthzDefaults


@dataclass(frozen=True)
class Scope:
    """Resource a role assignment applies to, e.g. ``organization:<id>``."""
    
    type: str
    id: str
    
    def __str__(self) -> str:
        return f"{self.type}:{self.id}"
    
    @classmethod
    def organization(cls, organization_id: str) -> "Scope":
        return cls(type=AuthzDefaults.ORGANIZATION_SCOPE, id=organization_id)


@dataclass(frozen=True)
class Relation:
    """A ReBAC tuple: ``subject_type:subject_id -relation-> object_type:object_id``."""
    
    subject_type: str
    subject_id: str
    relation: str
    object_type: str
    object_id: str
    
    def __str__(self) -> str:
        return f"{self.subject_type}:{self.subject_id}#{self.relation}@{self.object_type}:{self.object_id}"
    
    @classmethod
    def team_member(cls, user_id: str, team_id: str) -> "Relation":
        return cls(
            subject_type=AuthzDefaults.USER_SUBJECT,
            subject_id=user_id,
            relation=AuthzDefaults.TEAM_MEMBER_RELATION,
            object_type=AuthzDefaults.TEAM_OBJECT,
            object_id=team_id,
        )
