"""Constants and enums for neo-tenancy.

These correspond to the enum-like text columns defined in the directory
migrations.
"""

from enum import Enum
from typing import Final


class OrgRole(str, Enum):
    """Organization roles, ordered by privilege."""
    
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class InvitationRole(str, Enum):
    """Roles an invitation or direct add may grant. Ownership is never granted this way."""
    
    ADMIN = "admin"
    MEMBER = "member"


class OrganizationStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class MemberStatusFilter(str, Enum):
    """Status filter accepted by member listings."""
    
    ACTIVE = "active"
    SUSPENDED = "suspended"
    ALL = "all"


class InvitationStatus(str, Enum):
    """Invitation lifecycle states. Everything except PENDING is terminal."""
    
    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    
    @property
    def is_terminal(self) -> bool:
        return self is not InvitationStatus.PENDING


class IdentifierType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    USERNAME = "username"
    OTHER = "other"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class OrganizationSortField(str, Enum):
    NAME = "name"
    CREATED_AT = "created_at"
    SLUG = "slug"


class MemberSortField(str, Enum):
    ROLE = "role"
    JOINED_AT = "joined_at"
    CREATED_AT = "created_at"
    USER_ID = "user_id"


class TeamSortField(str, Enum):
    NAME = "name"
    CREATED_AT = "created_at"
    SLUG = "slug"


class TeamMemberSortField(str, Enum):
    USER_ID = "user_id"
    ROLE = "role"
    CREATED_AT = "created_at"


class InvitationSortField(str, Enum):
    INVITEE_IDENTIFIER = "invitee_identifier"
    EXPIRES_AT = "expires_at"
    CREATED_AT = "created_at"


class AuthzDefaults:
    """Authorization subsystem vocabulary."""
    
    ORGANIZATION_SCOPE: Final[str] = "organization"
    USER_SUBJECT: Final[str] = "user"
    TEAM_OBJECT: Final[str] = "team"
    TEAM_MEMBER_RELATION: Final[str] = "member"


class DatabaseSchemas:
    """Default database schema names."""
    
    TENANCY: Final[str] = "tenancy"
    AUTHZ: Final[str] = "authz"


class CacheKeys:
    """Cache key patterns for Redis."""
    
    PERMISSION_CHECK: Final[str] = "perm_check:{user_id}:{scope}:{permission}"
    USER_PATTERN: Final[str] = "perm_check:{user_id}:*"


DEFAULT_INVITATION_EXPIRATION_HOURS: Final[int] = 48
ORGANIZATION_SLUG_FALLBACK: Final[str] = "organization"
TEAM_SLUG_FALLBACK: Final[str] = "team"
