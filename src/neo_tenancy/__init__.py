"""Neo-Tenancy - multi-tenant directory for the NeoMultiTenant platform.

Organizations, memberships, teams and invitations, with role-based access
checks and synchronization of role assignments and team relations into an
external authorization subsystem.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    OrgRole,
    InvitationRole,
    OrganizationStatus,
    MemberStatus,
    MemberStatusFilter,
    InvitationStatus,
    IdentifierType,
    SortOrder,
    TenancySettings,
    get_settings,
)

from .core.exceptions import (
    # Base Exception
    NeoTenancyError,
    
    # Directory Exceptions
    NotFoundError,
    AlreadyExistsError,
    ForbiddenError,
    LimitExceededError,
    InvalidArgumentError,
    InvalidStateError,
    ExpiredError,
    AuthorizationSyncError,
    
    # Utility Functions
    get_http_status_code,
    create_error_response,
)

# Permissions must load before the directory services that depend on them
from .features.permissions import PermissionService, has_at_least, get_role_rank

from .features.authz import (
    AuthorizationClient,
    AuthorizationSyncAdapter,
    InMemoryAuthorizationClient,
    PostgresAuthorizationClient,
    RedisPermissionCache,
    Relation,
    Scope,
    SyncAction,
    SyncCommand,
)

from .features.directory import (
    BulkItemError,
    BulkResult,
    DirectoryStore,
    DirectoryTransaction,
    TenancyCallbacks,
    InMemoryDirectoryStore,
    PostgresDirectoryStore,
)
from .features.directory.services import CascadeResult

from .features.organizations import Organization, OrganizationSettings, UserOrganization
from .features.members import Member
from .features.teams import Team, TeamMember, TeamTreeNode
from .features.invitations import Invitation, InvitationDetails

from .features.organizations.services import OrganizationService
from .features.members.services import MemberService
from .features.teams.services import TeamService
from .features.invitations.services import InvitationService

from .factory import TenancyServices, create_tenancy_services

from .api import create_tenancy_router, register_exception_handlers

__all__ = [
    "__version__",
    
    # Configuration
    "OrgRole",
    "InvitationRole",
    "OrganizationStatus",
    "MemberStatus",
    "MemberStatusFilter",
    "InvitationStatus",
    "IdentifierType",
    "SortOrder",
    "TenancySettings",
    "get_settings",
    
    # Exceptions
    "NeoTenancyError",
    "NotFoundError",
    "AlreadyExistsError",
    "ForbiddenError",
    "LimitExceededError",
    "InvalidArgumentError",
    "InvalidStateError",
    "ExpiredError",
    "AuthorizationSyncError",
    "get_http_status_code",
    "create_error_response",
    
    # Permissions
    "PermissionService",
    "has_at_least",
    "get_role_rank",
    
    # Authorization sync
    "AuthorizationClient",
    "AuthorizationSyncAdapter",
    "InMemoryAuthorizationClient",
    "PostgresAuthorizationClient",
    "RedisPermissionCache",
    "Relation",
    "Scope",
    "SyncAction",
    "SyncCommand",
    
    # Directory
    "BulkItemError",
    "BulkResult",
    "DirectoryStore",
    "DirectoryTransaction",
    "TenancyCallbacks",
    "InMemoryDirectoryStore",
    "PostgresDirectoryStore",
    "CascadeResult",
    
    # Entities
    "Organization",
    "OrganizationSettings",
    "UserOrganization",
    "Member",
    "Team",
    "TeamMember",
    "TeamTreeNode",
    "Invitation",
    "InvitationDetails",
    
    # Services
    "OrganizationService",
    "MemberService",
    "TeamService",
    "InvitationService",
    "TenancyServices",
    "create_tenancy_services",
    
    # API
    "create_tenancy_router",
    "register_exception_handlers",
]
