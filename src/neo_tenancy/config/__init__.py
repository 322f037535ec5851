"""Configuration, constants and logging for neo-tenancy."""

from .constants import (
    OrgRole,
    InvitationRole,
    OrganizationStatus,
    MemberStatus,
    MemberStatusFilter,
    InvitationStatus,
    IdentifierType,
    SortOrder,
    OrganizationSortField,
    MemberSortField,
    TeamSortField,
    TeamMemberSortField,
    InvitationSortField,
    AuthzDefaults,
    DatabaseSchemas,
    CacheKeys,
    DEFAULT_INVITATION_EXPIRATION_HOURS,
)
from .settings import TenancySettings, get_settings
from .logging_config import LoggingConfig, LogLevel, LogVerbosity, LogFormat, setup_logging, get_logger

__all__ = [
    # Enums
    "OrgRole",
    "InvitationRole",
    "OrganizationStatus",
    "MemberStatus",
    "MemberStatusFilter",
    "InvitationStatus",
    "IdentifierType",
    "SortOrder",
    "OrganizationSortField",
    "MemberSortField",
    "TeamSortField",
    "TeamMemberSortField",
    "InvitationSortField",
    
    # Constants
    "AuthzDefaults",
    "DatabaseSchemas",
    "CacheKeys",
    "DEFAULT_INVITATION_EXPIRATION_HOURS",
    
    # Settings
    "TenancySettings",
    "get_settings",
    
    # Logging
    "LoggingConfig",
    "LogLevel",
    "LogVerbosity",
    "LogFormat",
    "setup_logging",
    "get_logger",
]
