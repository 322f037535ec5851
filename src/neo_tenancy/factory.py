"""Wiring helpers.

Builds the four directory services over one store and one authorization
client so that they share the permission gate, sync adapter, callbacks and
settings.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config.settings import TenancySettings, get_settings
from .features.authz.entities.protocols import AuthorizationClient
from .features.authz.services.sync_adapter import AuthorizationSyncAdapter
from .features.directory.entities.callbacks import TenancyCallbacks
from .features.directory.entities.protocols import DirectoryStore
from .features.directory.services.cascade_coordinator import CascadeCoordinator
from .features.directory.services.slug_allocator import SlugAllocator
from .features.invitations.services.invitation_service import InvitationService
from .features.members.services.member_service import MemberService
from .features.organizations.services.organization_service import OrganizationService
from .features.permissions.services.permission_service import PermissionService
from .features.permissions.utils.permission_map import PermissionMap, build_permission_map
from .features.teams.services.team_service import TeamService

logger = logging.getLogger(__name__)


@dataclass
class TenancyServices:
    """The operation surface of one directory."""

    organizations: OrganizationService
    members: MemberService
    teams: TeamService
    invitations: InvitationService
    permissions: PermissionService
    sync: AuthorizationSyncAdapter


def create_tenancy_services(
    store: DirectoryStore,
    authz_client: AuthorizationClient,
    settings: Optional[TenancySettings] = None,
    callbacks: Optional[TenancyCallbacks] = None,
    permission_map: Optional[PermissionMap] = None,
) -> TenancyServices:
    """Create services sharing one store, authorization client and callback set.

    Args:
        store: Directory store (in-memory or PostgreSQL)
        authz_client: Authorization subsystem receiving role and relation facts
        settings: Limits and behaviour flags; defaults to ``get_settings()``
        callbacks: Lifecycle hooks; defaults to no-ops
        permission_map: Overrides merged into the default operation to permission mapping
    """
    settings = settings or get_settings()
    callbacks = callbacks or TenancyCallbacks()
    sync = AuthorizationSyncAdapter(authz_client)
    permissions = PermissionService(
        store,
        authz_client=authz_client,
        permission_map=build_permission_map(permission_map),
        enforce_organization_status=settings.enforce_organization_status,
    )
    slugs = SlugAllocator()
    cascade = CascadeCoordinator()
    common = dict(permissions=permissions, callbacks=callbacks, settings=settings)

    services = TenancyServices(
        organizations=OrganizationService(store, sync, slug_allocator=slugs, cascade=cascade, **common),
        members=MemberService(store, sync, cascade=cascade, **common),
        teams=TeamService(store, sync, slug_allocator=slugs, cascade=cascade, **common),
        invitations=InvitationService(store, sync, **common),
        permissions=permissions,
        sync=sync,
    )
    logger.debug(f"Created tenancy services over {type(store).__name__} and {type(authz_client).__name__}")
    return services
