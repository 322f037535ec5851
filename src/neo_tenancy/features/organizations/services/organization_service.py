"""Organization service.

Creation, lookup, update, ownership transfer and cascading deletion of
organizations, plus domain-based discovery. Role and relation facts are
pushed to the authorization subsystem after each commit; organization
deletion revokes them before its transaction commits.
"""

import logging
from typing import Any, Dict, List, Optional

from ....config.constants import (
    ORGANIZATION_SLUG_FALLBACK,
    OrganizationSortField,
    OrganizationStatus,
    OrgRole,
    SortOrder,
)
from ....core.exceptions import InvalidArgumentError, NotFoundError
from ....utils.timezone import utc_now
from ....utils.uuid import generate_uuid_v7
from ...authz.services.sync_adapter import AuthorizationSyncAdapter
from ...directory.services.base import DirectoryServiceBase, check_limit, entity_validation
from ...directory.services.cascade_coordinator import CascadeCoordinator, CascadeResult
from ...directory.services.slug_allocator import SlugAllocator, slugify
from ...directory.utils.error_handling import directory_error_handler, log_directory_operation
from ...directory.utils.sorting import sort_by_field
from ...invitations.entities.invitation import email_domain
from ...members.entities.member import Member
from ..entities.membership import UserOrganization
from ..entities.organization import Organization, OrganizationSettings
from .ownership import transfer_ownership_in_transaction

logger = logging.getLogger(__name__)


class OrganizationService(DirectoryServiceBase):
    """Service for organization operations."""

    def __init__(
        self,
        *args,
        slug_allocator: Optional[SlugAllocator] = None,
        cascade: Optional[CascadeCoordinator] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self._slugs = slug_allocator or SlugAllocator()
        self._cascade = cascade or CascadeCoordinator()

    # Queries

    @directory_error_handler("list user organizations")
    async def list_user_organizations(
        self,
        user_id: str,
        sort_by: OrganizationSortField = OrganizationSortField.NAME,
        sort_order: SortOrder = SortOrder.ASC,
        status: Optional[OrganizationStatus] = None,
    ) -> List[UserOrganization]:
        """Organizations ``user_id`` belongs to, with the user's membership."""
        results: List[UserOrganization] = []
        async with self._store.transaction() as tx:
            for member in await tx.list_memberships_for_user(user_id):
                organization = await tx.get_organization(member.organization_id)
                if organization is None:
                    continue
                if status is not None and organization.status != status:
                    continue
                results.append(UserOrganization(organization=organization, member=member))

        field_name = OrganizationSortField(sort_by).value
        return sort_by_field(results, field_name, sort_order, key=lambda uo: getattr(uo.organization, field_name))

    @directory_error_handler("get organization")
    async def get_organization(self, actor_id: str, organization_id: str) -> Organization:
        async with self._store.transaction() as tx:
            organization = await self._permissions.get_organization_or_raise(tx, organization_id)
            await self._permissions.require_membership(tx, organization_id, actor_id)
        return organization

    @directory_error_handler("get organization by slug")
    async def get_organization_by_slug(self, slug: str) -> Organization:
        """Public lookup; membership is not required."""
        async with self._store.transaction() as tx:
            organization = await tx.get_organization_by_slug(slug)
        if organization is None:
            raise NotFoundError("Organization", slug)
        return organization

    @directory_error_handler("list organizations joinable by domain")
    async def list_organizations_joinable_by_domain(self, email: str) -> List[Organization]:
        """Active organizations whose allowed domains include the email's domain."""
        domain = email_domain(email)
        if domain is None:
            raise InvalidArgumentError(f"Invalid email address: {email}")
        async with self._store.transaction() as tx:
            organizations = await tx.list_organizations()
        return sort_by_field(
            [org for org in organizations if org.is_active and org.allows_domain(domain)],
            OrganizationSortField.NAME,
        )

    # Mutations

    @directory_error_handler("create organization")
    @log_directory_operation("create organization", include_timing=True, include_result_summary=True)
    async def create_organization(
        self,
        actor_id: str,
        name: str,
        slug: Optional[str] = None,
        logo: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        settings: Optional[OrganizationSettings] = None,
        allowed_domains: Optional[List[str]] = None,
    ) -> Organization:
        """Create an organization owned by ``actor_id``.

        The slug is derived from ``slug`` (or the name) and suffixed with
        ``-N`` when taken. The creator becomes the ``owner`` member.
        """
        now = utc_now()
        async with self._store.transaction() as tx:
            if self._settings.max_organizations_per_user is not None:
                memberships = await tx.list_memberships_for_user(actor_id)
                check_limit(
                    self._settings.max_organizations_per_user,
                    len(memberships),
                    f"Maximum number of organizations ({self._settings.max_organizations_per_user}) reached.",
                )

            candidate = slugify(slug or name, ORGANIZATION_SLUG_FALLBACK)
            unique_slug = await self._slugs.allocate(tx, candidate)

            with entity_validation():
                organization = Organization(
                    id=generate_uuid_v7(),
                    name=name.strip() if name else name,
                    slug=unique_slug,
                    owner_id=actor_id,
                    logo=logo,
                    metadata=dict(metadata or {}),
                    settings=settings or OrganizationSettings(),
                    allowed_domains=list(allowed_domains or []),
                    created_at=now,
                    updated_at=now,
                )
                owner = Member(
                    id=generate_uuid_v7(),
                    organization_id=organization.id,
                    user_id=actor_id,
                    role=OrgRole.OWNER.value,
                    joined_at=now,
                    created_at=now,
                    updated_at=now,
                )
            organization = await tx.insert_organization(organization)
            owner = await tx.insert_member(owner)

        logger.info(f"Created organization {organization.id} ({organization.slug}) owned by {actor_id}")
        await self._apply_sync(
            "create_organization",
            AuthorizationSyncAdapter.organization_created_commands(organization.id, actor_id),
        )
        await self._callbacks.on_organization_created(organization, owner)
        return organization

    @directory_error_handler("update organization")
    @log_directory_operation("update organization")
    async def update_organization(
        self,
        actor_id: str,
        organization_id: str,
        name: Optional[str] = None,
        slug: Optional[str] = None,
        logo: Optional[str] = None,
        clear_logo: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
        settings: Optional[OrganizationSettings] = None,
        allowed_domains: Optional[List[str]] = None,
        status: Optional[OrganizationStatus] = None,
    ) -> Organization:
        """Patch an organization. Requires admin.

        A suspended or archived organization only accepts updates that set
        ``status`` back to active.
        """
        async with self._store.transaction() as tx:
            organization = await self._permissions.get_organization_or_raise(tx, organization_id)
            await self._permissions.require_role(tx, organization_id, actor_id, OrgRole.ADMIN)
            if status is None or OrganizationStatus(status) != OrganizationStatus.ACTIVE:
                self._permissions.require_active_organization(organization)

            with entity_validation():
                if name is not None:
                    organization.rename(name)
                if slug is not None:
                    candidate = slugify(slug, ORGANIZATION_SLUG_FALLBACK)
                    if candidate != organization.slug:
                        organization.change_slug(await self._slugs.allocate(tx, candidate))
                if status is not None:
                    organization.set_status(status)
                organization.update_details(
                    logo=logo,
                    clear_logo=clear_logo,
                    metadata=metadata,
                    settings=settings,
                    allowed_domains=allowed_domains,
                )
            organization = await tx.update_organization(organization)

        logger.info(f"Updated organization {organization_id} by {actor_id}")
        return organization

    @directory_error_handler("transfer ownership")
    @log_directory_operation("transfer ownership")
    async def transfer_ownership(
        self,
        actor_id: str,
        organization_id: str,
        new_owner_id: str,
        previous_owner_role: str = OrgRole.ADMIN.value,
    ) -> Organization:
        """Hand ownership to another member; the previous owner keeps ``previous_owner_role``."""
        async with self._store.transaction() as tx:
            organization = await self._permissions.get_organization_or_raise(tx, organization_id)
            await self._permissions.require_role(tx, organization_id, actor_id, OrgRole.OWNER)
            self._permissions.require_active_organization(organization)
            transfer = await transfer_ownership_in_transaction(
                tx, organization, actor_id, new_owner_id, previous_owner_role
            )

        logger.info(f"Transferred ownership of {organization_id} from {actor_id} to {new_owner_id}")
        await self._apply_sync("transfer_ownership", transfer.sync_commands(actor_id))
        await self._callbacks.on_member_role_changed(
            transfer.new_owner, transfer.new_owner_previous_role, actor_id
        )
        await self._callbacks.on_member_role_changed(transfer.previous_owner, OrgRole.OWNER.value, actor_id)
        return transfer.organization

    @directory_error_handler("delete organization")
    @log_directory_operation("delete organization", include_timing=True)
    async def delete_organization(self, actor_id: str, organization_id: str) -> CascadeResult:
        """Owner-only cascading delete.

        Authorization facts are revoked after the cascade commits, like every
        other mutation. A sync failure leaves the directory deleted and raises
        AuthorizationSyncError; ``sync.retry`` finishes the revocations.
        """
        async with self._store.transaction() as tx:
            organization = await self._permissions.get_organization_or_raise(tx, organization_id)
            await self._permissions.require_role(tx, organization_id, actor_id, OrgRole.OWNER)
            self._permissions.require_active_organization(organization)
            result = await self._cascade.delete_organization(tx, organization)

        logger.info(f"Deleted organization {organization_id} by {actor_id}")
        await self._apply_sync(
            "delete_organization",
            AuthorizationSyncAdapter.organization_deleted_commands(
                organization.id, result.member_roles, result.team_relations
            ),
        )
        await self._callbacks.on_organization_deleted(organization, actor_id)
        return result
