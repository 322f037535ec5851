"""Tests for PermissionService gates and fine-grained checks."""

import pytest

from neo_tenancy.core.exceptions import ForbiddenError
from neo_tenancy.factory import create_tenancy_services
from neo_tenancy.features.permissions.services.permission_service import PermissionService


class TestRequirePermission:
    """Test the authorization-client backed permission check."""

    @pytest.mark.asyncio
    async def test_role_grants_permission(self, services, populated_organization):
        await services.permissions.require_permission("bob", "create_team", populated_organization.id)
        await services.permissions.require_permission("alice", "delete_organization", populated_organization.id)

    @pytest.mark.asyncio
    async def test_role_lacks_permission(self, services, populated_organization):
        with pytest.raises(ForbiddenError, match="teams:create"):
            await services.permissions.require_permission("carol", "create_team", populated_organization.id)
        with pytest.raises(ForbiddenError, match="organizations:delete"):
            await services.permissions.require_permission("bob", "delete_organization", populated_organization.id)

    @pytest.mark.asyncio
    async def test_unmapped_operation_is_not_checked(self, services, organization):
        await services.permissions.require_permission("mallory", "list_members", organization.id)

    @pytest.mark.asyncio
    async def test_override_disables_check_and_keeps_defaults(self, store, authz, settings):
        services = create_tenancy_services(store, authz, settings, permission_map={"create_team": False})
        organization = await services.organizations.create_organization("alice", "Acme")

        await services.permissions.require_permission("mallory", "create_team", organization.id)
        with pytest.raises(ForbiddenError):
            await services.permissions.require_permission("mallory", "update_team", organization.id)

    @pytest.mark.asyncio
    async def test_without_client(self, store, organization):
        permissions = PermissionService(store)
        with pytest.raises(ForbiddenError, match="No authorization client"):
            await permissions.require_permission("alice", "update_organization", organization.id)


class TestCheckPermission:
    """Test the non-raising role check."""

    @pytest.mark.asyncio
    async def test_check(self, services, populated_organization):
        org_id = populated_organization.id
        admin = await services.permissions.check_permission(org_id, "bob", "admin")
        assert (admin.has_permission, admin.current_role) == (True, "admin")

        member = await services.permissions.check_permission(org_id, "carol", "admin")
        assert (member.has_permission, member.current_role) == (False, "member")

        stranger = await services.permissions.check_permission(org_id, "mallory", "member")
        assert (stranger.has_permission, stranger.current_role) == (False, None)
