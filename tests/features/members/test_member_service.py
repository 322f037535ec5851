"""Tests for MemberService."""

import pytest

from neo_tenancy.config.constants import MemberSortField, MemberStatus, MemberStatusFilter, OrgRole
from neo_tenancy.core.exceptions import (
    AlreadyExistsError,
    ForbiddenError,
    InvalidArgumentError,
    InvalidStateError,
    LimitExceededError,
    NotFoundError,
)
from neo_tenancy.factory import create_tenancy_services
from neo_tenancy.features.directory.models.responses import BulkOperationResponse
from neo_tenancy.features.authz.entities.scope import Relation, Scope
from neo_tenancy.features.pagination.entities import CursorPaginationRequest


class TestAddMember:
    """Test direct member additions."""

    @pytest.mark.asyncio
    async def test_admin_adds_member(self, services, authz, populated_organization):
        member = await services.members.add_member("bob", populated_organization.id, "erin", "member")

        assert member.role == "member"
        assert member.status == MemberStatus.ACTIVE
        assert member.joined_at is not None
        assert authz.get_user_roles("erin", Scope.organization(populated_organization.id)) == ["member"]

    @pytest.mark.asyncio
    async def test_member_cannot_add(self, services, populated_organization):
        with pytest.raises(ForbiddenError):
            await services.members.add_member("carol", populated_organization.id, "erin")

    @pytest.mark.asyncio
    async def test_owner_role_not_grantable(self, services, organization):
        with pytest.raises(InvalidArgumentError, match="Invalid role 'owner'"):
            await services.members.add_member("alice", organization.id, "erin", "owner")

    @pytest.mark.asyncio
    async def test_duplicate_member(self, services, populated_organization):
        with pytest.raises(AlreadyExistsError):
            await services.members.add_member("alice", populated_organization.id, "carol")

    @pytest.mark.asyncio
    async def test_member_limit_counts_every_status(self, store, authz, settings):
        settings.max_members_per_organization = 2
        services = create_tenancy_services(store, authz, settings)
        organization = await services.organizations.create_organization("alice", "Small")
        await services.members.add_member("alice", organization.id, "bob")
        await services.members.suspend_member("alice", organization.id, "bob")

        with pytest.raises(LimitExceededError, match=r"Maximum number of members \(2\)"):
            await services.members.add_member("alice", organization.id, "carol")

    @pytest.mark.asyncio
    async def test_suspended_admin_cannot_add(self, services, populated_organization):
        await services.members.suspend_member("alice", populated_organization.id, "bob")
        with pytest.raises(ForbiddenError, match="suspended"):
            await services.members.add_member("bob", populated_organization.id, "erin")


class TestMemberQueries:
    """Test listings, counts and permission checks."""

    @pytest.mark.asyncio
    async def test_list_defaults_to_active(self, services, populated_organization):
        org_id = populated_organization.id
        await services.members.suspend_member("alice", org_id, "dave")

        active = await services.members.list_members("carol", org_id)
        assert {m.user_id for m in active} == {"alice", "bob", "carol"}

        suspended = await services.members.list_members("carol", org_id, status=MemberStatusFilter.SUSPENDED)
        assert [m.user_id for m in suspended] == ["dave"]

        assert await services.members.count_members("carol", org_id, MemberStatusFilter.ALL) == 4

    @pytest.mark.asyncio
    async def test_sort_by_role_uses_hierarchy(self, services, populated_organization):
        members = await services.members.list_members(
            "alice", populated_organization.id, sort_by=MemberSortField.ROLE
        )
        assert [m.role for m in members] == ["member", "member", "admin", "owner"]

    @pytest.mark.asyncio
    async def test_non_member_cannot_list(self, services, populated_organization):
        with pytest.raises(ForbiddenError):
            await services.members.list_members("mallory", populated_organization.id)

    @pytest.mark.asyncio
    async def test_list_members_paginated(self, services, populated_organization):
        org_id = populated_organization.id
        await services.members.suspend_member("alice", org_id, "dave")

        first = await services.members.list_members_paginated("carol", org_id, CursorPaginationRequest(limit=2))
        assert first.count == 2
        assert first.has_next

        rest = await services.members.list_members_paginated(
            "carol", org_id, CursorPaginationRequest(limit=2, cursor_after=first.next_cursor)
        )
        assert not rest.has_more
        assert {m.user_id for m in first.items + rest.items} == {"alice", "bob", "carol"}

        everyone = await services.members.list_members_paginated(
            "carol", org_id, CursorPaginationRequest(), status=MemberStatusFilter.ALL
        )
        assert everyone.count == 4
        created = [m.created_at for m in everyone.items]
        assert created == sorted(created, reverse=True)

    @pytest.mark.asyncio
    async def test_paginated_rejects_bad_cursor_and_non_members(self, services, populated_organization):
        org_id = populated_organization.id
        with pytest.raises(InvalidArgumentError, match="Invalid cursor format"):
            await services.members.list_members_paginated(
                "carol", org_id, CursorPaginationRequest(cursor_after="bm90LWpzb24")
            )
        with pytest.raises(ForbiddenError):
            await services.members.list_members_paginated("mallory", org_id, CursorPaginationRequest())

    @pytest.mark.asyncio
    async def test_get_member(self, services, populated_organization):
        assert (await services.members.get_member("carol", populated_organization.id, "bob")).role == "admin"
        assert await services.members.get_member("carol", populated_organization.id, "nobody") is None

    @pytest.mark.asyncio
    async def test_check_member_permission(self, services, populated_organization):
        org_id = populated_organization.id
        check = await services.members.check_member_permission(org_id, "bob", OrgRole.ADMIN)
        assert check.has_permission is True
        assert check.current_role == "admin"

        check = await services.members.check_member_permission(org_id, "carol", "admin")
        assert check.has_permission is False

        check = await services.members.check_member_permission(org_id, "mallory", "member")
        assert check.has_permission is False
        assert check.current_role is None


class TestJoinByDomain:
    """Test self-service joining by email domain."""

    @pytest.mark.asyncio
    async def test_join(self, services, authz):
        organization = await services.organizations.create_organization(
            "alice", "Acme", allowed_domains=["acme.com"]
        )
        member = await services.members.join_by_domain("erin", organization.id, "Erin@Acme.com")
        assert member.role == "member"
        assert authz.get_user_roles("erin", Scope.organization(organization.id)) == ["member"]

    @pytest.mark.asyncio
    async def test_rejections(self, services, organization):
        with pytest.raises(ForbiddenError, match="does not allow domain-based join"):
            await services.members.join_by_domain("erin", organization.id, "erin@acme.com")

        await services.organizations.update_organization("alice", organization.id, allowed_domains=["acme.com"])
        with pytest.raises(ForbiddenError, match="email domain is not allowed"):
            await services.members.join_by_domain("erin", organization.id, "erin@evil.com")
        with pytest.raises(AlreadyExistsError):
            await services.members.join_by_domain("alice", organization.id, "alice@acme.com")

    @pytest.mark.asyncio
    async def test_inactive_organization(self, services):
        organization = await services.organizations.create_organization(
            "alice", "Acme", allowed_domains=["acme.com"]
        )
        await services.organizations.update_organization("alice", organization.id, status="suspended")
        with pytest.raises(ForbiddenError, match="not accepting new members"):
            await services.members.join_by_domain("erin", organization.id, "erin@acme.com")


class TestRemoveMember:
    """Test member removal cascades."""

    @pytest.mark.asyncio
    async def test_remove_cascades_team_memberships(self, services, store, authz, populated_organization):
        """Test removal drops team memberships and revokes the facts."""
        org_id = populated_organization.id
        team = await services.teams.create_team("alice", org_id, "Engineering")
        await services.teams.add_team_member("alice", team.id, "carol")

        await services.members.remove_member("bob", org_id, "carol")

        async with store.transaction() as tx:
            assert await tx.get_member(org_id, "carol") is None
            assert await tx.get_team_member(team.id, "carol") is None
        assert authz.get_user_roles("carol") == []
        assert not authz.has_relation(Relation.team_member("carol", team.id))

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(self, services, populated_organization):
        with pytest.raises(ForbiddenError, match="Transfer ownership first"):
            await services.members.remove_member("bob", populated_organization.id, "alice")

    @pytest.mark.asyncio
    async def test_only_owner_removes_admin(self, services, populated_organization):
        org_id = populated_organization.id
        await services.members.add_member("alice", org_id, "erin", "admin")
        with pytest.raises(ForbiddenError, match="Only the owner can remove an admin"):
            await services.members.remove_member("bob", org_id, "erin")
        await services.members.remove_member("alice", org_id, "erin")

    @pytest.mark.asyncio
    async def test_remove_unknown(self, services, populated_organization):
        with pytest.raises(NotFoundError):
            await services.members.remove_member("alice", populated_organization.id, "nobody")


class TestUpdateMemberRole:
    """Test role changes."""

    @pytest.mark.asyncio
    async def test_promote_member(self, services, authz, populated_organization):
        org_id = populated_organization.id
        member = await services.members.update_member_role("bob", org_id, "carol", "admin")

        assert member.role == "admin"
        assert authz.get_user_roles("carol", Scope.organization(org_id)) == ["admin"]

    @pytest.mark.asyncio
    async def test_same_role_is_noop(self, services, authz, populated_organization, mocker):
        spy = mocker.spy(authz, "revoke_role")
        member = await services.members.update_member_role("alice", populated_organization.id, "carol", "member")
        assert member.role == "member"
        spy.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_role(self, services, populated_organization):
        with pytest.raises(InvalidArgumentError, match="Invalid role: superuser"):
            await services.members.update_member_role("alice", populated_organization.id, "carol", "superuser")

    @pytest.mark.asyncio
    async def test_granting_owner_transfers(self, services, store, authz, populated_organization):
        """Test granting owner moves ownership and demotes the previous owner to admin."""
        org_id = populated_organization.id
        new_owner = await services.members.update_member_role("alice", org_id, "carol", "owner")

        assert new_owner.role == "owner"
        async with store.transaction() as tx:
            assert (await tx.get_organization(org_id)).owner_id == "carol"
            assert (await tx.get_member(org_id, "alice")).role == "admin"
        assert authz.get_user_roles("alice", Scope.organization(org_id)) == ["admin"]

    @pytest.mark.asyncio
    async def test_admin_cannot_grant_owner(self, services, populated_organization):
        with pytest.raises(ForbiddenError, match="Only the owner can grant"):
            await services.members.update_member_role("bob", populated_organization.id, "carol", "owner")

    @pytest.mark.asyncio
    async def test_owner_role_is_fixed(self, services, populated_organization):
        with pytest.raises(ForbiddenError, match="Cannot change the owner's role"):
            await services.members.update_member_role("alice", populated_organization.id, "alice", "member")

    @pytest.mark.asyncio
    async def test_admin_cannot_demote_other_admin(self, services, populated_organization):
        org_id = populated_organization.id
        await services.members.add_member("alice", org_id, "erin", "admin")
        with pytest.raises(ForbiddenError, match="Only the owner can change an admin's role"):
            await services.members.update_member_role("bob", org_id, "erin", "member")


class TestSuspension:
    """Test suspend and unsuspend."""

    @pytest.mark.asyncio
    async def test_suspend_and_unsuspend(self, services, populated_organization):
        org_id = populated_organization.id
        suspended = await services.members.suspend_member("bob", org_id, "carol")
        assert suspended.status == MemberStatus.SUSPENDED
        assert suspended.suspended_at is not None
        assert suspended.role == "member"

        with pytest.raises(InvalidStateError, match="already suspended"):
            await services.members.suspend_member("bob", org_id, "carol")

        restored = await services.members.unsuspend_member("bob", org_id, "carol")
        assert restored.status == MemberStatus.ACTIVE
        assert restored.suspended_at is None

        with pytest.raises(InvalidStateError, match="not suspended"):
            await services.members.unsuspend_member("bob", org_id, "carol")

    @pytest.mark.asyncio
    async def test_owner_cannot_be_suspended(self, services, populated_organization):
        with pytest.raises(ForbiddenError, match="Cannot suspend the organization owner"):
            await services.members.suspend_member("bob", populated_organization.id, "alice")


class TestLeaveOrganization:
    """Test leaving an organization."""

    @pytest.mark.asyncio
    async def test_member_leaves(self, services, store, authz, populated_organization):
        org_id = populated_organization.id
        await services.members.leave_organization("dave", org_id)
        async with store.transaction() as tx:
            assert await tx.get_member(org_id, "dave") is None
        assert authz.get_user_roles("dave", Scope.organization(org_id)) == []

    @pytest.mark.asyncio
    async def test_sole_owner_cannot_leave(self, services, populated_organization):
        with pytest.raises(ForbiddenError, match="last owner"):
            await services.members.leave_organization("alice", populated_organization.id)

    @pytest.mark.asyncio
    async def test_non_member(self, services, populated_organization):
        with pytest.raises(NotFoundError, match="You are not a member"):
            await services.members.leave_organization("mallory", populated_organization.id)


class TestBulkMembers:
    """Test bulk add and remove."""

    @pytest.mark.asyncio
    async def test_bulk_add_reports_per_item(self, services, populated_organization):
        result = await services.members.bulk_add_members(
            "alice",
            populated_organization.id,
            [("erin", "member"), ("carol", "member"), ("frank", "owner"), ("gina", "admin")],
        )

        assert result.success == ["erin", "gina"]
        assert [(e.identifier, e.code) for e in result.errors] == [
            ("carol", "ALREADY_EXISTS"),
            ("frank", "INVALID_ARGUMENT"),
        ]
        assert not result.all_succeeded

    @pytest.mark.asyncio
    async def test_bulk_add_requires_admin(self, services, populated_organization):
        with pytest.raises(ForbiddenError):
            await services.members.bulk_add_members("carol", populated_organization.id, [("erin", "member")])

    @pytest.mark.asyncio
    async def test_bulk_remove(self, services, populated_organization):
        result = await services.members.bulk_remove_members(
            "alice", populated_organization.id, ["carol", "alice", "nobody"]
        )
        assert result.success == ["carol"]
        assert [e.code for e in result.errors] == ["FORBIDDEN", "NOT_FOUND"]

    @pytest.mark.asyncio
    async def test_bulk_add_keeps_sync_failures_retryable(self, services, authz, populated_organization, mocker):
        """Test a committed item whose sync fails counts as added and can be retried."""
        org_id = populated_organization.id
        real_assign = authz.assign_role

        async def failing_for_erin(user_id, role, scope, expires_at=None, assigned_by=None):
            if user_id == "erin":
                raise ConnectionError("authz down")
            return await real_assign(user_id, role, scope, expires_at=expires_at, assigned_by=assigned_by)

        patched = mocker.patch.object(authz, "assign_role", side_effect=failing_for_erin)

        result = await services.members.bulk_add_members(
            "alice", org_id, [("erin", "member"), ("gina", "admin")]
        )

        assert result.success == ["erin", "gina"]
        assert result.errors == []
        assert list(result.sync_errors) == ["erin"]
        assert not result.all_succeeded
        assert (await services.members.get_member("alice", org_id, "erin")).role == "member"
        assert authz.get_user_roles("erin", Scope.organization(org_id)) == []

        response = BulkOperationResponse.from_result(result)
        assert [(f.identifier, f.code) for f in response.sync_failures] == [("erin", "AUTHORIZATION_SYNC_FAILED")]

        patched.side_effect = real_assign
        await services.sync.retry(result.sync_errors["erin"])
        assert authz.get_user_roles("erin", Scope.organization(org_id)) == ["member"]
