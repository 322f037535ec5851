"""Tests for slug allocation and the cascade coordinator."""

import pytest

from neo_tenancy.core.exceptions import ForbiddenError
from neo_tenancy.features.directory.services.cascade_coordinator import CascadeCoordinator
from neo_tenancy.features.directory.services.slug_allocator import SlugAllocator, slugify
from neo_tenancy.features.invitations.entities.invitation import Invitation
from neo_tenancy.features.members.entities.member import Member
from neo_tenancy.features.organizations.entities.organization import Organization
from neo_tenancy.features.teams.entities.team import Team, TeamMember
from neo_tenancy.utils.timezone import hours_from_now


class TestSlugify:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Acme Corp", "acme-corp"),
            ("  Hello,  World!! ", "hello-world"),
            ("R&D / Labs", "r-d-labs"),
            ("already-a-slug", "already-a-slug"),
        ],
    )
    def test_slugify(self, value, expected):
        assert slugify(value) == expected

    def test_empty_falls_back(self):
        """Test names with no slug characters use the fallback."""
        assert slugify("!!!") == "organization"
        assert slugify("", "team") == "team"


class TestSlugAllocator:
    """Test collision probing within one transaction."""

    @pytest.fixture
    def allocator(self):
        return SlugAllocator()

    @pytest.mark.asyncio
    async def test_free_candidate_is_returned(self, store, allocator):
        async with store.transaction() as tx:
            assert await allocator.allocate(tx, "acme") == "acme"

    @pytest.mark.asyncio
    async def test_taken_candidates_get_suffixes(self, store, allocator):
        """Test acme, acme-1, acme-2 in allocation order."""
        async with store.transaction() as tx:
            await tx.insert_organization(Organization(id="o1", name="Acme", slug="acme", owner_id="u1"))
            assert await allocator.allocate(tx, "acme") == "acme-1"
            await tx.insert_organization(Organization(id="o2", name="Acme", slug="acme-1", owner_id="u2"))
            assert await allocator.allocate(tx, "acme") == "acme-2"

    @pytest.mark.asyncio
    async def test_team_scope_is_per_organization(self, store, allocator):
        async with store.transaction() as tx:
            await tx.insert_team(Team(id="t1", organization_id="org-1", name="Eng", slug="eng"))
            assert await allocator.allocate(tx, "eng", organization_id="org-1") == "eng-1"
            assert await allocator.allocate(tx, "eng", organization_id="org-2") == "eng"
            assert await allocator.allocate(tx, "eng") == "eng"

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, store):
        allocator = SlugAllocator(max_attempts=1)
        async with store.transaction() as tx:
            await tx.insert_organization(Organization(id="o1", name="A", slug="a", owner_id="u1"))
            await tx.insert_organization(Organization(id="o2", name="A", slug="a-1", owner_id="u2"))
            with pytest.raises(RuntimeError):
                await allocator.allocate(tx, "a")


class TestCascadeCoordinator:
    """Test dependent-record cleanup."""

    @pytest.fixture
    def cascade(self):
        return CascadeCoordinator()

    @pytest.fixture
    def organization(self):
        return Organization(id="org-1", name="Acme", slug="acme", owner_id="alice")

    async def _seed(self, tx, organization):
        await tx.insert_organization(organization)
        await tx.insert_member(Member(id="m-alice", organization_id="org-1", user_id="alice", role="owner"))
        await tx.insert_member(Member(id="m-bob", organization_id="org-1", user_id="bob", role="member"))
        await tx.insert_team(Team(id="t-root", organization_id="org-1", name="Root", slug="root"))
        await tx.insert_team(
            Team(id="t-child", organization_id="org-1", name="Child", slug="child", parent_team_id="t-root")
        )
        await tx.insert_team(
            Team(id="t-leaf", organization_id="org-1", name="Leaf", slug="leaf", parent_team_id="t-child")
        )
        await tx.insert_team_member(TeamMember(id="tm-1", team_id="t-root", user_id="bob"))
        await tx.insert_team_member(TeamMember(id="tm-2", team_id="t-child", user_id="bob"))
        await tx.insert_invitation(
            Invitation(
                id="inv-1",
                organization_id="org-1",
                invitee_identifier="carol@example.com",
                role="member",
                inviter_id="alice",
                expires_at=hours_from_now(48),
            )
        )

    @pytest.mark.asyncio
    async def test_remove_membership_drops_team_memberships(self, store, cascade, organization):
        async with store.transaction() as tx:
            await self._seed(tx, organization)
            bob = await tx.get_member("org-1", "bob")

            result = await cascade.remove_membership(tx, organization, bob)

            assert sorted(result.team_ids) == ["t-child", "t-root"]
            assert result.member_roles == [("bob", "member")]
            assert await tx.get_member("org-1", "bob") is None
            assert await tx.list_team_memberships_for_user("org-1", "bob") == []

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(self, store, cascade, organization):
        async with store.transaction() as tx:
            await self._seed(tx, organization)
            alice = await tx.get_member("org-1", "alice")
            with pytest.raises(ForbiddenError, match="Transfer ownership first"):
                await cascade.remove_membership(tx, organization, alice)

    @pytest.mark.asyncio
    async def test_last_owner_cannot_leave(self, store, cascade, organization):
        async with store.transaction() as tx:
            await self._seed(tx, organization)
            alice = await tx.get_member("org-1", "alice")
            with pytest.raises(ForbiddenError, match="last owner"):
                await cascade.remove_membership(tx, organization, alice, leaving=True)

    @pytest.mark.asyncio
    async def test_delete_team_reparents_children(self, store, cascade, organization):
        """Test children of a deleted team move to its parent."""
        async with store.transaction() as tx:
            await self._seed(tx, organization)
            child = await tx.get_team("t-child")

            result = await cascade.delete_team(tx, child)

            assert result.reparented_team_ids == ["t-leaf"]
            assert result.team_relations == [("t-child", "bob")]
            assert (await tx.get_team("t-leaf")).parent_team_id == "t-root"
            assert await tx.get_team("t-child") is None
            assert await tx.get_team_member("t-child", "bob") is None
            assert await tx.get_team_member("t-root", "bob") is not None

    @pytest.mark.asyncio
    async def test_delete_root_team_makes_children_roots(self, store, cascade, organization):
        async with store.transaction() as tx:
            await self._seed(tx, organization)
            await cascade.delete_team(tx, await tx.get_team("t-root"))
            assert (await tx.get_team("t-child")).parent_team_id is None

    @pytest.mark.asyncio
    async def test_delete_organization_removes_everything(self, store, cascade, organization):
        async with store.transaction() as tx:
            await self._seed(tx, organization)
            result = await cascade.delete_organization(tx, organization)

        assert result.teams_deleted == 3
        assert result.invitations_deleted == 1
        assert result.members_deleted == 2
        assert sorted(result.team_relations) == [("t-child", "bob"), ("t-root", "bob")]

        async with store.transaction() as tx:
            assert await tx.get_organization("org-1") is None
            assert await tx.list_teams("org-1") == []
            assert await tx.list_members("org-1") == []
            assert await tx.list_invitations("org-1") == []
            assert await tx.list_memberships_for_user("bob") == []
