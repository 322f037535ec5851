"""Tests for the authorization sync adapter."""

import pytest
from unittest.mock import AsyncMock, call

from neo_tenancy.core.exceptions import AuthorizationSyncError
from neo_tenancy.features.authz.adapters.memory_client import InMemoryAuthorizationClient
from neo_tenancy.features.authz.entities.commands import SyncAction, SyncCommand
from neo_tenancy.features.authz.entities.scope import Relation, Scope
from neo_tenancy.features.authz.services.sync_adapter import AuthorizationSyncAdapter


ORG = "org-1"
SCOPE = Scope.organization(ORG)


class TestCommandBuilders:
    """Test command lists and their ordering."""

    def test_organization_created(self):
        commands = AuthorizationSyncAdapter.organization_created_commands(ORG, "alice")
        assert commands == [SyncCommand.assign_role("alice", "owner", SCOPE, "alice")]

    def test_role_change_revokes_before_assigning(self):
        """Test the old role is revoked before the new one is assigned."""
        commands = AuthorizationSyncAdapter.role_changed_commands(ORG, "bob", "member", "admin", "alice")
        assert [c.action for c in commands] == [SyncAction.REVOKE_ROLE, SyncAction.ASSIGN_ROLE]
        assert commands[0].role == "member"
        assert commands[1].role == "admin"
        assert all(c.scope == SCOPE for c in commands)

    def test_ownership_transfer(self):
        """Test transfer revokes owner, assigns the new role, then moves owner."""
        commands = AuthorizationSyncAdapter.ownership_transferred_commands(
            ORG, "alice", "admin", "bob", "member", "alice"
        )
        assert [(c.action, c.user_id, c.role) for c in commands] == [
            (SyncAction.REVOKE_ROLE, "alice", "owner"),
            (SyncAction.ASSIGN_ROLE, "alice", "admin"),
            (SyncAction.REVOKE_ROLE, "bob", "member"),
            (SyncAction.ASSIGN_ROLE, "bob", "owner"),
        ]

    def test_membership_removed_drops_relations_first(self):
        """Test team relations are removed before the org role is revoked."""
        commands = AuthorizationSyncAdapter.membership_removed_commands(ORG, "bob", "member", ["t-1", "t-2"])
        assert [c.action for c in commands] == [
            SyncAction.REMOVE_RELATION,
            SyncAction.REMOVE_RELATION,
            SyncAction.REVOKE_ROLE,
        ]
        assert commands[0].relation == Relation.team_member("bob", "t-1")
        assert commands[-1] == SyncCommand.revoke_role("bob", "member", SCOPE)

    def test_team_member_relations(self):
        added = AuthorizationSyncAdapter.team_member_added_commands("t-1", "bob")
        removed = AuthorizationSyncAdapter.team_member_removed_commands("t-1", "bob")
        relation = Relation("user", "bob", "member", "team", "t-1")
        assert added == [SyncCommand.add_relation(relation)]
        assert removed == [SyncCommand.remove_relation(relation)]

    def test_organization_deleted(self):
        """Test deletion clears every relation, then every role."""
        commands = AuthorizationSyncAdapter.organization_deleted_commands(
            ORG, [("alice", "owner"), ("bob", "member")], [("t-1", "bob")]
        )
        assert [c.action for c in commands] == [
            SyncAction.REMOVE_RELATION,
            SyncAction.REVOKE_ROLE,
            SyncAction.REVOKE_ROLE,
        ]

    def test_command_str(self):
        assert str(SyncCommand.revoke_role("bob", "admin", SCOPE)) == "revoke_role(bob, admin, organization:org-1)"
        assert str(SyncCommand.add_relation(Relation.team_member("bob", "t-1"))) == (
            "add_relation(user:bob#member@team:t-1)"
        )


class TestApply:
    """Test command execution, failure reporting and retry."""

    @pytest.fixture
    def client(self):
        client = AsyncMock()
        client.assign_role = AsyncMock(return_value="assignment-id")
        client.revoke_role = AsyncMock(return_value=True)
        client.add_relation = AsyncMock(return_value="relation-id")
        client.remove_relation = AsyncMock(return_value=True)
        return client

    @pytest.fixture
    def adapter(self, client):
        return AuthorizationSyncAdapter(client)

    @pytest.mark.asyncio
    async def test_apply_dispatches_in_order(self, adapter, client):
        """Test every command reaches the client in list order."""
        commands = AuthorizationSyncAdapter.role_changed_commands(ORG, "bob", "member", "admin", "alice")
        commands += AuthorizationSyncAdapter.team_member_added_commands("t-1", "bob")

        await adapter.apply("update_member_role", commands)

        client.revoke_role.assert_awaited_once_with("bob", "member", SCOPE)
        client.assign_role.assert_awaited_once_with("bob", "admin", SCOPE, assigned_by="alice")
        client.add_relation.assert_awaited_once_with("user", "bob", "member", "team", "t-1")

    @pytest.mark.asyncio
    async def test_failure_raises_sync_error(self, adapter, client):
        """Test the first failure stops execution and is reported with every command."""
        client.remove_relation.side_effect = ConnectionError("authz down")
        commands = AuthorizationSyncAdapter.membership_removed_commands(ORG, "bob", "member", ["t-1"])

        with pytest.raises(AuthorizationSyncError) as exc_info:
            await adapter.apply("remove_member", commands)

        error = exc_info.value
        assert error.operation == "remove_member"
        assert error.commands == commands
        assert error.failed_command == commands[0]
        assert isinstance(error.cause, ConnectionError)
        client.revoke_role.assert_not_called()

    @pytest.mark.asyncio
    async def test_retry_replays_all_commands(self, adapter, client):
        """Test retry re-applies the full list once the client recovers."""
        client.assign_role.side_effect = [ConnectionError("blip"), "assignment-id", "assignment-id"]
        commands = AuthorizationSyncAdapter.role_changed_commands(ORG, "bob", "member", "admin", "alice")

        with pytest.raises(AuthorizationSyncError) as exc_info:
            await adapter.apply("update_member_role", commands)
        await adapter.retry(exc_info.value)

        assert client.revoke_role.await_count == 2
        assert client.assign_role.await_count == 2

    @pytest.mark.asyncio
    async def test_retry_converges_with_memory_client(self):
        """Test replaying an already applied list leaves the same facts."""
        client = InMemoryAuthorizationClient()
        adapter = AuthorizationSyncAdapter(client)
        commands = AuthorizationSyncAdapter.member_added_commands(ORG, "bob", "member", "alice")
        commands += AuthorizationSyncAdapter.team_member_added_commands("t-1", "bob")

        await adapter.apply("add_member", commands)
        await adapter.retry(AuthorizationSyncError("add_member", commands, commands[0]))

        assert client.get_user_roles("bob", SCOPE) == ["member"]
        assert client.relations == frozenset({Relation.team_member("bob", "t-1")})
        assert client.assignment_count == 1

    @pytest.mark.asyncio
    async def test_empty_command_list(self, adapter, client):
        await adapter.apply("noop", [])
        assert client.method_calls == []
