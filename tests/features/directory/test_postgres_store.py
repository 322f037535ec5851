"""Tests for the PostgreSQL directory store with a mocked asyncpg connection."""

import json
import asyncpg
import pytest
from datetime import timedelta

from neo_tenancy.config.constants import InvitationStatus, MemberStatus
from neo_tenancy.core.exceptions import AlreadyExistsError, DatabaseError, NotFoundError, TransactionError
from neo_tenancy.features.directory.repositories.postgres_store import PostgresDirectoryStore
from neo_tenancy.features.organizations.entities.organization import OrganizationSettings
from neo_tenancy.utils.timezone import utc_now


def _organization_row(**overrides):
    now = utc_now()
    row = {
        "id": "org-1",
        "name": "Acme Corp",
        "slug": "acme-corp",
        "owner_id": "alice",
        "logo": None,
        "metadata": json.dumps({"plan": "pro"}),
        "settings": json.dumps({"allow_public_signup": True}),
        "allowed_domains": ["acme.com"],
        "status": "active",
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def _member_row(**overrides):
    now = utc_now()
    row = {
        "id": "member-1",
        "organization_id": "org-1",
        "user_id": "bob",
        "role": "member",
        "status": "active",
        "suspended_at": None,
        "joined_at": now,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def _invitation_row(**overrides):
    now = utc_now()
    row = {
        "id": "inv-1",
        "organization_id": "org-1",
        "invitee_identifier": "bob@example.com",
        "identifier_type": "email",
        "role": "member",
        "team_id": None,
        "inviter_id": "alice",
        "inviter_name": "Alice",
        "message": None,
        "status": "pending",
        "expires_at": now + timedelta(hours=48),
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


class TestPostgresDirectoryStore:
    """Test SQL dispatch, row mapping and error translation."""

    @pytest.fixture
    def store(self, mock_database):
        return PostgresDirectoryStore(mock_database, schema="tenancy")

    @pytest.mark.asyncio
    async def test_transaction_is_serializable(self, store, mock_database):
        async with store.transaction():
            pass
        assert mock_database.last_isolation == "serializable"

    @pytest.mark.asyncio
    async def test_get_organization_maps_row(self, store, mock_connection):
        """Test JSON columns and enums are mapped onto the entity."""
        mock_connection.fetchrow.return_value = _organization_row()

        async with store.transaction() as tx:
            organization = await tx.get_organization("org-1")

        assert organization.slug == "acme-corp"
        assert organization.metadata == {"plan": "pro"}
        assert organization.settings == OrganizationSettings(allow_public_signup=True)
        assert organization.allowed_domains == ["acme.com"]
        query = mock_connection.fetchrow.call_args.args[0]
        assert "tenancy.organizations" in query
        assert "{schema}" not in query

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store, mock_connection):
        mock_connection.fetchrow.return_value = None
        async with store.transaction() as tx:
            assert await tx.get_member("org-1", "nobody") is None

    @pytest.mark.asyncio
    async def test_unique_violation_becomes_already_exists(self, store, mock_connection, sample_organization):
        mock_connection.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate key")

        async with store.transaction() as tx:
            with pytest.raises(AlreadyExistsError, match="already taken"):
                await tx.insert_organization(sample_organization)

    @pytest.mark.asyncio
    async def test_serialization_failure_becomes_transaction_error(self, store):
        """Test a concurrent-writer abort surfaces as a retryable TransactionError."""
        with pytest.raises(TransactionError):
            async with store.transaction():
                raise asyncpg.SerializationError("could not serialize access")

    @pytest.mark.asyncio
    async def test_other_postgres_errors_become_database_error(self, store):
        with pytest.raises(DatabaseError):
            async with store.transaction():
                raise asyncpg.PostgresError("connection lost")

    @pytest.mark.asyncio
    async def test_domain_errors_pass_through(self, store):
        with pytest.raises(NotFoundError):
            async with store.transaction():
                raise NotFoundError("Team", "t-1")

    @pytest.mark.asyncio
    async def test_insert_member_parameters(self, store, mock_connection, sample_member):
        mock_connection.fetchrow.return_value = _member_row()

        async with store.transaction() as tx:
            member = await tx.insert_member(sample_member)

        args = mock_connection.fetchrow.call_args.args
        assert args[1:6] == ("member-1", "org-1", "bob", "member", "active")
        assert member.status == MemberStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_update_missing_member_raises(self, store, mock_connection, sample_member):
        mock_connection.fetchrow.return_value = None
        async with store.transaction() as tx:
            with pytest.raises(NotFoundError):
                await tx.update_member(sample_member)

    @pytest.mark.asyncio
    async def test_delete_counts_rows(self, store, mock_connection):
        mock_connection.execute.return_value = "DELETE 4"
        async with store.transaction() as tx:
            assert await tx.delete_members_by_organization("org-1") == 4
            assert await tx.delete_member("member-1") is True

    @pytest.mark.asyncio
    async def test_find_invitation_normalizes_identifier(self, store, mock_connection):
        mock_connection.fetchrow.return_value = _invitation_row()

        async with store.transaction() as tx:
            invitation = await tx.find_invitation("org-1", " Bob@Example.com ", InvitationStatus.PENDING)

        args = mock_connection.fetchrow.call_args.args
        assert args[1:] == ("org-1", "bob@example.com", "pending")
        assert invitation.status == InvitationStatus.PENDING

    @pytest.mark.asyncio
    async def test_list_teams(self, store, mock_connection):
        now = utc_now()
        mock_connection.fetch.return_value = [
            {
                "id": "team-1",
                "organization_id": "org-1",
                "name": "Engineering",
                "slug": "engineering",
                "parent_team_id": None,
                "description": None,
                "metadata": None,
                "created_at": now,
                "updated_at": now,
            }
        ]
        async with store.transaction() as tx:
            teams = await tx.list_teams("org-1")
        assert [t.slug for t in teams] == ["engineering"]
        assert teams[0].metadata == {}

    @pytest.mark.asyncio
    async def test_create_schema(self, store, mock_database):
        await store.create_schema()
        mock_database.apply_migration.assert_awaited_once_with("V001__tenant_directory.sql", "tenancy")
