"""Pytest configuration and fixtures for neo-tenancy tests."""

import pytest
import pytest_asyncio
from contextlib import asynccontextmanager
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from neo_tenancy.config.settings import TenancySettings
from neo_tenancy.factory import create_tenancy_services
from neo_tenancy.features.authz.adapters.memory_client import InMemoryAuthorizationClient
from neo_tenancy.features.directory.repositories.memory_store import InMemoryDirectoryStore
from neo_tenancy.features.invitations.entities.invitation import Invitation
from neo_tenancy.features.members.entities.member import Member
from neo_tenancy.features.organizations.entities.organization import Organization
from neo_tenancy.features.teams.entities.team import Team
from neo_tenancy.utils.timezone import utc_now


@pytest.fixture
def settings():
    """Settings with no limits and status enforcement on."""
    return TenancySettings(
        database_url="",
        redis_url=None,
        invitation_expiration_hours=48,
        enforce_organization_status=True,
        max_organizations_per_user=None,
        max_members_per_organization=None,
        max_teams_per_organization=None,
    )


@pytest.fixture
def store():
    """Fresh in-memory directory store."""
    return InMemoryDirectoryStore()


@pytest.fixture
def authz():
    """Fresh in-memory authorization client."""
    return InMemoryAuthorizationClient()


@pytest.fixture
def services(store, authz, settings):
    """Directory services wired over the in-memory store and client."""
    return create_tenancy_services(store, authz, settings)


@pytest_asyncio.fixture
async def organization(services):
    """Organization "Acme Corp" owned by alice."""
    return await services.organizations.create_organization("alice", "Acme Corp", slug="acme-corp")


@pytest_asyncio.fixture
async def populated_organization(services, organization):
    """Acme Corp with bob as admin and carol and dave as members."""
    await services.members.add_member("alice", organization.id, "bob", "admin")
    await services.members.add_member("alice", organization.id, "carol", "member")
    await services.members.add_member("alice", organization.id, "dave", "member")
    return organization


@pytest.fixture
def sample_organization():
    """Sample organization entity."""
    return Organization(id="org-1", name="Acme Corp", slug="acme-corp", owner_id="alice")


@pytest.fixture
def sample_member():
    """Sample member entity."""
    return Member(id="member-1", organization_id="org-1", user_id="bob", role="member")


@pytest.fixture
def sample_team():
    """Sample team entity."""
    return Team(id="team-1", organization_id="org-1", name="Engineering", slug="engineering")


@pytest.fixture
def sample_invitation():
    """Sample pending invitation expiring in two days."""
    return Invitation(
        id="inv-1",
        organization_id="org-1",
        invitee_identifier="Bob@Example.com",
        role="member",
        inviter_id="alice",
        expires_at=utc_now() + timedelta(hours=48),
    )


@pytest.fixture
def mock_connection():
    """Mock asyncpg connection."""
    conn = AsyncMock()
    conn.fetchrow = AsyncMock()
    conn.fetch = AsyncMock(return_value=[])
    conn.fetchval = AsyncMock()
    conn.execute = AsyncMock(return_value="DELETE 0")
    return conn


@pytest.fixture
def mock_database(mock_connection):
    """Mock DatabaseManager whose transactions yield ``mock_connection``."""
    db = MagicMock()
    db.fetchval = AsyncMock()
    db.fetch = AsyncMock(return_value=[])
    db.execute = AsyncMock(return_value="DELETE 0")
    db.apply_migration = AsyncMock()

    @asynccontextmanager
    async def transaction(isolation="serializable"):
        db.last_isolation = isolation
        yield mock_connection

    db.transaction = transaction
    return db


@pytest.fixture
def mock_redis():
    """Mock redis.asyncio client."""
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.setex = AsyncMock()
    client.delete = AsyncMock(return_value=0)
    client.aclose = AsyncMock()
    return client
