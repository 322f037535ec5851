"""
asyncpg pool shared by the PostgreSQL directory store and authorization client.
"""
import logging
from contextlib import asynccontextmanager
from importlib import resources
from typing import Any, AsyncIterator, List, Optional, Tuple

import asyncpg
from asyncpg import Connection, Pool, Record

from ..config.settings import TenancySettings, get_settings

logger = logging.getLogger(__name__)

MIGRATIONS_PACKAGE = "neo_tenancy.database.migrations"

# (file, settings attribute naming the target schema), applied in order
MIGRATIONS: Tuple[Tuple[str, str], ...] = (
    ("V001__tenant_directory.sql", "database_schema"),
    ("V002__authorization.sql", "authz_schema"),
)


class DatabaseManager:
    """Lazily created asyncpg pool with serializable transactions by default."""

    def __init__(self, settings: Optional[TenancySettings] = None, **pool_config):
        self.settings = settings or get_settings()
        self.pool: Optional[Pool] = None
        self.pool_config = {
            "min_size": self.settings.db_pool_min_size,
            "max_size": self.settings.db_pool_max_size,
            "command_timeout": self.settings.db_command_timeout,
            **pool_config
        }

    async def create_pool(self) -> Pool:
        if self.pool is None:
            logger.info(f"Creating directory pool (max_size={self.pool_config['max_size']})")
            self.pool = await asyncpg.create_pool(
                self.settings.database_url,
                server_settings={"application_name": "neo-tenancy"},
                **self.pool_config
            )
        return self.pool

    async def close_pool(self) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
            logger.info("Directory pool closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Connection]:
        pool = await self.create_pool()
        async with pool.acquire() as connection:
            yield connection

    @asynccontextmanager
    async def transaction(self, isolation: str = "serializable") -> AsyncIterator[Connection]:
        """One unit of work; commits on clean exit and rolls back on error."""
        async with self.acquire() as connection:
            async with connection.transaction(isolation=isolation):
                yield connection

    async def execute(self, query: str, *args) -> str:
        async with self.acquire() as connection:
            return await connection.execute(query, *args)

    async def fetch(self, query: str, *args) -> List[Record]:
        async with self.acquire() as connection:
            return await connection.fetch(query, *args)

    async def fetchval(self, query: str, *args) -> Any:
        async with self.acquire() as connection:
            return await connection.fetchval(query, *args)

    async def apply_migration(self, name: str, schema: str) -> None:
        """Run a packaged SQL migration with ``{schema}`` substituted."""
        sql = resources.files(MIGRATIONS_PACKAGE).joinpath(name).read_text(encoding="utf-8")
        async with self.transaction(isolation="read_committed") as connection:
            await connection.execute(sql.replace("{schema}", schema))
        logger.info(f"Applied migration {name} to schema {schema}")

    async def migrate(self) -> None:
        """Apply every packaged migration. All statements are idempotent."""
        for name, schema_attr in MIGRATIONS:
            await self.apply_migration(name, getattr(self.settings, schema_attr))


def parse_row_count(status: str) -> int:
    """Extract the affected row count from an asyncpg command status ("DELETE 3")."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


_database_manager: Optional[DatabaseManager] = None


def get_database(settings: Optional[TenancySettings] = None) -> DatabaseManager:
    """Process-wide DatabaseManager."""
    global _database_manager
    if _database_manager is None:
        _database_manager = DatabaseManager(settings)
    return _database_manager


async def init_database(settings: Optional[TenancySettings] = None) -> DatabaseManager:
    """Open the pool and bring both schemas up to date."""
    db = get_database(settings)
    await db.create_pool()
    await db.migrate()
    logger.info("Directory database ready")
    return db


async def close_database() -> None:
    global _database_manager
    if _database_manager is not None:
        await _database_manager.close_pool()
        _database_manager = None
