"""
Pytest configuration and shared fixtures for the SwipeStats pipeline tests.
"""

import pytest

from migrations.legacy_models import legacy_metadata
from migrations.legacy_to_current.database import DatabaseMigration

IN_MEMORY_SQLITE = "sqlite+aiosqlite://"


@pytest.fixture
async def migration():
    """Legacy and target stores as two separate in-memory SQLite databases."""
    migration = DatabaseMigration(IN_MEMORY_SQLITE, IN_MEMORY_SQLITE, batch_size=2)
    await migration.init_connections()
    async with migration.legacy_engine.begin() as conn:
        await conn.run_sync(legacy_metadata.create_all)
    yield migration
    await migration.close_connections()


@pytest.fixture
async def target_only_migration():
    """Target store only, as used by the statistics stages."""
    migration = DatabaseMigration(None, IN_MEMORY_SQLITE)
    await migration.init_connections(connect_legacy=False)
    yield migration
    await migration.close_connections()
