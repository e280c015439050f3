"""Connections to the legacy (read-only) and target stores."""

import logging
from contextlib import asynccontextmanager

from sqlalchemy import make_url, text
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import db.models  # noqa: F401  registers every target table on SQLModel.metadata
from migrations.legacy_to_current.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def create_engine_for(url: str | URL, pooled: bool = True) -> AsyncEngine:
    """Async engine with a pool suited to the backend.

    In-memory SQLite databases share a single connection so every session
    sees the same data.
    """
    url = make_url(url)
    if url.get_backend_name() == "sqlite":
        return create_async_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if not pooled:
        return create_async_engine(url, echo=False)
    return create_async_engine(
        url,
        echo=False,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=300,
    )


class DatabaseMigration:
    """Holds both engines for a pipeline run and hands out target sessions."""

    def __init__(
        self,
        legacy_uri: str | None,
        target_uri: str,
        batch_size: int = 500,
        dry_run: bool = False,
    ):
        if not target_uri:
            raise ConfigurationError("DATABASE_URL is required")
        self.legacy_uri = legacy_uri
        self.target_uri = target_uri
        self.batch_size = batch_size
        self.dry_run = dry_run
        self.legacy_engine: AsyncEngine | None = None
        self.target_engine: AsyncEngine | None = None

    @asynccontextmanager
    async def get_session(self):
        """Provide managed session context"""
        async with AsyncSession(self.target_engine, expire_on_commit=False) as session:
            try:
                yield session
            except Exception as e:
                await session.rollback()
                raise e

    @asynccontextmanager
    async def legacy_connection(self):
        """Read-only connection to the legacy store."""
        if self.legacy_engine is None:
            raise ConfigurationError("OLD_DATABASE_URL is required for this command")
        conn: AsyncConnection
        async with self.legacy_engine.connect() as conn:
            yield conn

    async def init_connections(self, connect_legacy: bool = True, create_tables: bool = True):
        """Initialize database connections and make sure target tables exist"""
        try:
            if connect_legacy:
                if not self.legacy_uri:
                    raise ConfigurationError("OLD_DATABASE_URL is required for this command")
                self.legacy_engine = create_engine_for(self.legacy_uri)

            target_url = make_url(self.target_uri)
            if target_url.get_backend_name() == "postgresql":
                await self._ensure_database(target_url)

            self.target_engine = create_engine_for(target_url)

            if create_tables:
                async with self.target_engine.begin() as conn:
                    await conn.run_sync(SQLModel.metadata.create_all)

        except Exception as e:
            logger.exception(f"Failed to initialize connections: {str(e)}")
            raise

    @staticmethod
    async def _ensure_database(url: URL):
        database_name = url.database
        admin_engine = create_engine_for(url.set(database="postgres"), pooled=False)
        try:
            async with admin_engine.connect() as conn:
                await conn.execute(text("COMMIT"))
                result = await conn.execute(
                    text("SELECT 1 FROM pg_database WHERE datname = :name"), {"name": database_name}
                )
                if not result.scalar():
                    await conn.execute(text(f'CREATE DATABASE "{database_name}"'))
                    logger.info(f"Database '{database_name}' created.")
        finally:
            await admin_engine.dispose()

    async def close_connections(self):
        """Close database connections"""
        for name, engine in (("legacy", self.legacy_engine), ("target", self.target_engine)):
            try:
                if engine:
                    await engine.dispose()
            except Exception as e:
                logger.exception(f"Error closing {name} connection: {str(e)}")
