"""
Database engine and session lifecycle.

One Database instance is created at process start (see main.lifespan),
stored on app.state and shared by every request handler. Handlers never
create engines of their own; they borrow sessions from the shared pool.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from align.infrastructure.config.settings import Settings

logger = logging.getLogger(__name__)


# Modern SQLAlchemy 2.0 pattern
class Base(DeclarativeBase):
    """Base class for all database models"""

    pass


class Database:
    """Pooled async engine plus its session factory."""

    def __init__(self, url: str, *, echo: bool = False, **engine_options):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url, echo=echo, pool_pre_ping=True, **engine_options
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
            autocommit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        options = {}
        if "postgresql" in settings.database_url:
            options = {
                "pool_size": settings.database_pool_size,
                "max_overflow": settings.database_max_overflow,
                "pool_recycle": settings.database_pool_recycle,
                "connect_args": {
                    "server_settings": {"jit": "off"},
                    "command_timeout": 60,
                },
            }
        return cls(settings.database_url, echo=settings.database_echo, **options)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Session for read operations. Does not commit."""
        async with self.session_factory() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Session wrapped in a transaction:
        - Commits on success
        - Rolls back on exception
        - Closes session automatically
        """
        async with self.session_factory.begin() as session:
            yield session

    async def create_all(self) -> None:
        """Create missing tables (development and tests; production uses migrations)"""
        # Import models so they register on Base.metadata
        from align.infrastructure.persistence import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")
