"""Database connection and session management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from shopdesk.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from shopdesk.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """Store client: one async engine plus its session factory.

    Constructed once at process startup and handed to whatever needs it
    (the FastAPI app keeps it on ``app.state``). Nothing in the package
    reaches for a module-level engine.
    """

    def __init__(self, url: str, **engine_kwargs: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=False, **engine_kwargs)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        """Create a store client from application settings."""
        kwargs: dict[str, Any] = {"pool_pre_ping": True}
        if not settings.database_url.startswith("sqlite"):
            kwargs.update(pool_size=10, max_overflow=20)
        return cls(settings.database_url, **kwargs)

    async def create_all(self) -> None:
        """Create any missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Schema ensured on %s", self.engine.url.render_as_string(hide_password=True))

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session.

        Services commit their own steps; anything left pending when the
        block raises is rolled back.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
