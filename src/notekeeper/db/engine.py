"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
async_sessionmaker for short-lived sessions. One Database object is built
at start-up by create_app() and handed to the stores; there is no
module-level engine.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from notekeeper.config import Settings


class Database:
    """Owns the engine and the session factory for one process."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        # Connection pool: min 5, max 20 connections.
        engine = create_async_engine(
            settings.database_url,
            echo=settings.debug,
            pool_size=5,
            max_overflow=15,
        )
        return cls(engine)

    async def dispose(self) -> None:
        await self.engine.dispose()
