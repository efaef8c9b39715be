"""Async SQLAlchemy engine and session factory for the remote document store."""
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from models.base import Base


def create_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for the document store."""
    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Return a session factory bound to the engine.

    The mirror opens one short-lived session per remote operation, so objects
    must stay readable after commit.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing document tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
