"""Database connection and session management for the postcode lookup table."""

from collections.abc import AsyncIterator
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base, sessionmaker

from pricepaid.core.config import get_settings

# Base for ORM models
Base = declarative_base()


def _async_database_url(database_url: str) -> str:
    # postgresql:// -> postgresql+asyncpg:// for the async engine
    return database_url.replace("postgresql://", "postgresql+asyncpg://")


@lru_cache
def get_async_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Async session factory for API lookups, created on first use."""
    engine = create_async_engine(
        _async_database_url(get_settings().database_url),
        echo=False,
        pool_size=5,
        max_overflow=10,
    )
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@lru_cache
def get_sync_sessionmaker() -> sessionmaker:
    """Sync session factory for the ingestion job."""
    engine = create_engine(get_settings().database_url, echo=False, pool_size=5, max_overflow=10)
    return sessionmaker(bind=engine)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency for async database sessions."""
    async with get_async_sessionmaker()() as session:
        yield session
