"""
Async engine and session factory.

The engine is created lazily so the application can start without a
database (listings then fall back to mock data).
"""

from functools import lru_cache
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from wayfare.core.config import get_settings


@lru_cache()
def get_engine() -> AsyncEngine:
    settings = get_settings()
    kwargs = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if settings.DATABASE_URL.startswith("postgresql"):
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return create_async_engine(settings.DATABASE_URL, **kwargs)


@lru_cache()
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with get_sessionmaker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_optional_db() -> AsyncGenerator[Optional[AsyncSession], None]:
    """Like get_db, but yields None when no database is configured."""
    if not get_settings().database_configured:
        yield None
        return
    async with get_sessionmaker()() as session:
        yield session


async def dispose_engine() -> None:
    if get_settings().database_configured and get_engine.cache_info().currsize:
        await get_engine().dispose()
