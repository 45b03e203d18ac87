"""
Database connection management.

Provides SQLAlchemy engines, session factories, and the FastAPI dependency
for async database session injection. The AsyncSession handed to services
is the transactional store handle; no module-level client is kept.

Dependencies: sqlalchemy, training_erp.configs
System role: Database connection lifecycle management
"""

from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from training_erp.configs import get_settings


@lru_cache
def get_async_engine() -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    Cached so every request shares one pool. pool_pre_ping=True verifies
    connections before use to detect stale/broken connections early.

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    db_config = get_settings().database

    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
        connect_args=db_config.connect_args,
    )


@lru_cache
def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Create async session factory for database operations.

    autoflush=False keeps writes explicit; expire_on_commit=False lets
    services read attributes after commit without a reload.

    Returns:
        async_sessionmaker: Async session factory configured for manual transaction control

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    return async_sessionmaker(
        bind=get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for async database session injection with automatic cleanup.

    Creates a new async database session for each request and ensures it's
    closed (rolling back anything uncommitted) after the route completes.

    Yields:
        AsyncSession: Async SQLAlchemy database session (scoped to request lifetime)

    Usage:
        from fastapi import Depends

        @router.get("/deal-sessions/{session_id}")
        async def get_session(session_id: str, db: AsyncSession = Depends(get_async_db)):
            ...
    """
    SessionFactory = get_async_session_factory()
    async with SessionFactory() as session:
        yield session
