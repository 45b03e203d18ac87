"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata. Runs
once before the service starts; request handlers never create schema.

Dependencies: sqlalchemy, training_erp.configs
System role: Database schema initialization

Usage:
    python -m training_erp.boundary.db.create_tables
"""

import asyncio
import sys

from sqlalchemy.ext.asyncio import AsyncEngine

from training_erp.boundary.db.base import Base
from training_erp.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
from training_erp.boundary.db import models  # noqa: F401


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: existing tables are left unchanged.

    Args:
        engine: Engine to use (defaults to the configured async engine)

    Raises:
        SQLAlchemyError: If the connection or DDL fails
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("All tables created successfully.")


async def drop_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Drop all database tables and their data.

    WARNING: Irreversible data loss. Only use in development environments.
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    print("All tables dropped successfully.")


async def _main(argv: list[str]) -> None:
    if "--drop" in argv:
        await drop_all_tables()
    await create_all_tables()
    await get_async_engine().dispose()


if __name__ == "__main__":
    asyncio.run(_main(sys.argv[1:]))
