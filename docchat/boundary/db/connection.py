"""
Database connection management.

Provides the async SQLAlchemy engine, session factory and table creation.

Dependencies: sqlalchemy, docchat.configs
System role: Database connection lifecycle management
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)

from docchat.boundary.db.base import Base
from docchat.configs.database import DatabaseSettings

logger = logging.getLogger(__name__)


def get_async_engine(db_config: DatabaseSettings) -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    pool_pre_ping=True verifies connections before use to detect stale ones.

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid
    """
    return create_async_engine(
        db_config.url,
        echo=db_config.echo_sql,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create async session factory with explicit transaction control.

    Usage:
        SessionFactory = get_async_session_factory(engine)
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    return async_sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all registered tables that do not exist yet."""
    # Import registers the model on Base.metadata.
    from docchat.boundary.db import document_model  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{__name__}:create_tables - Tables ensured")
