"""
Database configuration and session management.
Uses SQLAlchemy async engine (asyncpg in production, aiosqlite in tests).

The engine and session factory are created by the application lifespan
and disposed on shutdown; nothing here is a module-level connection.
"""
import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.models.base import Base

logger = logging.getLogger(__name__)


def create_engine(database_url: str) -> AsyncEngine:
    """
    Create the async engine for the file registry.

    Pool sizing only applies to server databases; SQLite uses its own pool.
    """
    options = {
        "echo": False,  # Disable SQLAlchemy query logging
        "pool_pre_ping": True,
    }
    if not database_url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)

    return create_async_engine(database_url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the async session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialize database: create tables.
    Called on application startup.
    """
    # Register models on the metadata before create_all
    from app.models.file_record import FileRecord  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created or already exist")
