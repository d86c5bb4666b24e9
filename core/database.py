"""
Database configuration and initialization
"""
from typing import AsyncIterator, Optional
from sqlalchemy import text
from sqlalchemy.orm import declarative_base
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from config import settings
from utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()

# Created on first use so that importing models never opens a connection pool
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


def get_engine() -> AsyncEngine:
    """Get the shared async engine"""
    global _engine
    if _engine is None:
        _engine = create_async_engine(settings.database.url, echo=settings.app.debug)
    return _engine


def get_session_factory() -> async_sessionmaker:
    """Get the session factory bound to the shared engine"""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def get_db() -> AsyncIterator[AsyncSession]:
    """Get database session"""
    async with get_session_factory()() as session:
        yield session


def get_db_url() -> str:
    """Get database URL for external connections"""
    return settings.database.url


async def init_db(engine: Optional[AsyncEngine] = None):
    """Initialize database tables"""
    engine = engine or get_engine()
    try:
        logger.info("Initializing database...")

        # Import all models to ensure they're registered
        from models import tracker  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


async def check_connection(engine: Optional[AsyncEngine] = None) -> bool:
    """Test the database connection"""
    engine = engine or get_engine()
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True

    except Exception as e:
        logger.error(f"Database connection test failed: {e}")
        return False


async def dispose_engine():
    """Close pooled connections"""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
