"""
Database Session Management

Builds the async engine (through the dialect adapter) and the session factory
used by the SQL mapping store. Nothing is created at import time; the store
manager calls these factories once at startup with the configured URL.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from shortener.db.sqlite_adapter import get_database_adapter


def create_engine_for(database_url: str) -> AsyncEngine:
    """Create an async engine configured for the URL's dialect."""
    return get_database_adapter(database_url).create_engine(database_url)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create the async session factory.

    expire_on_commit=False keeps fetched rows usable after the commit that
    follows every store operation.
    """
    return async_sessionmaker(
        engine,
        class_=SQLModelAsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
