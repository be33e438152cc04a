"""
Database Adapter Interface

Dialect-specific engine configuration for the SQL mapping store. Each adapter
knows how to build an AsyncEngine for its database; the store itself only
issues portable SQLAlchemy Core statements.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import Pool


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    To add a new database backend:
    1. Create a new class inheriting from DatabaseAdapter
    2. Implement all abstract methods
    3. Register it in get_database_adapter()
    """

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create and configure the async database engine.

        Args:
            database_url: Connection string for the database
            **kwargs: Additional engine options (override adapter defaults)

        Returns:
            Configured AsyncEngine instance
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        pool_class = self.get_pool_class()
        if pool_class is not None:
            engine_kwargs.setdefault("poolclass", pool_class)

        return create_async_engine(
            database_url,
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

    @abstractmethod
    def get_pool_class(self) -> Optional[type[Pool]]:
        """Pool class for this database type, or None for the default."""

    @abstractmethod
    def get_connect_args(self) -> dict[str, Any]:
        """Driver connection arguments."""

    @abstractmethod
    def get_engine_kwargs(self) -> dict[str, Any]:
        """Additional engine configuration."""

    @abstractmethod
    def get_dialect_name(self) -> str:
        """SQLAlchemy dialect name (e.g., 'sqlite', 'postgresql')."""
