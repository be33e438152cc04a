"""
Database Adapters

SQLite is the default (local development, tests, single-instance deployments).
PostgreSQL is selected automatically when DATABASE_URL points at it.

SQLite characteristics:
- File-based (single .db file), no server required
- Single writer at a time (file locking)
- Primary-key conflicts still give us create-if-absent semantics
"""

from typing import Any

from sqlalchemy.pool import NullPool

from shortener.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    - NullPool: a fresh connection per session (file-based, no pooling needed)
    - check_same_thread=False: required for aiosqlite's worker thread
    """

    def get_pool_class(self) -> type[NullPool]:
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def get_dialect_name(self) -> str:
        return "sqlite"


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL adapter (asyncpg driver).

    Uses SQLAlchemy's default queue pool; pre-ping drops connections the
    server closed while idle.
    """

    def get_pool_class(self) -> None:
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
        }

    def get_dialect_name(self) -> str:
        return "postgresql"


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Returns:
        PostgreSQLAdapter for postgresql URLs, SQLiteAdapter otherwise
    """
    if database_url.startswith(("postgresql", "postgres")):
        return PostgreSQLAdapter()
    return SQLiteAdapter()
