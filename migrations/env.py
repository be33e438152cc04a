"""
Alembic Environment Configuration

Configures Alembic for the SQL mapping store:
- Database connection from settings
- Mapping table metadata (table name from TABLE_NAME) for autogenerate
- Sync driver for SQLite, async engine for PostgreSQL
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import MetaData, pool, create_engine
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from shortener.core.setting import settings
from shortener.db.models import build_mapping_table

config = context.config

database_url = settings.DATABASE_URL
is_sqlite = database_url.startswith(("sqlite+aiosqlite://", "sqlite://"))

# Alembic runs SQLite migrations through the sync driver
if database_url.startswith("sqlite+aiosqlite://"):
    sync_url = database_url.replace("sqlite+aiosqlite://", "sqlite://", 1)
else:
    sync_url = database_url

config.set_main_option("sqlalchemy.url", database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = MetaData()
build_mapping_table(settings.TABLE_NAME, target_metadata)


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL without a connection."""
    context.configure(
        url=sync_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    if is_sqlite:
        connectable = create_engine(sync_url, poolclass=pool.NullPool)

        with connectable.connect() as connection:
            do_run_migrations(connection)

        connectable.dispose()
    else:
        asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
