"""
Mapping Store Manager

Owns the application-wide MappingStore instance.

Design:
- One store per application instance, built from Settings on startup
- Shared across requests (the store holds an engine/client, not request state)
- Endpoints receive it through the get_mapping_store dependency, which tests
  can override
"""

import logging
from typing import Optional

from shortener.core.exceptions import StorageError
from shortener.core.setting import Settings, StoreBackend, settings
from shortener.db.store import MappingStore

logger = logging.getLogger(__name__)

# Global store instance (initialized on startup)
_store: Optional[MappingStore] = None


def build_store(config: Settings) -> MappingStore:
    """Create the store selected by STORE_BACKEND."""
    if config.STORE_BACKEND is StoreBackend.dynamodb:
        from shortener.db.dynamodb_store import DynamoDBMappingStore
        return DynamoDBMappingStore.from_region(
            config.TABLE_NAME,
            region_name=config.AWS_REGION,
            endpoint_url=config.DYNAMODB_ENDPOINT_URL,
        )
    if config.STORE_BACKEND is StoreBackend.memory:
        from shortener.db.memory_store import InMemoryMappingStore
        return InMemoryMappingStore()

    from shortener.db.sql_store import SQLMappingStore
    return SQLMappingStore.from_url(config.DATABASE_URL, config.TABLE_NAME)


def get_settings() -> Settings:
    """Dependency returning the startup configuration."""
    return settings


def get_mapping_store() -> MappingStore:
    """
    Dependency returning the global mapping store.

    Raises:
        StorageError: If the store was not initialized on startup
    """
    if _store is None:
        raise StorageError("Mapping store is not initialized")
    return _store


async def initialize_store(config: Settings = settings) -> None:
    """Build the configured store and prepare it (e.g., create tables)."""
    global _store

    if _store is not None:
        logger.warning("Mapping store already initialized")
        return

    store = build_store(config)
    await store.initialize()
    _store = store
    logger.info(
        f"Mapping store initialized: backend={config.STORE_BACKEND.value}, "
        f"table={config.TABLE_NAME}"
    )


async def shutdown_store() -> None:
    """Release store resources."""
    global _store

    if _store is None:
        return

    try:
        await _store.close()
    except Exception as e:
        logger.warning(f"Failed to close mapping store cleanly: {e}")
    finally:
        _store = None
        logger.info("Mapping store shut down")
