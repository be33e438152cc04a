"""
Persistence layer.

This module provides:
- ShortUrlMapping: the persisted entity
- MappingStore interface: the contract business logic depends on
- Backends: SQLMappingStore (SQLAlchemy), DynamoDBMappingStore (boto3),
  InMemoryMappingStore (development/tests)

To add a new backend:
1. Create a new class inheriting from MappingStore
2. Implement put/get/increment_counter with the store's atomic primitives
3. Wire it into shortener.core.store_manager.build_store
"""

from shortener.db.models import ShortUrlMapping
from shortener.db.store import CounterUpdate, MappingStore

__all__ = [
    "ShortUrlMapping",
    "CounterUpdate",
    "MappingStore",
]
