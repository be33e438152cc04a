"""
Mapping Store Interface

The contract every persistence backend implements. Business logic only talks
to this interface, so backends (SQL, DynamoDB, in-memory) can be swapped
without touching the services.

Backends must provide two atomic primitives:
- put(..., if_absent=True): create-if-absent, so colliding codes are detected
- increment_counter: server-side increment, so concurrent redirects never
  lose updates to a read-modify-write race
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from shortener.db.models import CLICK_COUNT_FIELD, ShortUrlMapping


@dataclass(frozen=True)
class CounterUpdate:
    """Outcome of a best-effort counter increment."""
    short_code: str
    applied: bool
    error: Optional[str] = None


class MappingStore(ABC):
    """
    Abstract base class for mapping stores.

    To add a new backend:
    1. Create a new class inheriting from MappingStore
    2. Implement all abstract methods
    3. Wire it into shortener.core.store_manager.build_store
    """

    async def initialize(self) -> None:
        """Prepare the backend (create tables, warm connections)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def put(self, mapping: ShortUrlMapping, if_absent: bool = True) -> None:
        """
        Persist a mapping.

        Args:
            mapping: The mapping to write
            if_absent: Only write when no mapping with this short code exists

        Raises:
            CodeCollisionError: If if_absent is set and the code is taken
            StorageError: If the write fails
        """

    @abstractmethod
    async def get(self, short_code: str) -> ShortUrlMapping:
        """
        Fetch a mapping by short code.

        Raises:
            ShortCodeNotFoundError: If no mapping exists for the code
            StorageError: If the read fails
        """

    @abstractmethod
    async def increment_counter(
        self,
        short_code: str,
        field: str = CLICK_COUNT_FIELD,
        delta: int = 1,
    ) -> CounterUpdate:
        """
        Atomically add delta to a numeric field.

        Store failures are reported in the returned CounterUpdate rather than
        raised; callers decide whether they matter.
        """
