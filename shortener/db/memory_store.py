"""
In-Memory Mapping Store

Dict-backed MappingStore for local development and tests. Each method runs to
completion without awaiting, so on a single event loop every operation is
atomic; that gives the same create-if-absent and increment guarantees as the
durable backends. Data is lost on restart.
"""

from typing import Dict

from shortener.core.exceptions import CodeCollisionError, ShortCodeNotFoundError
from shortener.db.models import CLICK_COUNT_FIELD, ShortUrlMapping
from shortener.db.store import CounterUpdate, MappingStore


class InMemoryMappingStore(MappingStore):

    def __init__(self):
        self.mappings: Dict[str, ShortUrlMapping] = {}

    async def put(self, mapping: ShortUrlMapping, if_absent: bool = True) -> None:
        if if_absent and mapping.short_code in self.mappings:
            raise CodeCollisionError(mapping.short_code)
        self.mappings[mapping.short_code] = mapping.model_copy()

    async def get(self, short_code: str) -> ShortUrlMapping:
        mapping = self.mappings.get(short_code)
        if mapping is None:
            raise ShortCodeNotFoundError(short_code)
        return mapping.model_copy()

    async def increment_counter(
        self,
        short_code: str,
        field: str = CLICK_COUNT_FIELD,
        delta: int = 1,
    ) -> CounterUpdate:
        mapping = self.mappings.get(short_code)
        if mapping is None:
            return CounterUpdate(short_code, applied=False, error="short code not found")
        if field not in ShortUrlMapping.model_fields:
            return CounterUpdate(short_code, applied=False, error=f"unknown field '{field}'")

        self.mappings[short_code] = mapping.model_copy(
            update={field: getattr(mapping, field) + delta}
        )
        return CounterUpdate(short_code, applied=True)
