"""
Statistics Service

Read-only view of a mapping: destination, timestamps, raw click count and
whether it has expired. Reading stats never increments the counter.
"""

from shortener.core.clock import Clock, system_clock
from shortener.db.store import MappingStore


class StatsService:
    """Service for retrieving URL statistics."""

    def __init__(self, store: MappingStore, clock: Clock = system_clock):
        self.store = store
        self.clock = clock

    async def get_stats(self, short_code: str) -> dict:
        """
        Get statistics for a short URL.

        Returns:
            Dictionary with short_code, original_url, created_at, expires_at,
            click_count and expired

        Raises:
            ShortCodeNotFoundError: If the code was never created
            StorageError: If the lookup fails
        """
        mapping = await self.store.get(short_code)

        return {
            "short_code": mapping.short_code,
            "original_url": mapping.original_url,
            "created_at": mapping.created_at,
            "expires_at": mapping.expires_at,
            "click_count": mapping.click_count,
            "expired": mapping.is_expired(self.clock()),
        }
