"""
Redirect Service

Resolves short codes to their destination and records the click.

A mapping is Live while now <= expires_at and Expired afterwards; a mapping
without expires_at never expires. Expiry is enforced here at read time,
whether or not the row is still stored.

The click counter is secondary: a failed increment is logged and the redirect
still goes through.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shortener.core.clock import Clock, system_clock
from shortener.core.exceptions import ShortCodeExpiredError, ShortCodeNotFoundError, StorageError
from shortener.db.models import CLICK_COUNT_FIELD
from shortener.db.store import CounterUpdate, MappingStore

logger = logging.getLogger(__name__)


class RedirectStatus(str, Enum):
    REDIRECT = "redirect"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    ERROR = "error"


@dataclass(frozen=True)
class RedirectResult:
    status: RedirectStatus
    target: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is RedirectStatus.REDIRECT


class ResolveService:
    """Service for handling URL redirections."""

    def __init__(self, store: MappingStore, clock: Clock = system_clock):
        self.store = store
        self.clock = clock

    async def resolve(self, short_code: str) -> RedirectResult:
        """
        Resolve a short code to its redirect target.

        Raises:
            ShortCodeNotFoundError: If the code was never created
            ShortCodeExpiredError: If the code is past its expiry
            StorageError: If the lookup itself fails
        """
        mapping = await self.store.get(short_code)

        if mapping.is_expired(self.clock()):
            raise ShortCodeExpiredError(short_code, mapping.expires_at)

        self._report_counter_update(
            await self.store.increment_counter(short_code, CLICK_COUNT_FIELD, 1)
        )

        return RedirectResult(status=RedirectStatus.REDIRECT, target=mapping.original_url)

    async def try_resolve(self, short_code: str) -> RedirectResult:
        """Like resolve(), but reports failures as a status instead of raising."""
        try:
            return await self.resolve(short_code)
        except ShortCodeNotFoundError:
            return RedirectResult(status=RedirectStatus.NOT_FOUND)
        except ShortCodeExpiredError:
            return RedirectResult(status=RedirectStatus.EXPIRED)
        except StorageError as e:
            logger.error(f"Lookup failed for {short_code}: {e}")
            return RedirectResult(status=RedirectStatus.ERROR)

    @staticmethod
    def _report_counter_update(update: CounterUpdate) -> None:
        if not update.applied:
            logger.error(
                f"Failed to increment click count for {update.short_code}: {update.error}"
            )
