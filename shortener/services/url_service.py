"""
URL Shortening Service

Creates new short-code mappings:
1. Normalize the request body (URL + TTL)
2. Generate a random candidate code
3. Store the mapping with a create-if-absent put
4. On a collision, generate a new code and try again, up to a fixed number
   of attempts

Design Decisions:
- No in-process locking: uniqueness rests on the store's conditional put, so
  two instances racing on the same code cannot both win
- Every failure path leaves the store untouched; a short URL is only returned
  after the mapping is durably written
- Collaborators and configuration are passed in; nothing is read from the
  environment here
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from shortener.core.clock import Clock, system_clock
from shortener.core.exceptions import CodeCollisionError, CodeGenerationExhaustedError
from shortener.core.setting import Settings
from shortener.db.models import ShortUrlMapping
from shortener.db.store import MappingStore
from shortener.services.code_generator import CodeGenerator
from shortener.services.url_normalizer import UrlNormalizer

logger = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60


@dataclass(frozen=True)
class ShortenResult:
    short_url: str
    mapping: ShortUrlMapping


def build_short_url(base_url: str, short_code: str) -> str:
    """Join the configured base domain and a code without doubling slashes."""
    return f"{base_url.rstrip('/')}/{short_code}"


class ShortenService:
    """
    Core business logic for creating short URLs.

    Separated from the API layer for testability: the store, generator,
    normalizer and clock can all be replaced in tests.
    """

    def __init__(
        self,
        store: MappingStore,
        settings: Settings,
        generator: Optional[CodeGenerator] = None,
        normalizer: Optional[UrlNormalizer] = None,
        clock: Clock = system_clock,
    ):
        """
        Args:
            store: Mapping store to persist into
            settings: Application settings (base URL, code length, retry cap, TTL bounds)
            generator: Code generator (built from settings when omitted)
            normalizer: URL normalizer (built from settings when omitted)
            clock: Returns the current Unix time in seconds
        """
        self.store = store
        self.base_url = settings.BASE_URL
        self.max_attempts = settings.MAX_CODE_ATTEMPTS
        self.generator = generator or CodeGenerator(
            length=settings.SHORT_CODE_LENGTH,
            alphabet=settings.SHORT_CODE_ALPHABET,
        )
        self.normalizer = normalizer or UrlNormalizer.from_settings(settings)
        self.clock = clock

    async def shorten(self, raw_body: Any) -> ShortenResult:
        """
        Create a short URL for the URL in a raw request body.

        Args:
            raw_body: JSON object/dict with "url" and optional "ttl", or a bare URL string

        Returns:
            ShortenResult with the full short URL and the stored mapping

        Raises:
            ValidationError: If the URL is missing or blank
            CodeGenerationExhaustedError: If every attempt collided
            StorageError: If the store fails
        """
        request = self.normalizer.normalize(raw_body)

        for attempt in range(1, self.max_attempts + 1):
            created_at = self.clock()
            mapping = ShortUrlMapping(
                short_code=self.generator.generate(),
                original_url=request.original_url,
                created_at=created_at,
                expires_at=created_at + request.ttl_minutes * SECONDS_PER_MINUTE,
                click_count=0,
            )

            try:
                await self.store.put(mapping, if_absent=True)
            except CodeCollisionError:
                logger.warning(
                    f"Short code collision on {mapping.short_code} "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                continue

            logger.info(
                f"Created short code {mapping.short_code} "
                f"expiring at {mapping.expires_at} (ttl={request.ttl_minutes}m)"
            )
            return ShortenResult(
                short_url=build_short_url(self.base_url, mapping.short_code),
                mapping=mapping,
            )

        logger.error(f"Gave up generating a short code after {self.max_attempts} attempts")
        raise CodeGenerationExhaustedError(self.max_attempts)
