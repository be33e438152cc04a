"""
URL Normalizer

Turns a raw shorten request body into a destination URL and a TTL.

Accepted body shapes (resolved once into a small tagged union):
- StructuredBody: a JSON object {"url": ..., "ttl": ...}; ttl is optional
- BareBody: anything else, taken as the URL itself (a JSON string, or plain
  text with surrounding quotes stripped)

Rules:
- A URL without http:// or https:// gets https:// prepended
- A null or blank URL is the only hard failure (ValidationError)
- A TTL that cannot be read as whole minutes is logged and replaced by the
  default; it never fails the request
- The effective TTL is clamped to [min_ttl, max_ttl]
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from shortener.core.exceptions import ValidationError
from shortener.core.setting import Settings

logger = logging.getLogger(__name__)

ALLOWED_SCHEME_PREFIXES = ("http://", "https://")
DEFAULT_SCHEME_PREFIX = "https://"


@dataclass(frozen=True)
class StructuredBody:
    url: Any
    ttl: Any = None


@dataclass(frozen=True)
class BareBody:
    text: Optional[str]


RequestBody = Union[StructuredBody, BareBody]


@dataclass(frozen=True)
class NormalizedRequest:
    original_url: str
    ttl_minutes: int


def _lenient_int(literal: str) -> Union[int, str]:
    # Literals int() refuses (over the digit limit) stay text for parse_ttl to reject.
    try:
        return int(literal)
    except ValueError:
        return literal


def parse_body(raw_body: Union[bytes, str, dict, None]) -> RequestBody:
    """
    Classify a raw request body as structured or bare.

    Raises:
        ValidationError: If a bytes body is not valid UTF-8
    """
    if isinstance(raw_body, dict):
        return StructuredBody(url=raw_body.get("url"), ttl=raw_body.get("ttl"))
    if raw_body is None:
        return BareBody(text=None)
    if isinstance(raw_body, (bytes, bytearray)):
        try:
            raw_body = bytes(raw_body).decode("utf-8")
        except UnicodeDecodeError:
            raise ValidationError("Request body must be UTF-8 encoded")

    try:
        decoded = json.loads(raw_body, parse_int=_lenient_int)
    except ValueError:
        decoded = raw_body

    if isinstance(decoded, dict):
        return StructuredBody(url=decoded.get("url"), ttl=decoded.get("ttl"))
    if decoded is None:
        return BareBody(text=None)
    if isinstance(decoded, str):
        return BareBody(text=decoded.strip().strip('"'))
    # numbers, lists, ...: fall back to the raw text
    return BareBody(text=raw_body.strip().strip('"'))


def parse_ttl(value: Any) -> Optional[int]:
    """
    Read a TTL value as whole minutes.

    Returns:
        The parsed number of minutes (unclamped), or None if it is unreadable
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class UrlNormalizer:
    """Validates and canonicalizes shorten requests."""

    def __init__(self, default_ttl: int = 1, min_ttl: int = 1, max_ttl: int = 525600):
        self.default_ttl = default_ttl
        self.min_ttl = min_ttl
        self.max_ttl = max_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "UrlNormalizer":
        return cls(
            default_ttl=settings.DEFAULT_TTL_MINUTES,
            min_ttl=settings.MIN_TTL_MINUTES,
            max_ttl=settings.MAX_TTL_MINUTES,
        )

    def normalize(self, raw_body: Union[bytes, str, dict, None]) -> NormalizedRequest:
        """
        Normalize a raw request body.

        Raises:
            ValidationError: If the URL is missing or blank
        """
        body = parse_body(raw_body)
        if isinstance(body, StructuredBody):
            url, ttl_minutes = body.url, self.resolve_ttl(body.ttl)
        else:
            url, ttl_minutes = body.text, self.default_ttl

        return NormalizedRequest(
            original_url=self.normalize_url(url),
            ttl_minutes=ttl_minutes,
        )

    def normalize_url(self, url: Any) -> str:
        if url is None or not isinstance(url, str):
            raise ValidationError("URL is required")

        url = url.strip()
        if not url:
            raise ValidationError("URL must not be empty")

        if not url.lower().startswith(ALLOWED_SCHEME_PREFIXES):
            url = DEFAULT_SCHEME_PREFIX + url
        return url

    def resolve_ttl(self, raw_ttl: Any) -> int:
        """Effective TTL in minutes: parsed, defaulted and clamped."""
        if raw_ttl is None:
            return self.default_ttl

        ttl = parse_ttl(raw_ttl)
        if ttl is None:
            logger.warning(
                f"Invalid TTL {raw_ttl!r}, using default of {self.default_ttl} minute(s)"
            )
            return self.default_ttl

        return max(self.min_ttl, min(ttl, self.max_ttl))
