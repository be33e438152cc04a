"""
Rate Limiting Configuration

IP-based rate limits for the public endpoints, using slowapi.
Limits can be switched off with RATE_LIMIT_ENABLED (tests, trusted deployments).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from shortener.core.setting import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

# Format: "count/period" (e.g., "10/minute" means 10 requests per minute)
RATE_LIMITS = {
    "shorten": "10/minute",
    "redirect": "100/minute",
    "stats": "30/minute",
}
