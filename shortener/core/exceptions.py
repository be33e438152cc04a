"""
Custom Exceptions

This module defines the error taxonomy of the short-code lifecycle.

- ValidationError: the submitted URL is missing or empty (client error)
- CodeCollisionError: a candidate code is already stored (retried internally)
- CodeGenerationExhaustedError: every retry collided (client error)
- ShortCodeNotFoundError: the code never existed
- ShortCodeExpiredError: the code existed but its TTL has passed
- StorageError: the backing store is unavailable or an operation failed
"""

from typing import Optional


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class ValidationError(URLShortenerException):
    """Raised when the submitted URL is null or blank."""

    def __init__(self, reason: str = "URL must not be empty"):
        self.reason = reason
        super().__init__(reason)


class CodeCollisionError(URLShortenerException):
    """Raised by a store when a conditional put finds the code already taken."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' already exists")


class CodeGenerationExhaustedError(URLShortenerException):
    """Raised when no free short code was found within the attempt budget."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique short code after {attempts} attempts"
        )


class ShortCodeNotFoundError(URLShortenerException):
    """Raised when a short code is not found in the store."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class ShortCodeExpiredError(URLShortenerException):
    """Raised when a short code exists but is past its expiry."""

    def __init__(self, short_code: str, expires_at: int):
        self.short_code = short_code
        self.expires_at = expires_at
        super().__init__(f"Short code '{short_code}' has expired")


class StorageError(URLShortenerException):
    """Raised when store operations fail."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Storage error: {message}")
