"""
Short Code Generator

Random fixed-length codes over the base62 alphabet [a-zA-Z0-9].

Why random instead of counter-based?
- Codes must not be predictable, otherwise live mappings can be enumerated
- No coordination between instances is needed; collisions are caught by the
  store's conditional put and retried by the shortening service

62^8 is about 2.2e14 combinations, so retries are rare in practice.
"""

import secrets
import string

BASE62_ALPHABET = string.ascii_letters + string.digits
DEFAULT_CODE_LENGTH = 8


class CodeGenerator:
    """
    Generates short codes from a cryptographically secure source.

    Holds no mutable state; the secrets module is safe to share between
    threads and tasks.
    """

    def __init__(self, length: int = DEFAULT_CODE_LENGTH, alphabet: str = BASE62_ALPHABET):
        if length < 1:
            raise ValueError("Code length must be positive")
        if len(set(alphabet)) != len(alphabet) or len(alphabet) < 2:
            raise ValueError("Alphabet needs at least two distinct characters")
        self.length = length
        self.alphabet = alphabet

    def generate(self) -> str:
        """Return a new code of exactly `length` characters."""
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))
