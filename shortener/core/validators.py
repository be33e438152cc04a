"""
Input Validators

Path parameters reach the store as lookup keys, so short codes are checked
against the configured code alphabet before any lookup happens.
"""

from typing import Optional

from shortener.core.setting import BASE62_ALPHABET

# Generated codes are 8 characters; anything much longer is not ours.
MAX_SHORT_CODE_LENGTH = 32


def sanitize_short_code(short_code: str, alphabet: str = BASE62_ALPHABET) -> Optional[str]:
    """
    Sanitize and validate short code format.

    Args:
        short_code: The short code taken from the request path
        alphabet: Characters generated codes are drawn from

    Returns:
        The stripped short code if it is well-formed, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    short_code = short_code.strip()

    if not short_code or len(short_code) > MAX_SHORT_CODE_LENGTH:
        return None

    if not set(short_code) <= set(alphabet):
        return None

    return short_code
