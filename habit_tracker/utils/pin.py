"""PIN hashing utilities for local profiles."""
import hashlib
import hmac
from typing import Optional

from habit_tracker.config import settings


def hash_pin(pin: str, salt: Optional[str] = None) -> str:
    """
    Hash a PIN as the hex SHA-256 digest of a static salt followed by the PIN.

    The salt is shared by all profiles, so equal PINs hash equally.

    Args:
        pin: Plain PIN
        salt: Salt override (defaults to the configured pin_salt)

    Returns:
        64-character hex digest

    Example:
        >>> len(hash_pin("1234"))
        64
        >>> hash_pin("1234") == hash_pin("1234")
        True
    """
    salt = settings.pin_salt if salt is None else salt
    return hashlib.sha256((salt + pin).encode("utf-8")).hexdigest()


def verify_pin(plain_pin: str, pin_hash: str, salt: Optional[str] = None) -> bool:
    """
    Verify a PIN against a stored hash.

    Example:
        >>> verify_pin("1234", hash_pin("1234"))
        True
        >>> verify_pin("0000", hash_pin("1234"))
        False
    """
    return hmac.compare_digest(hash_pin(plain_pin, salt), pin_hash)
