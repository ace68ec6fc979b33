"""
Password Utilities

Salted PBKDF2-SHA256 hashing for stored credentials.
"""

import hashlib
import secrets
from typing import Optional, Tuple

ITERATIONS = 100000
SEPARATOR = "$"


def _derive(password: str, salt: str) -> str:
    key = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode(),
        salt.encode(),
        ITERATIONS,
        dklen=32
    )
    return key.hex()


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """
    Hash a password for storage.

    Args:
        password: The password to hash
        salt: Optional salt to use (a new one is generated when omitted)

    Returns:
        ``salt$hash`` suitable for storing on the user document
    """
    if salt is None:
        salt = secrets.token_hex(16)
    return f"{salt}{SEPARATOR}{_derive(password, salt)}"


def split_password_hash(stored: str) -> Tuple[str, str]:
    """Split a stored ``salt$hash`` value into its parts."""
    salt, _, hashed = stored.partition(SEPARATOR)
    return salt, hashed


def verify_password(password: str, stored: str) -> bool:
    """
    Verify that a password matches a stored hash.

    An empty or malformed stored value never matches.
    """
    if not stored or SEPARATOR not in stored:
        return False
    salt, hashed = split_password_hash(stored)
    return secrets.compare_digest(_derive(password, salt), hashed)
