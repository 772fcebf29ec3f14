"""
Password hashing for stored credentials.

bcrypt salts every hash and compares in constant time.
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)


def _truncate_password(password: str) -> bytes:
    """Truncate password to 72 bytes (bcrypt limit)."""
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]
    return password_bytes


def hash_password(password: str) -> str:
    """Hash a password with a fresh salt."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(_truncate_password(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a stored hash.

    Returns:
        False for a mismatch or an unreadable hash
    """
    hashed_bytes = hashed_password.encode("utf-8") if isinstance(hashed_password, str) else hashed_password
    try:
        return bcrypt.checkpw(_truncate_password(plain_password), hashed_bytes)
    except ValueError as e:
        logger.error("Stored password hash is malformed: %s", e)
        return False
