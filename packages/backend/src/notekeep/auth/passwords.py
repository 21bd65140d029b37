"""Password hashing utilities.

Learn: Uses bcrypt for password hashing. bcrypt is an adaptive KDF: it
salts automatically and the work factor (rounds) can be raised as
hardware gets faster. Passwords are truncated to 72 bytes, bcrypt's
input limit.
"""

from typing import Optional

import bcrypt

from notekeep.config import settings


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt. Produces a "$2b$..." string."""
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False
