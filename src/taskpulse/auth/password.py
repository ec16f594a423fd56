"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor comes from TASKPULSE_BCRYPT_ROUNDS (12 in production,
lowered in tests to keep them fast).
"""

from functools import lru_cache

import bcrypt

from taskpulse.config import settings


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("taskpulse-dummy-password")


def burn_password_check(password: str) -> None:
    """Run a throwaway bcrypt check for logins against unknown emails.

    Keeps the unknown-email path as slow as the wrong-password path.
    """
    verify_password(password, _dummy_hash())
