"""
auth/passwords.py -- One-way password hashing and verification.

bcrypt is used directly (no passlib wrapper). The cost factor makes offline
brute force of low-entropy secrets expensive, and every hash carries its own
salt, so two users with the same password get different hashes.

_DUMMY_HASH supports timing equalization in SessionManager.login(): bcrypt
runs even for unknown emails so response time does not reveal whether an
account exists.
"""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes of its input.
_BCRYPT_MAX_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Input is truncated to 72 bytes before hashing. bcrypt 4.x raises on longer
    input instead of truncating silently, and the API layer caps passwords at
    a length that keeps typical input under that limit anyway.
    """
    return bcrypt.hashpw(plain.encode("utf-8")[:_BCRYPT_MAX_BYTES], bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed hash is a mismatch, not an error.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8")[:_BCRYPT_MAX_BYTES], hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Computed once at import so the first login is not measurably slower.
_DUMMY_HASH: str = hash_password("jobhunter_timing_dummy")


def burn_verification(plain: str) -> None:
    """Spend one bcrypt comparison's worth of time and discard the result."""
    verify_password(plain, _DUMMY_HASH)
