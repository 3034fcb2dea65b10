"""
tests/test_passwords.py -- Unit tests for bcrypt hashing helpers.
"""

from __future__ import annotations

from auth.passwords import burn_verification, hash_password, verify_password


def test_hash_is_not_plaintext():
    hashed = hash_password("pw1")
    assert hashed != "pw1"
    assert hashed.startswith("$2")


def test_verify_matches_only_the_hashed_password():
    hashed = hash_password("pw1")
    assert verify_password("pw1", hashed) is True
    assert verify_password("pw2", hashed) is False


def test_same_password_hashes_differently():
    """Each hash carries its own salt."""
    assert hash_password("pw1") != hash_password("pw1")


def test_malformed_hash_is_a_mismatch():
    assert verify_password("pw1", "not-a-bcrypt-hash") is False
    assert verify_password("pw1", "") is False


def test_long_password_is_accepted():
    long_pw = "x" * 100
    hashed = hash_password(long_pw)
    assert verify_password(long_pw, hashed) is True


def test_burn_verification_returns_nothing():
    assert burn_verification("anything") is None
