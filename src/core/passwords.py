"""Salted password hashing for user records."""

import base64
import hashlib
import secrets

import bcrypt

from src.core.config import constants


def _prehash(password: str) -> bytes:
    """SHA-256 the password first so bcrypt's 72-byte input limit never truncates it."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    """Hash a password with bcrypt (random salt, cost from constants)."""
    salt = bcrypt.gensalt(rounds=constants.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_prehash(password), salt).decode("ascii")


def is_hashed(stored: str) -> bool:
    """Return True if the stored secret is a bcrypt hash."""
    return stored.startswith(constants.BCRYPT_HASH_PREFIXES)


def verify_password(stored: str | None, candidate: str) -> bool:
    """Check a candidate password against a stored secret.

    Records created before hashing was introduced hold the plain secret; those
    are still accepted, compared in constant time.
    """
    if not stored:
        return False

    if not is_hashed(stored):
        return secrets.compare_digest(stored.encode("utf-8"), candidate.encode("utf-8"))

    try:
        return bcrypt.checkpw(_prehash(candidate), stored.encode("utf-8"))
    except ValueError:
        return False
