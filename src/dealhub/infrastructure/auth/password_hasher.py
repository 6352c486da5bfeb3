"""Password hashing utility using Argon2.

Provides password hashing and verification using Argon2id with the cost
parameters from settings. Verification is constant-time (library-provided).
"""

import secrets
from functools import lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from dealhub.core.config import get_settings


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Get the Argon2id hasher configured from settings."""
    settings = get_settings()
    return PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


@lru_cache
def get_dummy_password_hash() -> str:
    """Hash of a random secret, verified against when a user is unknown.

    Uses the live cost parameters so that a login for an unknown identifier
    takes as long as one with a wrong password.
    """
    return get_password_hasher().hash(secrets.token_urlsafe(16))


def hash_password(password: str) -> str:
    """Hash a password using Argon2id.

    Args:
        password: The plaintext password to hash.

    Returns:
        The hashed password string.

    Example:
        >>> hashed = hash_password("SecureP@ss123!")
        >>> hashed.startswith("$argon2id$")
        True
    """
    return get_password_hasher().hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a hash.

    Args:
        password: The plaintext password to verify.
        hashed: The hashed password to verify against.

    Returns:
        True if the password matches, False otherwise (including when the
        stored hash is corrupt).
    """
    try:
        return get_password_hasher().verify(hashed, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hashed: str) -> bool:
    """Check if a password hash was made with outdated parameters.

    This should be called after successful password verification.
    """
    return get_password_hasher().check_needs_rehash(hashed)
