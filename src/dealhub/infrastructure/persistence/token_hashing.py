"""Hashing of bearer values before they touch the store."""

import hashlib


def hash_token(token: str) -> str:
    """Hash a token using SHA-256.

    Args:
        token: The raw token string.

    Returns:
        SHA-256 hex digest of the token.
    """
    return hashlib.sha256(token.encode()).hexdigest()
