"""JWT token service.

Provides creation and validation of signed access tokens. Refresh tokens
are opaque random values and never go through this service.
"""

import secrets
from datetime import datetime, timedelta

import jwt
from pydantic import ValidationError

from dealhub.core.config import Settings, get_settings
from dealhub.infrastructure.auth.token_types import AccessClaims


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTService:
    """Service for creating and validating access tokens."""

    REQUIRED_CLAIMS = ["exp", "iat", "iss", "sub", "jti"]

    def __init__(
        self,
        secret_key: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the JWT service.

        Args:
            secret_key: Secret key for signing tokens. If not provided,
                        uses the configured secret key from settings.
            settings: Settings supplying issuer, algorithm and TTL.
        """
        self._settings = settings or get_settings()
        self._secret_key = secret_key

    @property
    def secret_key(self) -> str:
        """Get the secret key for signing tokens."""
        return self._secret_key or self._settings.secret_key

    @property
    def issuer(self) -> str:
        return self._settings.jwt_issuer

    @property
    def algorithm(self) -> str:
        return self._settings.jwt_algorithm

    def create_access_token(
        self,
        user_id: int,
        identifier: str,
        issued_at: datetime,
        role: str = "user",
        expires_delta: timedelta | None = None,
    ) -> tuple[str, AccessClaims]:
        """Create an access token.

        Args:
            user_id: The user's unique identifier.
            identifier: Email or mobile the user logged in with.
            issued_at: Issue time (timezone-aware).
            role: The user's platform role.
            expires_delta: Custom lifetime. Defaults to the configured TTL.

        Returns:
            Tuple of (encoded JWT, the claims it carries).
        """
        if expires_delta is None:
            expires_delta = timedelta(seconds=self._settings.access_token_ttl_seconds)

        claims = AccessClaims(
            iss=self.issuer,
            sub=str(user_id),
            role=role,
            identifier=identifier,
            iat=int(issued_at.timestamp()),
            exp=int((issued_at + expires_delta).timestamp()),
            jti=secrets.token_hex(16),
        )
        token = jwt.encode(claims.model_dump(), self.secret_key, algorithm=self.algorithm)
        return token, claims

    def decode_access_token(self, token: str) -> AccessClaims:
        """Decode and validate an access token.

        Args:
            token: The encoded JWT token.

        Returns:
            The validated claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or not an access token.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": self.REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

        if payload.get("type") != "access":
            raise InvalidTokenError("Not an access token")
        try:
            return AccessClaims.model_validate(payload)
        except ValidationError as e:
            raise InvalidTokenError("Unexpected token claims") from e
