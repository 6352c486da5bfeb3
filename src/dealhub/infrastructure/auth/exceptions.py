"""Authentication and authorization failures.

Each failure carries one :class:`AuthErrorKind`; the HTTP layer maps the
kind to a response and never looks at anything else.
"""

from dealhub.domain.entities import AuthErrorKind
from dealhub.domain.services import PasswordValidationError


class AuthorizationFailure(Exception):
    """Base class for failures raised by the tenant authorizer."""

    kind: AuthErrorKind = AuthErrorKind.UNAUTHORIZED

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.kind.value)


class InvalidCredentials(AuthorizationFailure):
    """Unknown identifier or wrong password."""

    kind = AuthErrorKind.INVALID_CREDENTIALS


class TooManyAttempts(AuthorizationFailure):
    """Login throttle exceeded for an identifier."""

    kind = AuthErrorKind.TOO_MANY_ATTEMPTS

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class Unauthorized(AuthorizationFailure):
    """Missing, malformed, expired or revoked bearer token."""

    kind = AuthErrorKind.UNAUTHORIZED


class InvalidRefreshToken(AuthorizationFailure):
    """Refresh token absent, expired or already revoked."""

    kind = AuthErrorKind.INVALID_REFRESH_TOKEN


class Forbidden(AuthorizationFailure):
    """Authenticated, but the role does not allow the operation."""

    kind = AuthErrorKind.FORBIDDEN


class InvalidCode(AuthorizationFailure):
    """One-time code unknown, expired, already used or for another purpose."""

    kind = AuthErrorKind.INVALID_CODE


class IdentifierTaken(AuthorizationFailure):
    """Registration with an email or mobile number that already has an account."""

    kind = AuthErrorKind.IDENTIFIER_TAKEN


class WeakPasswordError(ValueError):
    """New password rejected by the password policy."""

    def __init__(self, errors: list[PasswordValidationError]) -> None:
        super().__init__("; ".join(error.message for error in errors))
        self.errors = errors
