"""Authentication and tenant authorization entities.

Defines the error taxonomy surfaced by the authorizer, the per-company
roles, the outcome of a tenant mutation check and the token pair returned
by login and refresh.
"""

from dataclasses import dataclass
from enum import Enum


class AuthErrorKind(str, Enum):
    """Kinds of authentication/authorization failure.

    The HTTP boundary maps each kind to exactly one response; no other
    detail about the failure is surfaced to the client.
    """

    INVALID_CREDENTIALS = "invalid_credentials"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    UNAUTHORIZED = "unauthorized"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"
    FORBIDDEN = "forbidden"
    INVALID_CODE = "invalid_code"
    IDENTIFIER_TAKEN = "identifier_taken"


class TenantRole(str, Enum):
    """Role of a user inside one company."""

    OWNER = "Owner"
    MANAGER = "Manager"
    STAFF = "Staff"


MUTATING_ROLES = frozenset({TenantRole.OWNER, TenantRole.MANAGER})


class CodePurpose(str, Enum):
    """What a one-time code authorizes."""

    ACTIVATION = "activation"
    PASSWORD_RESET = "password_reset"


class TenantDecision(str, Enum):
    """Outcome of a tenant-scoped mutation check."""

    ALLOW = "allow"
    FORBIDDEN = "forbidden"

    @property
    def allowed(self) -> bool:
        return self is TenantDecision.ALLOW


@dataclass(frozen=True)
class TokenPair:
    """Credentials issued by a successful login or refresh.

    Attributes:
        access_token: Signed, short-lived bearer token.
        refresh_token: Opaque, single-use token for minting the next pair.
        expires_in: Access token lifetime in seconds.
        user_id: Subject the pair was issued to.
    """

    access_token: str
    refresh_token: str
    expires_in: int
    user_id: int
