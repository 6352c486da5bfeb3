"""Authentication and tenant authorization."""

from dealhub.infrastructure.auth.code_delivery import CodeSender, LoggingCodeSender
from dealhub.infrastructure.auth.exceptions import (
    AuthorizationFailure,
    Forbidden,
    IdentifierTaken,
    InvalidCode,
    InvalidCredentials,
    InvalidRefreshToken,
    TooManyAttempts,
    Unauthorized,
    WeakPasswordError,
)
from dealhub.infrastructure.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
)
from dealhub.infrastructure.auth.password_hasher import (
    get_dummy_password_hash,
    hash_password,
    needs_rehash,
    verify_password,
)
from dealhub.infrastructure.auth.tenant_authorizer import TenantAuthorizer, extract_bearer_token
from dealhub.infrastructure.auth.token_types import AccessClaims

__all__ = [
    "AccessClaims",
    "AuthorizationFailure",
    "CodeSender",
    "Forbidden",
    "IdentifierTaken",
    "InvalidCode",
    "InvalidCredentials",
    "InvalidRefreshToken",
    "InvalidTokenError",
    "JWTError",
    "JWTService",
    "LoggingCodeSender",
    "TenantAuthorizer",
    "TokenExpiredError",
    "TooManyAttempts",
    "Unauthorized",
    "WeakPasswordError",
    "extract_bearer_token",
    "get_dummy_password_hash",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
