"""Tenant authorizer.

Authenticates users, manages the access/refresh token lifecycle and decides
whether a user may mutate resources of a company. Self-registration and
password resets are confirmed with single-use codes sent out of band.

Access tokens are signed JWTs that must also have a live server-side record,
so logout and session revocation take effect immediately. Refresh tokens are
opaque single-use values; each use rotates them and links the spent row to
its replacement.
"""

import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dealhub.core.config import Settings, get_settings
from dealhub.core.logging import get_logger
from dealhub.domain.entities import (
    MUTATING_ROLES,
    CodePurpose,
    TenantDecision,
    TenantRole,
    TokenPair,
)
from dealhub.domain.services import PasswordValidator, default_password_validator
from dealhub.infrastructure.auth.code_delivery import CodeSender, LoggingCodeSender
from dealhub.infrastructure.auth.exceptions import (
    Forbidden,
    IdentifierTaken,
    InvalidCode,
    InvalidCredentials,
    InvalidRefreshToken,
    TooManyAttempts,
    Unauthorized,
    WeakPasswordError,
)
from dealhub.infrastructure.auth.jwt_service import JWTError, JWTService
from dealhub.infrastructure.auth.login_throttle import LoginThrottle
from dealhub.infrastructure.auth.password_hasher import (
    get_dummy_password_hash,
    hash_password,
    needs_rehash,
    verify_password,
)
from dealhub.infrastructure.auth.token_types import AccessClaims
from dealhub.infrastructure.persistence.models import RefreshTokenModel, UserModel
from dealhub.infrastructure.persistence.repositories import (
    AccessTokenRepository,
    CompanyRepository,
    OneTimeCodeRepository,
    RateLimitRepository,
    RefreshTokenRepository,
    UserRepository,
)

logger = get_logger(__name__)

REFRESH_TOKEN_BYTES = 48
ONE_TIME_CODE_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def extract_bearer_token(value: str | None) -> str | None:
    """Get the token out of a raw token or an ``Authorization`` header value.

    Returns:
        The token, or None if there is nothing usable.
    """
    if not value or not isinstance(value, str):
        return None
    value = value.strip()
    scheme, _, rest = value.partition(" ")
    if rest and scheme.lower() == "bearer":
        value = rest.strip()
    # Issued tokens are ASCII; anything else cannot match a stored hash
    if not value or " " in value or not value.isascii():
        return None
    return value


class TenantAuthorizer:
    """Authentication, token lifecycle and tenant RBAC over one store session.

    Each public operation is its own unit of work and commits the session
    before returning.

    Args:
        session: Store handle used for every read and write.
        settings: Token TTLs, throttle budget and signing configuration.
        jwt_service: Access token signer. Built from ``settings`` if omitted.
        clock: Source of the current, timezone-aware time.
        password_validator: Policy applied to new passwords.
        code_sender: Delivers activation and password reset codes.
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings | None = None,
        jwt_service: JWTService | None = None,
        clock: Callable[[], datetime] | None = None,
        password_validator: PasswordValidator | None = None,
        code_sender: CodeSender | None = None,
    ) -> None:
        self._session = session
        self._settings = settings or get_settings()
        self._jwt = jwt_service or JWTService(settings=self._settings)
        self._clock = clock or _utcnow
        self._password_validator = password_validator or default_password_validator
        self._code_sender = code_sender or LoggingCodeSender(
            reveal_codes=self._settings.is_development
        )

        self._users = UserRepository(session)
        self._companies = CompanyRepository(session)
        self._access_tokens = AccessTokenRepository(session)
        self._refresh_tokens = RefreshTokenRepository(session)
        self._codes = OneTimeCodeRepository(session)
        self._throttle = LoginThrottle(
            RateLimitRepository(session),
            max_attempts=self._settings.login_max_attempts,
            window_seconds=self._settings.login_attempt_window_seconds,
        )
        self._reset_throttle = LoginThrottle(
            RateLimitRepository(session),
            max_attempts=self._settings.password_reset_max_requests,
            window_seconds=self._settings.password_reset_window_seconds,
            key_prefix="reset:",
        )

    async def authorize(self, identifier: str, password: str) -> TokenPair:
        """Log a user in.

        Args:
            identifier: Email address or mobile number.
            password: Plaintext password.

        Returns:
            A fresh access/refresh token pair.

        Raises:
            TooManyAttempts: Too many attempts for this identifier in the window.
            InvalidCredentials: Unknown identifier, inactive user or wrong password.
        """
        now = self._clock()
        identifier = (identifier or "").strip()

        try:
            await self._throttle.register_attempt(identifier, now)
        except TooManyAttempts:
            await self._session.commit()
            raise

        user = await self._users.get_by_identifier(identifier) if identifier else None
        if user is None or not user.is_active:
            verify_password(password, get_dummy_password_hash())
            await self._session.commit()
            logger.info("Login failed", reason="unknown_or_inactive_user")
            raise InvalidCredentials()

        if not verify_password(password, user.password_hash):
            await self._session.commit()
            logger.info("Login failed", user_id=user.id, reason="wrong_password")
            raise InvalidCredentials()

        if needs_rehash(user.password_hash):
            await self._users.update_password_hash(user.id, hash_password(password))
            logger.info("Password hash upgraded", user_id=user.id)

        pair, _ = await self._issue_pair(user, now)
        await self._throttle.reset(identifier)
        await self._users.update_last_login(user.id, now)
        await self._session.commit()

        logger.info("User logged in", user_id=user.id)
        return pair

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        The presented token is revoked and linked to its replacement. Of two
        concurrent refreshes with the same token at most one succeeds.

        Raises:
            InvalidRefreshToken: Token absent, expired, revoked or already used.
        """
        if not isinstance(refresh_token, str) or not refresh_token.isascii():
            raise InvalidRefreshToken()
        if not refresh_token:
            raise InvalidRefreshToken()

        now = self._clock()
        stored = await self._refresh_tokens.get_active(refresh_token, now)
        if stored is None:
            logger.info("Refresh rejected", reason="absent_expired_or_revoked")
            raise InvalidRefreshToken()

        user = await self._users.get_by_id(stored.user_id)
        if user is None or not user.is_active:
            logger.info("Refresh rejected", user_id=stored.user_id, reason="inactive_user")
            raise InvalidRefreshToken()

        user_id = user.id
        pair, replacement = await self._issue_pair(user, now)
        if not await self._refresh_tokens.revoke_if_active(stored.id, replaced_by_id=replacement.id):
            await self._session.rollback()
            logger.warning("Refresh token reuse detected", user_id=user_id)
            raise InvalidRefreshToken()

        await self._session.commit()
        logger.info("Tokens refreshed", user_id=user_id)
        return pair

    async def authorize_request(self, bearer: str | None) -> AccessClaims:
        """Authenticate a request.

        Args:
            bearer: Raw access token or ``Authorization`` header value.

        Returns:
            The claims of the token.

        Raises:
            Unauthorized: Token missing, malformed, expired, or logged out.
        """
        token = extract_bearer_token(bearer)
        if token is None:
            raise Unauthorized()

        try:
            claims = self._jwt.decode_access_token(token)
        except JWTError as e:
            logger.debug("Bearer token rejected", reason=str(e))
            raise Unauthorized() from None

        if not await self._access_tokens.is_active(token, self._clock()):
            logger.debug("Bearer token rejected", user_id=claims.user_id, reason="revoked")
            raise Unauthorized()
        return claims

    async def logout(self, bearer: str | None) -> None:
        """Revoke an access token. Unknown or malformed tokens are ignored."""
        token = extract_bearer_token(bearer)
        if token is None:
            return
        deleted = await self._access_tokens.delete_by_token(token)
        await self._session.commit()
        if deleted:
            logger.info("Access token revoked")

    async def get_tenant_role(self, user_id: int, company_id: int) -> TenantRole | None:
        """Current role of a user in a company, looked up fresh."""
        return await self._companies.get_user_role(user_id, company_id)

    async def authorize_tenant_mutation(self, user_id: int, company_id: int) -> TenantDecision:
        """Decide whether a user may mutate resources of a company.

        The role is read from the store on every call.
        """
        role = await self.get_tenant_role(user_id, company_id)
        if role in MUTATING_ROLES:
            return TenantDecision.ALLOW
        logger.info(
            "Tenant mutation denied",
            user_id=user_id,
            company_id=company_id,
            role=role.value if role else None,
        )
        return TenantDecision.FORBIDDEN

    async def require_tenant_mutation(self, user_id: int, company_id: int) -> None:
        """Like :meth:`authorize_tenant_mutation` but raises on denial.

        Raises:
            Forbidden: The user is not an Owner or Manager of the company.
        """
        decision = await self.authorize_tenant_mutation(user_id, company_id)
        if not decision.allowed:
            raise Forbidden()

    async def revoke_all_sessions(self, user_id: int) -> int:
        """Revoke every refresh token and delete every access token of a user.

        Returns:
            Number of refresh tokens revoked.
        """
        revoked = await self._refresh_tokens.revoke_all_for_user(user_id)
        deleted = await self._access_tokens.delete_all_for_user(user_id)
        await self._session.commit()
        logger.info(
            "All sessions revoked",
            user_id=user_id,
            refresh_tokens=revoked,
            access_tokens=deleted,
        )
        return revoked

    async def change_password(
        self, user_id: int, current_password: str, new_password: str
    ) -> None:
        """Change a user's password and end all of their sessions.

        Raises:
            InvalidCredentials: Unknown user or wrong current password.
            WeakPasswordError: The new password fails the password policy.
        """
        user = await self._users.get_by_id(user_id)
        if user is None or not verify_password(current_password, user.password_hash):
            logger.info("Password change rejected", user_id=user_id)
            raise InvalidCredentials()

        errors = self._password_validator.validate(new_password)
        if errors:
            raise WeakPasswordError(errors)

        await self._users.update_password_hash(user_id, hash_password(new_password))
        logger.info("Password changed", user_id=user_id)
        await self.revoke_all_sessions(user_id)

    async def register(
        self,
        password: str,
        email: str | None = None,
        mobile: str | None = None,
        display_name: str | None = None,
    ) -> UserModel:
        """Create an account that stays inactive until it is activated.

        An activation code is issued and handed to the code sender.

        Raises:
            ValueError: Neither an email nor a mobile number was given.
            WeakPasswordError: The password fails the password policy.
            IdentifierTaken: The email or mobile number already has an account.
        """
        email = (email or "").strip() or None
        mobile = (mobile or "").strip() or None
        if email is None and mobile is None:
            raise ValueError("An email or a mobile number is required")

        errors = self._password_validator.validate(password)
        if errors:
            raise WeakPasswordError(errors)

        for identifier in (email, mobile):
            if identifier is not None and await self._users.get_by_identifier(identifier):
                logger.info("Registration rejected", reason="identifier_taken")
                raise IdentifierTaken()

        try:
            user = await self._users.create(
                UserModel(
                    email=email,
                    mobile=mobile,
                    display_name=display_name,
                    password_hash=hash_password(password),
                    is_active=False,
                )
            )
        except IntegrityError:
            # Registered concurrently under the same identifier
            await self._session.rollback()
            raise IdentifierTaken() from None

        await self._issue_code(
            user, CodePurpose.ACTIVATION, self._settings.activation_code_ttl_seconds
        )
        await self._session.commit()
        logger.info("User registered", user_id=user.id)
        return user

    async def activate_account(self, code: str) -> int:
        """Activate the account an activation code was issued for.

        Returns:
            The id of the activated user.

        Raises:
            InvalidCode: Code unknown, expired or already used.
        """
        user_id = await self._consume_code(code, CodePurpose.ACTIVATION)
        await self._users.activate(user_id)
        await self._session.commit()
        logger.info("User activated", user_id=user_id)
        return user_id

    async def request_password_reset(self, identifier: str) -> None:
        """Issue a password reset code for the account behind ``identifier``.

        Unknown and inactive accounts are silently ignored, so the outcome
        does not reveal whether an account exists.

        Raises:
            TooManyAttempts: Too many reset requests for this identifier.
        """
        now = self._clock()
        identifier = (identifier or "").strip()
        if not identifier:
            return

        try:
            await self._reset_throttle.register_attempt(identifier, now)
        except TooManyAttempts:
            await self._session.commit()
            raise

        user = await self._users.get_by_identifier(identifier)
        if user is None or not user.is_active:
            await self._session.commit()
            logger.info("Password reset not issued", reason="unknown_or_inactive_user")
            return

        await self._issue_code(
            user, CodePurpose.PASSWORD_RESET, self._settings.password_reset_code_ttl_seconds
        )
        await self._session.commit()
        logger.info("Password reset requested", user_id=user.id)

    async def confirm_password_reset(self, code: str, new_password: str) -> None:
        """Set a new password with a reset code and end every session.

        Raises:
            WeakPasswordError: The new password fails the password policy.
            InvalidCode: Code unknown, expired or already used.
        """
        errors = self._password_validator.validate(new_password)
        if errors:
            raise WeakPasswordError(errors)

        user_id = await self._consume_code(code, CodePurpose.PASSWORD_RESET)
        await self._users.update_password_hash(user_id, hash_password(new_password))
        logger.info("Password reset", user_id=user_id)
        await self.revoke_all_sessions(user_id)

    async def purge_expired(self) -> int:
        """Delete expired access tokens, refresh tokens and one-time codes.

        Returns:
            Number of rows deleted.
        """
        now = self._clock()
        removed = await self._access_tokens.delete_expired(now)
        removed += await self._refresh_tokens.delete_expired(now)
        removed += await self._codes.delete_expired(now)
        await self._session.commit()
        logger.info("Expired tokens purged", removed=removed)
        return removed

    async def _issue_pair(
        self, user: UserModel, now: datetime
    ) -> tuple[TokenPair, RefreshTokenModel]:
        access_ttl = timedelta(seconds=self._settings.access_token_ttl_seconds)
        refresh_ttl = timedelta(seconds=self._settings.refresh_token_ttl_seconds)

        access_token, claims = self._jwt.create_access_token(
            user_id=user.id,
            identifier=user.identifier,
            issued_at=now,
            role=user.user_type,
            expires_delta=access_ttl,
        )
        await self._access_tokens.create(
            access_token,
            jti=claims.jti,
            user_id=user.id,
            issued_at=now,
            expires_at=now + access_ttl,
        )

        refresh_token = secrets.token_urlsafe(REFRESH_TOKEN_BYTES)
        stored = await self._refresh_tokens.create(
            refresh_token,
            user_id=user.id,
            issued_at=now,
            expires_at=now + refresh_ttl,
        )
        pair = TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(access_ttl.total_seconds()),
            user_id=user.id,
        )
        return pair, stored

    async def _issue_code(self, user: UserModel, purpose: CodePurpose, ttl_seconds: int) -> None:
        now = self._clock()
        code = secrets.token_urlsafe(ONE_TIME_CODE_BYTES)
        await self._codes.create(
            code,
            user_id=user.id,
            purpose=purpose,
            issued_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
        await self._code_sender.send(user, purpose, code)

    async def _consume_code(self, code: str, purpose: CodePurpose) -> int:
        if not isinstance(code, str) or not code or not code.isascii():
            raise InvalidCode()
        user_id = await self._codes.consume(code, purpose, self._clock())
        if user_id is None:
            logger.info("Code rejected", purpose=purpose.value)
            raise InvalidCode()
        return user_id
