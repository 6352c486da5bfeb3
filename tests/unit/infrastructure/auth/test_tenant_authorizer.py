"""Unit tests for TenantAuthorizer."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from argon2 import PasswordHasher
from sqlalchemy import func, select

from dealhub.domain.entities import AuthErrorKind, CodePurpose, TenantDecision, TenantRole
from dealhub.infrastructure.auth import (
    Forbidden,
    IdentifierTaken,
    InvalidCode,
    InvalidCredentials,
    InvalidRefreshToken,
    TenantAuthorizer,
    TooManyAttempts,
    Unauthorized,
    WeakPasswordError,
    extract_bearer_token,
    verify_password,
)
from dealhub.infrastructure.persistence.models import (
    AccessTokenModel,
    RefreshTokenModel,
    UserModel,
)
from dealhub.infrastructure.persistence.repositories import (
    CompanyRepository,
    RefreshTokenRepository,
)

PASSWORD = "correct-pw"


@pytest.fixture
def authorizer(db_session, settings) -> TenantAuthorizer:
    return TenantAuthorizer(db_session, settings=settings)


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestExtractBearerToken:
    """Tests for Authorization header parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("abc.def.ghi", "abc.def.ghi"),
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("bearer   abc.def.ghi  ", "abc.def.ghi"),
            (None, None),
            ("", None),
            ("Bearer", "Bearer"),
            ("Bearer ", "Bearer"),
            ("Basic dXNlcjpwdw==", None),
            ("Bearer a b", None),
            ("Bearer \ud800", None),
            ("t\u00f6ken", None),
        ],
    )
    def test_extract(self, value, expected):
        assert extract_bearer_token(value) == expected


class TestAuthorize:
    """Tests for login."""

    @pytest.mark.asyncio
    async def test_login_returns_usable_token_pair(self, authorizer, alice, settings):
        """Test login, then the access token authenticates a request."""
        pair = await authorizer.authorize("alice@example.com", PASSWORD)

        assert pair.expires_in == settings.access_token_ttl_seconds == 3600
        assert pair.user_id == alice.id
        claims = await authorizer.authorize_request(pair.access_token)
        assert claims.user_id == alice.id
        assert claims.identifier == "alice@example.com"
        assert claims.role == "user"

    @pytest.mark.asyncio
    async def test_login_with_mobile(self, authorizer, alice):
        pair = await authorizer.authorize("+15550001", PASSWORD)

        assert pair.user_id == alice.id

    @pytest.mark.asyncio
    async def test_login_persists_both_tokens_and_last_login(self, authorizer, db_session, alice):
        await authorizer.authorize("alice@example.com", PASSWORD)

        assert await _count(db_session, AccessTokenModel) == 1
        assert await _count(db_session, RefreshTokenModel) == 1
        last_login = (
            await db_session.execute(select(UserModel.last_login).where(UserModel.id == alice.id))
        ).scalar_one()
        assert last_login is not None

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_user_are_indistinguishable(self, authorizer, alice):
        """Test that both failures raise the same kind with the same message."""
        with pytest.raises(InvalidCredentials) as wrong_password:
            await authorizer.authorize("alice@example.com", "nope")
        with pytest.raises(InvalidCredentials) as unknown_user:
            await authorizer.authorize("nobody@example.com", PASSWORD)

        assert wrong_password.value.kind is unknown_user.value.kind is AuthErrorKind.INVALID_CREDENTIALS
        assert str(wrong_password.value) == str(unknown_user.value)

    @pytest.mark.asyncio
    async def test_unknown_user_still_verifies_a_hash(self, authorizer):
        with patch(
            "dealhub.infrastructure.auth.tenant_authorizer.verify_password",
            return_value=False,
        ) as verify:
            with pytest.raises(InvalidCredentials):
                await authorizer.authorize("nobody@example.com", PASSWORD)

        verify.assert_called_once()

    @pytest.mark.asyncio
    async def test_inactive_user_cannot_log_in(self, authorizer, create_user):
        await create_user(email="gone@example.com", is_active=False)

        with pytest.raises(InvalidCredentials):
            await authorizer.authorize("gone@example.com", PASSWORD)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier", ["", "   "])
    async def test_empty_identifier(self, authorizer, identifier):
        with pytest.raises(InvalidCredentials):
            await authorizer.authorize(identifier, PASSWORD)

    @pytest.mark.asyncio
    async def test_sixth_attempt_is_throttled_even_with_correct_password(self, authorizer, alice):
        for _ in range(5):
            with pytest.raises(InvalidCredentials):
                await authorizer.authorize("alice@example.com", "nope")

        with pytest.raises(TooManyAttempts) as exc_info:
            await authorizer.authorize("alice@example.com", PASSWORD)

        assert exc_info.value.kind is AuthErrorKind.TOO_MANY_ATTEMPTS
        assert exc_info.value.retry_after == 900

    @pytest.mark.asyncio
    async def test_successful_login_resets_throttle(self, authorizer, alice):
        for _ in range(4):
            with pytest.raises(InvalidCredentials):
                await authorizer.authorize("alice@example.com", "nope")

        await authorizer.authorize("alice@example.com", PASSWORD)

        # A fresh budget of five attempts
        for _ in range(5):
            with pytest.raises(InvalidCredentials):
                await authorizer.authorize("alice@example.com", "nope")
        with pytest.raises(TooManyAttempts):
            await authorizer.authorize("alice@example.com", "nope")

    @pytest.mark.asyncio
    async def test_throttle_window_expires(self, db_session, settings, alice):
        now = [datetime.now(timezone.utc)]
        authorizer = TenantAuthorizer(db_session, settings=settings, clock=lambda: now[0])
        for _ in range(5):
            with pytest.raises(InvalidCredentials):
                await authorizer.authorize("alice@example.com", "nope")
        with pytest.raises(TooManyAttempts):
            await authorizer.authorize("alice@example.com", "nope")

        now[0] += timedelta(seconds=settings.login_attempt_window_seconds + 1)

        with pytest.raises(InvalidCredentials):
            await authorizer.authorize("alice@example.com", "nope")

    @pytest.mark.asyncio
    async def test_outdated_hash_upgraded_on_login(self, authorizer, db_session, create_user):
        user = await create_user(email="old@example.com")
        user_id = user.id
        user.password_hash = PasswordHasher(time_cost=1, memory_cost=512, parallelism=1).hash(PASSWORD)
        await db_session.commit()

        await authorizer.authorize("old@example.com", PASSWORD)

        stored = (
            await db_session.execute(select(UserModel.password_hash).where(UserModel.id == user_id))
        ).scalar_one()
        assert "m=512" not in stored
        assert verify_password(PASSWORD, stored)


class TestRefresh:
    """Tests for refresh token rotation."""

    @pytest.mark.asyncio
    async def test_refresh_rotates_and_links_replacement(self, authorizer, db_session, alice):
        pair = await authorizer.authorize("alice@example.com", PASSWORD)

        rotated = await authorizer.refresh(pair.refresh_token)

        assert rotated.refresh_token != pair.refresh_token
        assert rotated.access_token != pair.access_token
        repo = RefreshTokenRepository(db_session)
        old = await repo.get_by_token(pair.refresh_token)
        new = await repo.get_by_token(rotated.refresh_token)
        assert old.revoked is True
        assert old.replaced_by_id == new.id
        assert new.revoked is False
        await authorizer.authorize_request(rotated.access_token)

    @pytest.mark.asyncio
    async def test_refresh_token_usable_exactly_once(self, authorizer, alice):
        pair = await authorizer.authorize("alice@example.com", PASSWORD)
        await authorizer.refresh(pair.refresh_token)

        with pytest.raises(InvalidRefreshToken) as exc_info:
            await authorizer.refresh(pair.refresh_token)

        assert exc_info.value.kind is AuthErrorKind.INVALID_REFRESH_TOKEN

    @pytest.mark.asyncio
    async def test_losing_concurrent_refresh_fails_and_leaves_no_tokens(
        self, authorizer, db_session, alice
    ):
        """Test the conditional revoke when another refresh won the race.

        The loser has already read the token as active; only the conditional
        update can stop it.
        """
        pair = await authorizer.authorize("alice@example.com", PASSWORD)
        stale = await RefreshTokenRepository(db_session).get_by_token(pair.refresh_token)
        await authorizer.refresh(pair.refresh_token)
        refresh_rows = await _count(db_session, RefreshTokenModel)
        access_rows = await _count(db_session, AccessTokenModel)

        with patch.object(
            authorizer._refresh_tokens, "get_active", AsyncMock(return_value=stale)
        ):
            with pytest.raises(InvalidRefreshToken):
                await authorizer.refresh(pair.refresh_token)

        assert await _count(db_session, RefreshTokenModel) == refresh_rows
        assert await _count(db_session, AccessTokenModel) == access_rows

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", "unknown-token", None, "\ud800", "t\u00f6ken"])
    async def test_unknown_refresh_token(self, authorizer, token):
        with pytest.raises(InvalidRefreshToken):
            await authorizer.refresh(token)

    @pytest.mark.asyncio
    async def test_expired_refresh_token(self, db_session, settings, alice):
        short = settings.model_copy(update={"refresh_token_ttl_seconds": 1})
        now = [datetime.now(timezone.utc)]
        authorizer = TenantAuthorizer(db_session, settings=short, clock=lambda: now[0])
        pair = await authorizer.authorize("alice@example.com", PASSWORD)

        now[0] += timedelta(seconds=2)

        with pytest.raises(InvalidRefreshToken):
            await authorizer.refresh(pair.refresh_token)

    @pytest.mark.asyncio
    async def test_inactive_user_cannot_refresh(self, authorizer, db_session, alice):
        pair = await authorizer.authorize("alice@example.com", PASSWORD)
        alice.is_active = False
        await db_session.commit()

        with pytest.raises(InvalidRefreshToken):
            await authorizer.refresh(pair.refresh_token)


class TestAuthorizeRequest:
    """Tests for bearer authentication and logout."""

    @pytest.mark.asyncio
    async def test_accepts_bearer_header(self, authorizer, alice):
        pair = await authorizer.authorize("alice@example.com", PASSWORD)

        claims = await authorizer.authorize_request(f"Bearer {pair.access_token}")

        assert claims.user_id == alice.id

    @pytest.mark.asyncio
    async def test_logout_revokes_access_token(self, authorizer, alice):
        pair = await authorizer.authorize("alice@example.com", PASSWORD)
        await authorizer.authorize_request(pair.access_token)

        await authorizer.logout(pair.access_token)

        with pytest.raises(Unauthorized):
            await authorizer.authorize_request(pair.access_token)

    @pytest.mark.asyncio
    async def test_logout_is_idempotent(self, authorizer, alice):
        pair = await authorizer.authorize("alice@example.com", PASSWORD)

        await authorizer.logout(pair.access_token)
        await authorizer.logout(pair.access_token)
        await authorizer.logout("garbage")
        await authorizer.logout("\ud800")
        await authorizer.logout(None)

    @pytest.mark.asyncio
    async def test_logout_keeps_refresh_token(self, authorizer, alice):
        pair = await authorizer.authorize("alice@example.com", PASSWORD)
        await authorizer.logout(pair.access_token)

        rotated = await authorizer.refresh(pair.refresh_token)

        await authorizer.authorize_request(rotated.access_token)

    @pytest.mark.asyncio
    async def test_signed_token_without_server_record_is_rejected(self, authorizer, alice):
        """Test that a valid signature alone does not authenticate."""
        token, _ = authorizer._jwt.create_access_token(
            user_id=alice.id, identifier="alice@example.com", issued_at=datetime.now(timezone.utc)
        )

        with pytest.raises(Unauthorized):
            await authorizer.authorize_request(token)

    @pytest.mark.asyncio
    async def test_expired_server_record_is_rejected(self, db_session, settings, alice):
        now = [datetime.now(timezone.utc)]
        authorizer = TenantAuthorizer(db_session, settings=settings, clock=lambda: now[0])
        pair = await authorizer.authorize("alice@example.com", PASSWORD)

        now[0] += timedelta(seconds=settings.access_token_ttl_seconds + 1)

        with pytest.raises(Unauthorized):
            await authorizer.authorize_request(pair.access_token)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "bearer",
        [
            None,
            "",
            "Bearer",
            "Bearer ",
            "garbage",
            "a.b.c",
            "Basic Zm9vOmJhcg==",
            "Bearer a b",
            "Bearer \ud800",
        ],
    )
    async def test_garbage_is_unauthorized(self, authorizer, bearer):
        with pytest.raises(Unauthorized) as exc_info:
            await authorizer.authorize_request(bearer)

        assert exc_info.value.kind is AuthErrorKind.UNAUTHORIZED


class TestTenantMutation:
    """Tests for per-company role checks."""

    @pytest.mark.asyncio
    async def test_owner_and_manager_allowed(self, authorizer, alice, bob, create_company):
        company = await create_company(alice, members={bob.id: TenantRole.MANAGER})

        assert await authorizer.authorize_tenant_mutation(alice.id, company.id) is TenantDecision.ALLOW
        assert await authorizer.authorize_tenant_mutation(bob.id, company.id) is TenantDecision.ALLOW

    @pytest.mark.asyncio
    async def test_staff_forbidden_then_allowed_after_promotion(
        self, authorizer, db_session, alice, bob, create_company
    ):
        """Test that role changes take effect on the very next check."""
        company = await create_company(alice, members={bob.id: TenantRole.STAFF})

        assert await authorizer.authorize_tenant_mutation(bob.id, company.id) is TenantDecision.FORBIDDEN
        with pytest.raises(Forbidden) as exc_info:
            await authorizer.require_tenant_mutation(bob.id, company.id)
        assert exc_info.value.kind is AuthErrorKind.FORBIDDEN

        await CompanyRepository(db_session).set_member_role(company.id, bob.id, TenantRole.MANAGER)
        await db_session.commit()

        assert await authorizer.authorize_tenant_mutation(bob.id, company.id) is TenantDecision.ALLOW
        await authorizer.require_tenant_mutation(bob.id, company.id)

    @pytest.mark.asyncio
    async def test_demoted_manager_forbidden_immediately(
        self, authorizer, db_session, alice, bob, create_company
    ):
        company = await create_company(alice, members={bob.id: TenantRole.MANAGER})
        assert (await authorizer.authorize_tenant_mutation(bob.id, company.id)).allowed

        await CompanyRepository(db_session).set_member_role(company.id, bob.id, TenantRole.STAFF)
        await db_session.commit()

        assert not (await authorizer.authorize_tenant_mutation(bob.id, company.id)).allowed

    @pytest.mark.asyncio
    async def test_non_member_and_other_company_forbidden(
        self, authorizer, alice, bob, create_company
    ):
        mine = await create_company(alice)
        theirs = await create_company(bob, name="Other")

        assert await authorizer.authorize_tenant_mutation(bob.id, mine.id) is TenantDecision.FORBIDDEN
        assert await authorizer.authorize_tenant_mutation(alice.id, theirs.id) is TenantDecision.FORBIDDEN
        assert await authorizer.authorize_tenant_mutation(alice.id, 9999) is TenantDecision.FORBIDDEN


class TestSessions:
    """Tests for bulk revocation and password change."""

    @pytest.mark.asyncio
    async def test_revoke_all_sessions(self, authorizer, alice, bob):
        first = await authorizer.authorize("alice@example.com", PASSWORD)
        second = await authorizer.authorize("+15550001", PASSWORD)
        other = await authorizer.authorize("bob@example.com", PASSWORD)

        assert await authorizer.revoke_all_sessions(alice.id) == 2

        for pair in (first, second):
            with pytest.raises(Unauthorized):
                await authorizer.authorize_request(pair.access_token)
            with pytest.raises(InvalidRefreshToken):
                await authorizer.refresh(pair.refresh_token)
        await authorizer.authorize_request(other.access_token)
        await authorizer.refresh(other.refresh_token)

    @pytest.mark.asyncio
    async def test_change_password_revokes_sessions(self, authorizer, alice):
        pair = await authorizer.authorize("alice@example.com", PASSWORD)

        await authorizer.change_password(alice.id, PASSWORD, "N3wPassword!")

        with pytest.raises(Unauthorized):
            await authorizer.authorize_request(pair.access_token)
        with pytest.raises(InvalidRefreshToken):
            await authorizer.refresh(pair.refresh_token)
        with pytest.raises(InvalidCredentials):
            await authorizer.authorize("alice@example.com", PASSWORD)
        await authorizer.authorize("alice@example.com", "N3wPassword!")

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self, authorizer, alice):
        with pytest.raises(InvalidCredentials):
            await authorizer.change_password(alice.id, "nope", "N3wPassword!")

    @pytest.mark.asyncio
    async def test_change_password_weak(self, authorizer, alice):
        with pytest.raises(WeakPasswordError) as exc_info:
            await authorizer.change_password(alice.id, PASSWORD, "weak")

        assert {e.code for e in exc_info.value.errors} >= {"password_too_short"}

    @pytest.mark.asyncio
    async def test_purge_expired(self, db_session, settings, alice):
        now = [datetime.now(timezone.utc)]
        authorizer = TenantAuthorizer(db_session, settings=settings, clock=lambda: now[0])
        await authorizer.authorize("alice@example.com", PASSWORD)

        assert await authorizer.purge_expired() == 0

        now[0] += timedelta(seconds=settings.refresh_token_ttl_seconds + 1)

        assert await authorizer.purge_expired() == 2


class TestAccountCodes:
    """Tests for self-registration, activation and password reset."""

    @pytest.fixture
    def authorizer(self, db_session, settings, code_sender) -> TenantAuthorizer:
        return TenantAuthorizer(db_session, settings=settings, code_sender=code_sender)

    @pytest.mark.asyncio
    async def test_registered_account_logs_in_after_activation(self, authorizer, code_sender):
        user = await authorizer.register("N3wPassword!", email="carol@example.com")

        assert user.is_active is False
        with pytest.raises(InvalidCredentials):
            await authorizer.authorize("carol@example.com", "N3wPassword!")

        activated = await authorizer.activate_account(code_sender.last_code(CodePurpose.ACTIVATION))

        assert activated == user.id
        pair = await authorizer.authorize("carol@example.com", "N3wPassword!")
        assert pair.user_id == user.id

    @pytest.mark.asyncio
    async def test_activation_code_is_single_use(self, authorizer, code_sender):
        await authorizer.register("N3wPassword!", mobile="+15557777")
        code = code_sender.last_code(CodePurpose.ACTIVATION)
        await authorizer.activate_account(code)

        with pytest.raises(InvalidCode) as exc_info:
            await authorizer.activate_account(code)

        assert exc_info.value.kind is AuthErrorKind.INVALID_CODE

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("email", "mobile"),
        [("alice@example.com", None), (None, "+15550001"), ("new@example.com", "+15550001")],
    )
    async def test_register_taken_identifier(self, authorizer, code_sender, alice, email, mobile):
        with pytest.raises(IdentifierTaken):
            await authorizer.register("N3wPassword!", email=email, mobile=mobile)

        assert code_sender.sent == []

    @pytest.mark.asyncio
    async def test_register_weak_password(self, authorizer, db_session):
        with pytest.raises(WeakPasswordError):
            await authorizer.register("weak", email="carol@example.com")

        assert await _count(db_session, UserModel) == 0

    @pytest.mark.asyncio
    async def test_register_requires_identifier(self, authorizer):
        with pytest.raises(ValueError):
            await authorizer.register("N3wPassword!", email="  ", mobile=None)

    @pytest.mark.asyncio
    async def test_password_reset_ends_sessions(self, authorizer, code_sender, alice):
        pair = await authorizer.authorize("alice@example.com", PASSWORD)

        await authorizer.request_password_reset("alice@example.com")
        code = code_sender.last_code(CodePurpose.PASSWORD_RESET)
        await authorizer.confirm_password_reset(code, "N3wPassword!")

        with pytest.raises(Unauthorized):
            await authorizer.authorize_request(pair.access_token)
        with pytest.raises(InvalidRefreshToken):
            await authorizer.refresh(pair.refresh_token)
        with pytest.raises(InvalidCredentials):
            await authorizer.authorize("alice@example.com", PASSWORD)
        await authorizer.authorize("alice@example.com", "N3wPassword!")
        with pytest.raises(InvalidCode):
            await authorizer.confirm_password_reset(code, "An0therPassword!")

    @pytest.mark.asyncio
    async def test_reset_code_expires(self, db_session, settings, code_sender, alice):
        now = [datetime.now(timezone.utc)]
        authorizer = TenantAuthorizer(
            db_session, settings=settings, clock=lambda: now[0], code_sender=code_sender
        )
        await authorizer.request_password_reset("+15550001")

        now[0] += timedelta(seconds=settings.password_reset_code_ttl_seconds)

        with pytest.raises(InvalidCode):
            await authorizer.confirm_password_reset(
                code_sender.last_code(CodePurpose.PASSWORD_RESET), "N3wPassword!"
            )

    @pytest.mark.asyncio
    async def test_weak_reset_password_keeps_code(self, authorizer, code_sender, alice):
        await authorizer.request_password_reset("alice@example.com")
        code = code_sender.last_code(CodePurpose.PASSWORD_RESET)

        with pytest.raises(WeakPasswordError):
            await authorizer.confirm_password_reset(code, "weak")

        await authorizer.confirm_password_reset(code, "N3wPassword!")

    @pytest.mark.asyncio
    async def test_reset_for_unknown_or_inactive_account_sends_nothing(
        self, authorizer, code_sender, create_user
    ):
        await create_user(email="gone@example.com", is_active=False)

        await authorizer.request_password_reset("nobody@example.com")
        await authorizer.request_password_reset("gone@example.com")
        await authorizer.request_password_reset("   ")

        assert code_sender.sent == []

    @pytest.mark.asyncio
    async def test_reset_requests_are_throttled(self, authorizer, settings, code_sender, alice):
        for _ in range(settings.password_reset_max_requests):
            await authorizer.request_password_reset("alice@example.com")

        with pytest.raises(TooManyAttempts) as exc_info:
            await authorizer.request_password_reset("alice@example.com")

        assert exc_info.value.retry_after == settings.password_reset_window_seconds
        assert len(code_sender.sent) == settings.password_reset_max_requests
        await authorizer.authorize("alice@example.com", PASSWORD)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["", "made-up", "\ud800", None])
    async def test_unusable_codes(self, authorizer, alice, code):
        with pytest.raises(InvalidCode):
            await authorizer.activate_account(code)
        with pytest.raises(InvalidCode):
            await authorizer.confirm_password_reset(code, "N3wPassword!")

    @pytest.mark.asyncio
    async def test_activation_code_cannot_reset_password(self, authorizer, code_sender):
        await authorizer.register("N3wPassword!", email="carol@example.com")

        with pytest.raises(InvalidCode):
            await authorizer.confirm_password_reset(
                code_sender.last_code(CodePurpose.ACTIVATION), "An0therPassword!"
            )

    @pytest.mark.asyncio
    async def test_purge_removes_expired_codes(self, db_session, settings, code_sender, alice):
        now = [datetime.now(timezone.utc)]
        authorizer = TenantAuthorizer(
            db_session, settings=settings, clock=lambda: now[0], code_sender=code_sender
        )
        await authorizer.request_password_reset("alice@example.com")

        now[0] += timedelta(seconds=settings.password_reset_code_ttl_seconds + 1)

        assert await authorizer.purge_expired() == 1
