"""Authentication API routes.

Provides endpoints for login, token refresh, logout, session management,
self-registration and password reset.
Failures are raised as authorization failures and turned into responses by
the application's exception handlers.
"""

from typing import Annotated

from fastapi import APIRouter, Header, HTTPException, Response, status

from dealhub.core.config import get_settings
from dealhub.core.logging import get_logger
from dealhub.infrastructure.api.dependencies import Authorizer, DbSession, Principal
from dealhub.infrastructure.api.schemas import (
    ActivateRequest,
    AuthResponse,
    ChangePasswordRequest,
    ClaimsResponse,
    LoginRequest,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    RefreshRequest,
    RegisterRequest,
    RevokeSessionsResponse,
    TokenRefreshResponse,
    UserResponse,
)
from dealhub.infrastructure.persistence.repositories import UserRepository

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"description": "Invalid credentials"},
        429: {"description": "Too many login attempts"},
    },
)
async def login(
    request: LoginRequest,
    authorizer: Authorizer,
    session: DbSession,
) -> AuthResponse:
    """Authenticate a user with identifier and password.

    Security:
    - Unknown identifiers and wrong passwords get the same generic 401
    - Attempts are throttled per identifier
    """
    pair = await authorizer.authorize(request.identifier, request.password)
    user = await UserRepository(session).get_by_id(pair.user_id)

    return AuthResponse(
        token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/refresh",
    response_model=TokenRefreshResponse,
    responses={401: {"description": "Invalid refresh token"}},
)
async def refresh_token(request: RefreshRequest, authorizer: Authorizer) -> TokenRefreshResponse:
    """Exchange a refresh token for a new token pair.

    The presented refresh token is revoked; reusing it fails.
    """
    pair = await authorizer.refresh(request.refresh_token)
    return TokenRefreshResponse(
        token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    authorizer: Authorizer,
    authorization: Annotated[str | None, Header()] = None,
) -> Response:
    """Revoke the access token used for this request. Idempotent."""
    await authorizer.logout(authorization)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/me",
    response_model=ClaimsResponse,
    responses={401: {"description": "Not authenticated"}},
)
async def get_current_user_info(principal: Principal) -> ClaimsResponse:
    """Get the claims of the current access token."""
    return ClaimsResponse(
        user_id=principal.user_id,
        identifier=principal.identifier,
        role=principal.role,
        issued_at=principal.iat,
        expires_at=principal.exp,
        token_id=principal.jti,
    )


@router.post(
    "/password",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"description": "Not authenticated or wrong current password"},
        422: {"description": "New password does not meet the password policy"},
    },
)
async def change_password(
    request: ChangePasswordRequest,
    principal: Principal,
    authorizer: Authorizer,
) -> Response:
    """Change the caller's password. Ends every session of the caller."""
    await authorizer.change_password(
        principal.user_id, request.current_password, request.new_password
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/sessions/revoke",
    response_model=RevokeSessionsResponse,
    responses={401: {"description": "Not authenticated"}},
)
async def revoke_sessions(principal: Principal, authorizer: Authorizer) -> RevokeSessionsResponse:
    """Revoke every session of the caller, including the current one."""
    revoked = await authorizer.revoke_all_sessions(principal.user_id)
    return RevokeSessionsResponse(revoked=revoked)


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"description": "Self-registration is disabled"},
        409: {"description": "Email or mobile number already registered"},
        422: {"description": "Password does not meet the password policy"},
    },
)
async def register(request: RegisterRequest, authorizer: Authorizer) -> UserResponse:
    """Create an inactive account and send its activation code.

    The account can log in once :func:`activate` has been called with the code.
    """
    if not get_settings().registration_enabled:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Self-registration is disabled"
        )

    user = await authorizer.register(
        request.password,
        email=request.email,
        mobile=request.mobile,
        display_name=request.display_name,
    )
    return UserResponse.model_validate(user)


@router.post(
    "/activate",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"description": "Invalid, expired or used code"}},
)
async def activate(request: ActivateRequest, authorizer: Authorizer) -> Response:
    """Activate a registered account with its activation code."""
    await authorizer.activate_account(request.code)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/password-reset",
    status_code=status.HTTP_202_ACCEPTED,
    responses={429: {"description": "Too many reset requests"}},
)
async def request_password_reset(
    request: PasswordResetRequest, authorizer: Authorizer
) -> Response:
    """Send a password reset code.

    Always accepted, whether or not an account exists for the identifier.
    """
    await authorizer.request_password_reset(request.identifier)
    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.post(
    "/password-reset/confirm",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        400: {"description": "Invalid, expired or used code"},
        422: {"description": "New password does not meet the password policy"},
    },
)
async def confirm_password_reset(
    request: PasswordResetConfirmRequest, authorizer: Authorizer
) -> Response:
    """Set a new password with a reset code. Ends every session of the user."""
    await authorizer.confirm_password_reset(request.code, request.new_password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
