"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class LoginRequest(BaseModel):
    """Request body for login."""

    identifier: str = Field(
        ..., min_length=1, max_length=255, description="Email address or mobile number"
    )
    password: str = Field(..., min_length=1, description="User's password")


class RefreshRequest(BaseModel):
    """Request body for token refresh."""

    refresh_token: str = Field(..., min_length=1, description="Refresh token")


class ChangePasswordRequest(BaseModel):
    """Request body for a password change."""

    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=1, description="New password")


class RegisterRequest(BaseModel):
    """Request body for self-registration. An email or a mobile number is required."""

    email: str | None = Field(None, min_length=3, max_length=255, description="Email address")
    mobile: str | None = Field(None, min_length=3, max_length=32, description="Mobile number")
    password: str = Field(..., min_length=1, description="Password")
    display_name: str | None = Field(None, max_length=255, description="Display name")

    @model_validator(mode="after")
    def require_identifier(self) -> "RegisterRequest":
        if not (self.email or "").strip() and not (self.mobile or "").strip():
            raise ValueError("Either email or mobile is required")
        return self


class ActivateRequest(BaseModel):
    """Request body for activating a registered account."""

    code: str = Field(..., min_length=1, description="Activation code")


class PasswordResetRequest(BaseModel):
    """Request body for asking for a password reset code."""

    identifier: str = Field(
        ..., min_length=1, max_length=255, description="Email address or mobile number"
    )


class PasswordResetConfirmRequest(BaseModel):
    """Request body for setting a new password with a reset code."""

    code: str = Field(..., min_length=1, description="Password reset code")
    new_password: str = Field(..., min_length=1, description="New password")


class UserResponse(BaseModel):
    """User information in auth responses."""

    id: int = Field(..., description="User ID")
    email: str | None = Field(None, description="User's email address")
    mobile: str | None = Field(None, description="User's mobile number")
    display_name: str | None = Field(None, description="Display name")
    is_active: bool = Field(..., description="Whether the user is active")
    created_at: datetime = Field(..., description="When the user was created")

    model_config = {"from_attributes": True}


class TokenRefreshResponse(BaseModel):
    """Response for a successful token refresh."""

    token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="Refresh token, valid for one use")
    expires_in: int = Field(..., description="Access token expiration time in seconds")


class AuthResponse(TokenRefreshResponse):
    """Response for a successful login."""

    user: UserResponse = Field(..., description="User information")


class ClaimsResponse(BaseModel):
    """Claims of the access token used for the request."""

    user_id: int
    identifier: str
    role: str
    issued_at: int
    expires_at: int
    token_id: str


class RevokeSessionsResponse(BaseModel):
    """Result of revoking all sessions of the caller."""

    revoked: int = Field(..., description="Number of refresh tokens revoked")
