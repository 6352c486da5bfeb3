"""Pydantic schemas for API requests and responses."""

from dealhub.infrastructure.api.schemas.auth_schemas import (
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
from dealhub.infrastructure.api.schemas.catalog_schemas import (
    DiscountCreateRequest,
    DiscountResponse,
    DiscountUpdateRequest,
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
)
from dealhub.infrastructure.api.schemas.company_schemas import (
    CompanyCreateRequest,
    CompanyResponse,
    MemberResponse,
    MemberRoleRequest,
)
from dealhub.infrastructure.api.schemas.pagination_schemas import PageResponse

__all__ = [
    "ActivateRequest",
    "AuthResponse",
    "ChangePasswordRequest",
    "ClaimsResponse",
    "CompanyCreateRequest",
    "CompanyResponse",
    "DiscountCreateRequest",
    "DiscountResponse",
    "DiscountUpdateRequest",
    "LoginRequest",
    "MemberResponse",
    "MemberRoleRequest",
    "PageResponse",
    "PasswordResetConfirmRequest",
    "PasswordResetRequest",
    "ProductCreateRequest",
    "ProductResponse",
    "ProductUpdateRequest",
    "RefreshRequest",
    "RegisterRequest",
    "RevokeSessionsResponse",
    "TokenRefreshResponse",
    "UserResponse",
]
