"""Persistence repositories for database operations."""

from dealhub.infrastructure.persistence.repositories.access_token_repository import (
    AccessTokenRepository,
)
from dealhub.infrastructure.persistence.repositories.company_repository import (
    CompanyRepository,
)
from dealhub.infrastructure.persistence.repositories.discount_repository import (
    DiscountFilters,
    DiscountRepository,
)
from dealhub.infrastructure.persistence.repositories.one_time_code_repository import (
    OneTimeCodeRepository,
)
from dealhub.infrastructure.persistence.repositories.product_repository import (
    ProductRepository,
)
from dealhub.infrastructure.persistence.repositories.rate_limit_repository import (
    RateLimitRepository,
)
from dealhub.infrastructure.persistence.repositories.refresh_token_repository import (
    RefreshTokenRepository,
)
from dealhub.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = [
    "AccessTokenRepository",
    "CompanyRepository",
    "DiscountFilters",
    "DiscountRepository",
    "OneTimeCodeRepository",
    "ProductRepository",
    "RateLimitRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
