"""SQLAlchemy models for DealHub tables.

All models inherit from the Base class defined in database.py and are
created on application startup in development mode.
"""

from dealhub.infrastructure.persistence.models.access_token import AccessTokenModel
from dealhub.infrastructure.persistence.models.company import CompanyModel
from dealhub.infrastructure.persistence.models.company_member import CompanyMemberModel
from dealhub.infrastructure.persistence.models.discount import DiscountModel
from dealhub.infrastructure.persistence.models.one_time_code import OneTimeCodeModel
from dealhub.infrastructure.persistence.models.product import ProductModel
from dealhub.infrastructure.persistence.models.rate_limit_counter import RateLimitCounterModel
from dealhub.infrastructure.persistence.models.refresh_token import RefreshTokenModel
from dealhub.infrastructure.persistence.models.user import UserModel

__all__ = [
    "AccessTokenModel",
    "CompanyMemberModel",
    "CompanyModel",
    "DiscountModel",
    "OneTimeCodeModel",
    "ProductModel",
    "RateLimitCounterModel",
    "RefreshTokenModel",
    "UserModel",
]
