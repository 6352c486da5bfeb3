"""API Routes for DealHub."""

from dealhub.infrastructure.api.routes.auth_router import router as auth_router
from dealhub.infrastructure.api.routes.companies_router import router as companies_router
from dealhub.infrastructure.api.routes.discounts_router import router as discounts_router
from dealhub.infrastructure.api.routes.products_router import router as products_router

__all__ = [
    "auth_router",
    "companies_router",
    "discounts_router",
    "products_router",
]
