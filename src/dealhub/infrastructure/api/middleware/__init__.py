"""HTTP middleware."""

from dealhub.infrastructure.api.middleware.rate_limit_middleware import RateLimitMiddleware

__all__ = ["RateLimitMiddleware"]
