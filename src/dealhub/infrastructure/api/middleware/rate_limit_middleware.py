"""Rate limiting middleware for DealHub.

Limits the number of requests per client address and path within a fixed
window. Counters live in the database so that all workers share them.
"""

from datetime import datetime, timezone

from fastapi import Request, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

from dealhub.core.config import get_settings
from dealhub.core.logging import get_logger
from dealhub.infrastructure.persistence.database import get_db_manager
from dealhub.infrastructure.persistence.repositories import RateLimitRepository

logger = get_logger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/ready"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce rate limits on API requests."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process the request and enforce rate limits.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint to call.

        Returns:
            The response from the application or a 429 error.
        """
        settings = get_settings()

        if not settings.rate_limit_enabled or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        path = request.url.path
        key = f"ip:{client}|{path}"
        rate = settings.rate_limit_max_requests
        window = settings.rate_limit_window_seconds

        count = await self._hit(request, key, window)
        remaining = max(0, rate - count)

        if count > rate:
            logger.warning("Rate limit exceeded", key=key, path=path, rate=rate)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too Many Requests",
                    "detail": f"Rate limit exceeded. Try again in {window} seconds.",
                },
                headers={
                    "Retry-After": str(window),
                    "X-RateLimit-Limit": str(rate),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(window),
                },
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(rate)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = str(window)

        return response

    @staticmethod
    async def _hit(request: Request, key: str, window: int) -> int:
        session_factory: async_sessionmaker[AsyncSession] | None = getattr(
            request.app.state, "session_factory", None
        )
        if session_factory is None:
            session_factory = get_db_manager().session_factory

        async with session_factory() as session:
            count = await RateLimitRepository(session).hit(
                key, window, datetime.now(timezone.utc)
            )
            await session.commit()
        return count
