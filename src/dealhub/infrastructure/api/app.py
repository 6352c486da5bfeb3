"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
and lifecycle handlers.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dealhub.core.config import get_settings
from dealhub.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from dealhub.domain.entities import AuthErrorKind
from dealhub.infrastructure.api.middleware import RateLimitMiddleware
from dealhub.infrastructure.auth import AuthorizationFailure, TooManyAttempts, WeakPasswordError
from dealhub.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)

# One response per failure kind; nothing else about the failure is sent.
AUTH_FAILURE_RESPONSES: dict[AuthErrorKind, tuple[int, dict[str, str], dict[str, str]]] = {
    AuthErrorKind.INVALID_CREDENTIALS: (
        status.HTTP_401_UNAUTHORIZED,
        {"error": "Authentication failed", "message": "Invalid credentials"},
        {},
    ),
    AuthErrorKind.TOO_MANY_ATTEMPTS: (
        status.HTTP_429_TOO_MANY_REQUESTS,
        {"error": "Too Many Requests", "message": "Too many attempts"},
        {},
    ),
    AuthErrorKind.UNAUTHORIZED: (
        status.HTTP_401_UNAUTHORIZED,
        {"error": "Unauthorized", "message": "Invalid or missing access token"},
        {"WWW-Authenticate": "Bearer"},
    ),
    AuthErrorKind.INVALID_REFRESH_TOKEN: (
        status.HTTP_401_UNAUTHORIZED,
        {"error": "Invalid refresh token", "message": "Refresh token is invalid or expired"},
        {},
    ),
    AuthErrorKind.FORBIDDEN: (
        status.HTTP_403_FORBIDDEN,
        {"error": "Forbidden", "message": "Insufficient permissions"},
        {},
    ),
    AuthErrorKind.INVALID_CODE: (
        status.HTTP_400_BAD_REQUEST,
        {"error": "Invalid code", "message": "Code is invalid, expired or already used"},
        {},
    ),
    AuthErrorKind.IDENTIFIER_TAKEN: (
        status.HTTP_409_CONFLICT,
        {"error": "Conflict", "message": "Email or mobile number is already registered"},
        {},
    ),
}


def auth_failure_response(exc: AuthorizationFailure) -> JSONResponse:
    """Translate an authorization failure into its HTTP response."""
    status_code, content, headers = AUTH_FAILURE_RESPONSES[exc.kind]
    headers = dict(headers)
    if isinstance(exc, TooManyAttempts):
        headers["Retry-After"] = str(exc.retry_after)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events for the application.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control is yielded to the application during its lifetime.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "Starting DealHub",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Shutting down DealHub")
    await close_database()
    logger.info("Database connection closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Multi-tenant discount marketplace",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint.

        Returns 200 if the service is running. Does not check
        database connectivity.
        """
        return {
            "status": "healthy",
            "service": "DealHub",
            "version": get_settings().app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check endpoint, including database connectivity."""
        if await get_db_manager().check_connection():
            return {
                "status": "ready",
                "service": "DealHub",
                "version": get_settings().app_version,
                "database": "connected",
            }
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "service": "DealHub",
                "database": "disconnected",
            },
        )


def register_routes(app: FastAPI) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
    """
    from dealhub.infrastructure.api.routes import (
        auth_router,
        companies_router,
        discounts_router,
        products_router,
    )

    settings = get_settings()

    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
    app.include_router(
        companies_router, prefix=f"{settings.api_prefix}/companies", tags=["companies"]
    )
    app.include_router(
        products_router, prefix=f"{settings.api_prefix}/companies", tags=["products"]
    )
    app.include_router(discounts_router, prefix=settings.api_prefix, tags=["discounts"])

    @app.get(settings.api_prefix, tags=["root"])
    async def api_root():
        """API root endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api_version": "v1",
        }


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(AuthorizationFailure)
    async def authorization_failure_handler(request: Request, exc: AuthorizationFailure):
        """Map an authorization failure to its single HTTP response."""
        return auth_failure_response(exc)

    @app.exception_handler(WeakPasswordError)
    async def weak_password_handler(request: Request, exc: WeakPasswordError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "Validation error",
                "details": [
                    {"field": error.field, "message": error.message, "code": error.code}
                    for error in exc.errors
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(exc) if get_settings().debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(RateLimitMiddleware)

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log all requests and attach a correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID") or new_correlation_id()
        bind_correlation_id(correlation_id)

        logger.info(
            "Request started",
            method=request.method,
            path=str(request.url.path),
        )

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


app = create_app()
