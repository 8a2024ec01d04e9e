"""FastAPI application entry point.

This module creates and configures the FastAPI application, including:
- Security headers and CORS middleware
- Exception handlers for API errors
- App-wide state: workspace registry, credential directory, roadmap service
- API v1 router mounting
- Health check endpoint
"""

from datetime import timedelta

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from smartapply.api.v1.router import router as v1_router
from smartapply.core.config import settings
from smartapply.core.errors import APIError
from smartapply.core.logging import configure_logging
from smartapply.core.rate_limiting import limiter, rate_limit_exceeded_handler
from smartapply.core.responses import ErrorDetail, ErrorResponse
from smartapply.core.scheduler import Scheduler, default_scheduler
from smartapply.providers.config import ProviderConfig
from smartapply.providers.factory import get_llm_provider
from smartapply.services.auth_service import CredentialDirectory, seed_demo_accounts
from smartapply.services.roadmap_cache import RoadmapCache
from smartapply.services.roadmap_generation import RoadmapService
from smartapply.services.workspace import WorkspaceRegistry

logger = structlog.get_logger()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response.

    Headers added:
    - X-Frame-Options / frame-ancestors: clickjacking
    - X-Content-Type-Options: MIME sniffing
    - Referrer-Policy: referrer leakage
    - Cache-Control: no caching of API responses (profiles, session info)
    - Content-Security-Policy: the API serves no HTML
    - Cross-Origin-Opener/Embedder/Resource-Policy: Spectre isolation
    - Strict-Transport-Security: production only
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store, max-age=0"

        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        response.headers["Cross-Origin-Opener-Policy"] = "same-origin"
        response.headers["Cross-Origin-Embedder-Policy"] = "require-corp"
        response.headers["Cross-Origin-Resource-Policy"] = "same-origin"

        # Assumes HTTPS termination at the reverse proxy
        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Return the standard error envelope for APIError subclasses."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
            )
        ).model_dump(),
    )


def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert FastAPI request validation errors to a 400 VALIDATION_ERROR."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details=[
                    {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                    for e in exc.errors()
                ],
            )
        ).model_dump(),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions.

    Logs the traceback; the client only sees a generic 500.
    """
    logger.exception("unhandled_exception", exc_info=exc, path=str(request.url.path))

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
            )
        ).model_dump(),
    )


def build_roadmap_service(scheduler: Scheduler) -> RoadmapService:
    """Roadmap service on the Gemini provider singleton, with the configured cache TTL."""
    config = ProviderConfig.from_settings(settings)
    return RoadmapService(
        get_llm_provider(config),
        config=config,
        cache=RoadmapCache(
            ttl=timedelta(hours=settings.roadmap_cache_ttl_hours),
            scheduler=scheduler,
        ),
        scheduler=scheduler,
    )


def create_app(
    *,
    roadmap_service: RoadmapService | None = None,
    credentials: CredentialDirectory | None = None,
    scheduler: Scheduler | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        roadmap_service: Replaces the Gemini-backed service (tests).
        credentials: Replaces the credential directory. When omitted, a new
            directory is created and seeded with the demo accounts if
            enabled.
        scheduler: Clock for session expiry, retries and cache TTL.

    Returns:
        Configured FastAPI application instance.
    """
    configure_logging()

    app = FastAPI(
        title=f"{settings.app_title} API",
        version="1.0.0",
        description="Career assessment, route gating and AI career roadmaps",
    )

    # Starlette runs the LAST added middleware FIRST; CORS must see preflights
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Request-ID"],
    )

    # Specific handlers first, then catch-all
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.state.limiter = limiter

    scheduler = scheduler or default_scheduler
    if credentials is None:
        credentials = CredentialDirectory()
        if settings.demo_users_enabled:
            seed_demo_accounts(credentials)

    app.state.scheduler = scheduler
    app.state.credentials = credentials
    app.state.workspaces = WorkspaceRegistry()
    app.state.roadmap_service = roadmap_service or build_roadmap_service(scheduler)

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health")
    def health_check() -> dict:
        """Liveness probe. Does not call Gemini; see /api/v1/admin/health/roadmaps."""
        return {
            "status": "healthy",
            "roadmap_provider_configured": app.state.roadmap_service.is_configured(),
        }

    return app


# Used by uvicorn: uvicorn smartapply.main:app
app = create_app()
