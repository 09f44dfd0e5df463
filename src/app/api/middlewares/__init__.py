"""Application middlewares."""

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.app.core.config import Settings
from src.app.core.security import DOCS_CSP, SecurityHeadersMiddleware

from .analytics import analytics_middleware
from .logging_context import logging_context_middleware

__all__ = [
    "setup_middlewares",
    "analytics_middleware",
    "logging_context_middleware",
]

HSTS = "max-age=31536000; includeSubDomains"


def setup_middlewares(app: FastAPI, settings: Settings) -> None:
    """Configure all application middlewares.

    Middleware order matters - the last one added is outermost.
    """
    # Request analytics - innermost, so it records the final status code
    if settings.analytics_enabled:

        @app.middleware("http")
        async def _analytics(request, call_next):  # type: ignore[no-untyped-def]
            return await analytics_middleware(request, call_next)

    # Logging context - binds request_id to structlog context
    @app.middleware("http")
    async def _logging_context(request, call_next):  # type: ignore[no-untyped-def]
        return await logging_context_middleware(request, call_next)

    # Security headers (Helmet-style); stricter CSP once the docs are off
    csp = DOCS_CSP
    if not settings.enable_openapi and settings.csp_production:
        csp = settings.csp_production
    app.add_middleware(
        SecurityHeadersMiddleware,
        content_security_policy=csp,
        strict_transport_security=HSTS if settings.is_production else None,
    )

    # CORS - credentials are required for cross-subdomain auth cookies
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    # Correlation ID - generates/propagates X-Request-ID (outermost)
    app.add_middleware(CorrelationIdMiddleware)
