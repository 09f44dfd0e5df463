import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.app.api.middlewares import setup_middlewares
from src.app.api.v1.router import api_router
from src.app.core.config import get_settings
from src.app.core.db import dispose_engine, get_session
from src.app.core.exceptions import setup_exception_handlers
from src.app.core.health import setup_health_endpoint, setup_metrics
from src.app.core.logging import get_logger, setup_logging
from src.app.core.notifications import get_notification_queue
from src.app.core.rate_limit import limiter
from src.app.services.maintenance import bootstrap_initial_admin, run_cleanup_loop

logger = get_logger(__name__)

NOTIFICATION_DRAIN_TIMEOUT = 10  # seconds


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}", env=settings.app_env)

    await bootstrap_initial_admin(settings)

    cleanup_task: asyncio.Task[None] | None = None
    if settings.token_cleanup_interval_minutes > 0:
        cleanup_task = asyncio.create_task(
            run_cleanup_loop(
                settings.token_cleanup_interval_minutes,
                settings.used_token_retention_hours,
                settings.analytics_retention_days,
            ),
            name="maintenance-cleanup",
        )

    yield

    logger.info("Shutdown initiated")
    if cleanup_task is not None:
        cleanup_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await cleanup_task

    queue = get_notification_queue()
    if not await queue.drain(timeout=NOTIFICATION_DRAIN_TIMEOUT):
        logger.warning(
            "Notifications still pending at shutdown", pending=queue.pending_count
        )

    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "auth", "description": "Sign-up, sessions, recovery and token validation"},
    {"name": "users", "description": "Account self-service"},
    {"name": "access-requests", "description": "Access grants for protected subdomains"},
    {"name": "contacts", "description": "Contact form"},
    {"name": "admin", "description": "Account administration (admin role)"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Central accounts API: authentication, sessions and subdomain access grants",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
    )

    setup_exception_handlers(app)

    app.state.limiter = limiter
    app.state.session_factory = get_session
    app.add_exception_handler(
        RateLimitExceeded, _rate_limit_exceeded_handler  # type: ignore[arg-type]
    )

    setup_middlewares(app, settings)

    app.include_router(api_router)
    setup_health_endpoint(app)
    setup_metrics(app)

    return app


app = create_app()
