"""Per-route rate limiting with slowapi (in-memory counters)."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.app.core.config import get_settings
from src.app.core.logging import get_logger

logger = get_logger(__name__)


def get_client_ip(request: Request) -> str:
    """Resolve the client address from the socket peer.

    X-Forwarded-For and X-Real-IP are never read here. Behind a reverse proxy,
    run uvicorn with ``--proxy-headers --forwarded-allow-ips=<proxy>`` so the
    peer is rewritten only for trusted hops.
    """
    return get_remote_address(request) or "unknown"


def get_rate_limit_key(request: Request) -> str:
    """Generate rate limit key from client IP only.

    SECURITY WARNING: Do NOT include user-controlled headers (like
    X-Forwarded-For) in the rate limit key. Attackers can bypass rate limiting
    by rotating header values to create unlimited new buckets, which turns the
    sign-in and password-reset limits into no limit at all.
    """
    return get_client_ip(request)


def create_limiter() -> Limiter:
    """Create the rate limiter.

    Counters live in process memory, so limits are per worker. Disabled unless
    RATE_LIMIT_ENABLED is set, and always disabled in the testing environment.
    """
    settings = get_settings()
    enabled = settings.rate_limit_enabled and settings.app_env != "testing"
    if not enabled:
        logger.info("Rate limiter disabled")
    return Limiter(key_func=get_rate_limit_key, enabled=enabled)


# Reads settings at import time; changing limits requires a restart
limiter = create_limiter()
