"""Request analytics middleware - records one event per tracked API request."""

import time
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from src.app.api.dependencies.auth import get_client_info, resolve_account_id
from src.app.api.dependencies.services import get_auth_primitives
from src.app.core.config import get_settings
from src.app.repositories import AnalyticsEventRepository
from src.app.services.analytics_service import AnalyticsService, build_event

# Client-reported views arrive here already; tracking them again would double count
_UNTRACKED_PREFIXES = ("/api/v1/analytics",)


def should_track(request: Request) -> bool:
    path = request.url.path
    return (
        request.method != "OPTIONS"
        and path.startswith("/api/")
        and not path.startswith(_UNTRACKED_PREFIXES)
    )


async def analytics_middleware(request: Request, call_next: RequestResponseEndpoint) -> Response:
    """Time the request and store it with the visitor's session id.

    Visitors without a session cookie get a new one on the response. The
    event is written on an isolated session from ``app.state.session_factory``.
    """
    if not should_track(request):
        return await call_next(request)

    settings = get_settings()
    session_id = request.cookies.get(settings.analytics_session_cookie_name)
    new_session = not session_id or len(session_id) > 64
    if new_session:
        session_id = uuid4().hex

    started = time.perf_counter()
    response = await call_next(request)

    event = build_event(
        path=request.url.path,
        method=request.method,
        session_id=session_id,
        status_code=response.status_code,
        client=get_client_info(request),
        account_id=resolve_account_id(request, get_auth_primitives()),
        referer=request.headers.get("referer"),
        response_time_ms=(time.perf_counter() - started) * 1000,
    )
    async with request.app.state.session_factory() as session:
        await AnalyticsService(AnalyticsEventRepository(session), session).record(event)

    if new_session:
        response.set_cookie(
            settings.analytics_session_cookie_name,
            session_id,
            max_age=settings.analytics_session_max_age_seconds,
            httponly=True,
            secure=settings.is_production,
            samesite="strict",
            path="/",
        )
    return response
