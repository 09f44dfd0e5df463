"""Gate middleware that admits only accounts holding an active grant for this subdomain."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import HTMLResponse, Response
from starlette.types import ASGIApp

from src.app.core.logging import get_logger
from src.app.models.enums import ProtectedResource
from src.gate import pages
from src.gate.config import GateSettings
from src.gate.verifier import AccessVerifier, VerificationUnavailableError

logger = get_logger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/favicon.ico"})


class AccessMethod(str, Enum):
    SUBDOMAIN_COOKIE = "subdomain_cookie"
    AUTH_COOKIE = "auth_cookie"
    BEARER = "bearer"


@dataclass(frozen=True)
class SubdomainAccess:
    resource_id: str
    access_method: AccessMethod
    verified_at: datetime


def resolve_resource(host: str | None, resource_hosts: dict[str, str]) -> str | None:
    """Map a Host header to a resource id; the port is ignored, matching is case-insensitive."""
    if not host:
        return None
    hostname = host.strip().lower()
    if ":" in hostname and not hostname.endswith("]"):
        hostname = hostname.rsplit(":", 1)[0]
    return resource_hosts.get(hostname)


def extract_gate_token(
    request: Request, settings: GateSettings
) -> tuple[str, AccessMethod] | tuple[None, None]:
    """Find the token: subdomain cookie, then auth cookie, then Bearer header."""
    token = request.cookies.get(settings.subdomain_cookie_name)
    if token:
        return token, AccessMethod.SUBDOMAIN_COOKIE
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token, AccessMethod.AUTH_COOKIE
    authorization = request.headers.get("authorization", "")
    if authorization.startswith("Bearer ") and authorization[7:].strip():
        return authorization[7:].strip(), AccessMethod.BEARER
    return None, None


def resource_display_name(resource_id: str) -> str:
    try:
        return ProtectedResource(resource_id).display_name
    except ValueError:
        return resource_id


class SubdomainGateMiddleware(BaseHTTPMiddleware):
    """Verify every request with the accounts API before it reaches the subdomain's routes.

    On success ``request.state.account`` holds the account payload returned by
    the API and ``request.state.subdomain_access`` records how access was
    established.
    """

    def __init__(self, app: ASGIApp, settings: GateSettings, verifier: AccessVerifier):
        super().__init__(app)
        self.settings = settings
        self.verifier = verifier

    def _denied(self, status_code: int, reason: str, resource_name: str) -> HTMLResponse:
        return HTMLResponse(
            pages.access_denied_page(
                reason, resource_name, self.settings.login_url, self.settings.main_site_url
            ),
            status_code=status_code,
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        resource_id = resolve_resource(request.headers.get("host"), self.settings.resource_hosts)
        if resource_id is None:
            logger.warning("Gate request for unknown host", host=request.headers.get("host"))
            return HTMLResponse(pages.invalid_host_page(), status_code=400)

        resource_name = resource_display_name(resource_id)
        token, method = extract_gate_token(request, self.settings)
        if token is None or method is None:
            return self._denied(
                401,
                "Authentication required. Please sign in to access this resource.",
                resource_name,
            )

        try:
            result = await self.verifier.verify(token, resource_id)
        except VerificationUnavailableError as e:
            logger.error("Gate verification unavailable", resource_id=resource_id, error=e.details)
            return HTMLResponse(
                pages.service_unavailable_page(self.settings.main_site_url), status_code=500
            )

        if not result.granted:
            logger.info(
                "Gate denied request",
                resource_id=resource_id,
                status_code=result.status_code,
                reason=result.reason,
            )
            return self._denied(
                result.status_code, result.reason or "Access not granted", resource_name
            )

        request.state.account = result.account
        request.state.subdomain_access = SubdomainAccess(
            resource_id=resource_id,
            access_method=method,
            verified_at=datetime.now(UTC),
        )
        return await call_next(request)
