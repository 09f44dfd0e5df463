"""Authentication and authorization dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request

from src.app.api.dependencies.services import AuthPrimitivesDep, AuthServiceDep
from src.app.core.config import get_settings
from src.app.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from src.app.core.logging import bind_account_context
from src.app.core.rate_limit import get_client_ip
from src.app.core.security import AuthPrimitives
from src.app.models import Account
from src.app.services.auth_service import ClientInfo


def _bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return None


def extract_access_token(request: Request, prefer_header: bool = False) -> str | None:
    """Read the access token from the auth cookie or the Bearer header.

    The cookie wins by default; the validate endpoint prefers the header since
    gates forward tokens that way.
    """
    cookie_token = request.cookies.get(get_settings().access_cookie_name) or None
    header_token = _bearer_token(request)
    if prefer_header:
        return header_token or cookie_token
    return cookie_token or header_token


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


async def get_current_account(request: Request, auth_service: AuthServiceDep) -> Account:
    """Resolve the calling account from its access token.

    Raises AuthenticationError for missing/expired/malformed tokens or a
    vanished account, and AuthorizationError for inactive or locked accounts.
    """
    try:
        account, _ = await auth_service.validate_access_token(extract_access_token(request))
    except NotFoundError as e:
        raise AuthenticationError("User not found", code="UserNotFound") from e

    bind_account_context(account.id, account.email)
    request.state.account = account
    return account


CurrentAccount = Annotated[Account, Depends(get_current_account)]
ClientInfoDep = Annotated[ClientInfo, Depends(get_client_info)]


async def require_admin(account: CurrentAccount) -> Account:
    """Require the calling account to have the admin role."""
    if not account.is_admin:
        raise AuthorizationError("Admin privileges required", code="AdminRequired")
    return account


AdminAccount = Annotated[Account, Depends(require_admin)]


def resolve_account_id(request: Request, primitives: AuthPrimitives) -> UUID | None:
    """Account id from a valid access token, or None for anonymous callers.

    Signature and expiry only; the account row is not loaded.
    """
    token = extract_access_token(request)
    if token is None:
        return None
    try:
        return primitives.verify_access_token(token).subject
    except AuthenticationError:
        return None


def get_optional_account_id(request: Request, primitives: AuthPrimitivesDep) -> UUID | None:
    return resolve_account_id(request, primitives)


OptionalAccountId = Annotated[UUID | None, Depends(get_optional_account_id)]
