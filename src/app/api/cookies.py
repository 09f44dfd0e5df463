"""Auth cookie issuance shared by sign-up, sign-in and refresh."""

from datetime import timedelta

from fastapi import Response

from src.app.core.config import Settings
from src.app.services.auth_service import SessionTokens


def _cookie_flags(settings: Settings) -> dict[str, object]:
    # Cross-site requests from sibling subdomains need SameSite=None, which requires Secure
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "none" if settings.is_production else "lax",
        "domain": settings.cookie_domain,
        "path": "/",
    }


def set_auth_cookies(response: Response, tokens: SessionTokens, settings: Settings) -> None:
    """Set the access cookie (token lifetime) and refresh cookie (refresh lifetime)."""
    flags = _cookie_flags(settings)
    response.set_cookie(
        settings.access_cookie_name,
        tokens.access.token,
        max_age=tokens.expires_in,
        **flags,  # type: ignore[arg-type]
    )
    response.set_cookie(
        settings.refresh_cookie_name,
        tokens.refresh.token,
        max_age=int(timedelta(days=settings.refresh_token_expire_days).total_seconds()),
        **flags,  # type: ignore[arg-type]
    )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    flags = _cookie_flags(settings)
    for name in (settings.access_cookie_name, settings.refresh_cookie_name):
        response.delete_cookie(name, **flags)  # type: ignore[arg-type]
