"""Authentication endpoints - sessions, recovery and token validation."""

from fastapi import APIRouter, Response, status
from starlette.requests import Request

from src.app.api.cookies import clear_auth_cookies, set_auth_cookies
from src.app.api.dependencies import (
    AuthServiceDep,
    ClientInfoDep,
    CurrentAccount,
    SettingsDep,
    extract_access_token,
)
from src.app.core.rate_limit import limiter
from src.app.models.base import utc_now
from src.app.schemas.account import AccountRead, MessageResponse
from src.app.schemas.auth import (
    AuthResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordResetRequestResponse,
    RefreshRequest,
    ResendVerificationRequest,
    SignInRequest,
    SignUpRequest,
    TokenValidation,
    ValidateTokenResponse,
    VerifyEmailRequest,
    VerifyEmailResponse,
)
from src.app.services.auth_service import AuthResult

router = APIRouter(prefix="/auth", tags=["auth"])

_TOKEN_EXAMPLE = {
    "user": {"id": "550e8400-e29b-41d4-a716-446655440000", "email": "user@example.com"},
    "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
    "refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
    "token_type": "bearer",
    "expires_in": 86400,
}


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=AccountRead.model_validate(result.account),
        access_token=result.tokens.access.token,
        refresh_token=result.tokens.refresh.token,
        expires_in=result.tokens.expires_in,
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {
            "description": "Account created; tokens returned and set as cookies",
            "content": {"application/json": {"example": _TOKEN_EXAMPLE}},
        },
        400: {"description": "Invalid input or weak password"},
        409: {"description": "Email or username already registered"},
    },
)
@limiter.limit("5/minute")
async def signup(
    request: Request,
    data: SignUpRequest,
    response: Response,
    service: AuthServiceDep,
    client: ClientInfoDep,
    settings: SettingsDep,
) -> AuthResponse:
    """Register a new account.

    A verification email is queued; the account can sign in before verifying.
    """
    result = await service.register(data, client)
    set_auth_cookies(response, result.tokens, settings)
    return _auth_response(result)


@router.post(
    "/signin",
    response_model=AuthResponse,
    responses={
        200: {
            "description": "Authenticated; tokens returned and set as cookies",
            "content": {"application/json": {"example": _TOKEN_EXAMPLE}},
        },
        401: {"description": "Invalid email or password, or inactive account"},
        423: {"description": "Account locked after repeated failures"},
    },
)
@limiter.limit("5/minute")
async def signin(
    request: Request,
    data: SignInRequest,
    response: Response,
    service: AuthServiceDep,
    client: ClientInfoDep,
    settings: SettingsDep,
) -> AuthResponse:
    """Authenticate with email and password.

    ``remember_me`` extends the access token lifetime to 7 days.
    """
    result = await service.sign_in(data, client)
    set_auth_cookies(response, result.tokens, settings)
    return _auth_response(result)


@router.post(
    "/refresh",
    response_model=AuthResponse,
    responses={
        200: {"description": "Token pair rotated"},
        401: {"description": "Missing, expired, malformed or revoked refresh token"},
    },
)
@limiter.limit("10/minute")
async def refresh(
    request: Request,
    response: Response,
    service: AuthServiceDep,
    client: ClientInfoDep,
    settings: SettingsDep,
    data: RefreshRequest | None = None,
) -> AuthResponse:
    """Exchange a refresh token (body or cookie) for a new token pair.

    The presented refresh token is consumed and cannot be used again.
    """
    token = (data.refresh_token if data else None) or request.cookies.get(
        settings.refresh_cookie_name
    )
    result = await service.refresh(token, client)
    set_auth_cookies(response, result.tokens, settings)
    return _auth_response(result)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    account: CurrentAccount,
    response: Response,
    service: AuthServiceDep,
    settings: SettingsDep,
) -> MessageResponse:
    """Revoke every refresh token of the account and clear auth cookies."""
    await service.logout(account)
    clear_auth_cookies(response, settings)
    return MessageResponse(message="Logged out successfully")


@router.post("/request-password-reset", response_model=PasswordResetRequestResponse)
@limiter.limit("3/minute")
async def request_password_reset(
    request: Request,
    data: PasswordResetRequest,
    service: AuthServiceDep,
    client: ClientInfoDep,
    settings: SettingsDep,
) -> PasswordResetRequestResponse:
    """Email a password reset link.

    The response is identical whether or not the email is registered.
    """
    await service.request_password_reset(data.email, client)
    return PasswordResetRequestResponse(
        expires_in_minutes=settings.password_reset_expire_hours * 60
    )


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={400: {"description": "Invalid token, mismatched or weak password"}},
)
@limiter.limit("5/minute")
async def reset_password(
    request: Request,
    data: PasswordResetConfirm,
    service: AuthServiceDep,
) -> MessageResponse:
    """Set a new password using an emailed reset token. Signs out all sessions."""
    await service.reset_password(data)
    return MessageResponse(
        message="Password has been reset. Please sign in with your new password."
    )


@router.post(
    "/verify-email",
    response_model=VerifyEmailResponse,
    responses={400: {"description": "Invalid or expired token, or already verified"}},
)
@limiter.limit("10/minute")
async def verify_email(
    request: Request,
    data: VerifyEmailRequest,
    service: AuthServiceDep,
) -> VerifyEmailResponse:
    account = await service.verify_email(data.token)
    return VerifyEmailResponse(
        message="Email verified successfully",
        verified=True,
        user=AccountRead.model_validate(account),
    )


@router.post("/resend-verification", response_model=MessageResponse)
@limiter.limit("3/minute")
async def resend_verification(
    request: Request,
    data: ResendVerificationRequest,
    service: AuthServiceDep,
    client: ClientInfoDep,
) -> MessageResponse:
    await service.resend_verification(data.email, client)
    return MessageResponse(
        message=(
            "If an unverified account with that email exists, "
            "a verification email has been sent"
        )
    )


@router.get(
    "/validate-token",
    response_model=ValidateTokenResponse,
    responses={
        401: {"description": "NoToken, TokenExpired or TokenMalformed"},
        403: {"description": "AccountInactive or AccountLocked"},
        404: {"description": "UserNotFound"},
    },
)
async def validate_token(request: Request, service: AuthServiceDep) -> ValidateTokenResponse:
    """Validate an access token for a subdomain gate.

    Accepts ``Authorization: Bearer`` or the access cookie. Failures carry a
    discriminating ``error`` code.
    """
    token = extract_access_token(request, prefer_header=True)
    account, claims = await service.validate_access_token(token)
    return ValidateTokenResponse(
        user=AccountRead.model_validate(account),
        validation=TokenValidation(
            issued_at=claims.issued_at,
            expires_at=claims.expires_at,
            validated_at=utc_now(),
        ),
    )


@router.get("/me", response_model=AccountRead)
async def me(account: CurrentAccount) -> AccountRead:
    return AccountRead.model_validate(account)
