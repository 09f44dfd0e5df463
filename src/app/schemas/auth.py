from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from src.app.schemas.account import AccountRead


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    handle: str | None = Field(None, max_length=30)
    referral_code: str | None = Field(None, max_length=16)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    remember_me: bool = False


class AuthResponse(BaseModel):
    """Account plus a fresh token pair. Tokens are also set as cookies."""

    user: AccountRead
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token lifetime in seconds")


class RefreshRequest(BaseModel):
    """Refresh token may be omitted when sent as a cookie."""

    refresh_token: str | None = None


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetRequestResponse(BaseModel):
    message: str = "If an account with that email exists, a password reset link has been sent"
    expires_in_minutes: int = 60


class PasswordResetConfirm(BaseModel):
    token: str = Field(min_length=32, max_length=128)
    new_password: str = Field(min_length=1, max_length=128)
    confirm_password: str = Field(min_length=1, max_length=128)


class VerifyEmailRequest(BaseModel):
    token: str = Field(min_length=32, max_length=128)


class VerifyEmailResponse(BaseModel):
    message: str
    verified: bool
    user: AccountRead


class ResendVerificationRequest(BaseModel):
    email: EmailStr


class TokenValidation(BaseModel):
    valid: bool = True
    issued_at: datetime
    expires_at: datetime
    validated_at: datetime


class ValidateTokenResponse(BaseModel):
    """Contract consumed by subdomain gates."""

    success: bool = True
    message: str = "Token is valid"
    user: AccountRead
    validation: TokenValidation
