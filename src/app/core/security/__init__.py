"""Security utilities - crypto and validators.

Re-exports all security-related functions for convenience.
"""

from src.app.core.security.crypto import (
    AuthPrimitives,
    IssuedToken,
    TokenClaims,
    generate_referral_code,
    generate_secure_token,
    hash_token,
)
from src.app.core.security.headers import DOCS_CSP, SecurityHeadersMiddleware
from src.app.core.security.validators import (
    PasswordCheck,
    PasswordStrength,
    require_valid_password,
    sanitize_free_text,
    validate_email_format,
    validate_handle_format,
    validate_password_strength,
)

__all__ = [
    # Crypto
    "AuthPrimitives",
    "IssuedToken",
    "TokenClaims",
    "generate_referral_code",
    "generate_secure_token",
    "hash_token",
    # Headers
    "DOCS_CSP",
    "SecurityHeadersMiddleware",
    # Validators
    "PasswordCheck",
    "PasswordStrength",
    "require_valid_password",
    "sanitize_free_text",
    "validate_email_format",
    "validate_handle_format",
    "validate_password_strength",
]
