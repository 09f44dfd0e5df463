"""Input validators and free-text sanitizing."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from src.app.core.exceptions import ValidationError

MIN_PASSWORD_LENGTH: Final[int] = 8
STRONG_PASSWORD_LENGTH: Final[int] = 12
MIN_HANDLE_LENGTH: Final[int] = 3
MAX_HANDLE_LENGTH: Final[int] = 30
MAX_FREE_TEXT_LENGTH: Final[int] = 1000

PASSWORD_SYMBOLS: Final[str] = '!@#$%^&*(),.?":{}|<>'

_EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_HANDLE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z0-9_]+$")
_SYMBOL_PATTERN: Final[re.Pattern[str]] = re.compile(f"[{re.escape(PASSWORD_SYMBOLS)}]")


class PasswordStrength(str, Enum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


@dataclass(frozen=True)
class PasswordCheck:
    is_valid: bool
    strength: PasswordStrength
    errors: list[str] = field(default_factory=list)


def validate_email_format(email: str) -> bool:
    return bool(_EMAIL_PATTERN.match(email))


def validate_password_strength(password: str) -> PasswordCheck:
    """Check required password rules and grade overall strength.

    Required: minimum length, upper and lower case letters, a digit and a symbol.
    Strength scores one point each for length >= 8, length >= 12, and each
    character class present; <= 2 is weak, <= 4 medium, otherwise strong.
    """
    has_upper = any(c.isupper() for c in password)
    has_lower = any(c.islower() for c in password)
    has_digit = any(c.isdigit() for c in password)
    has_symbol = bool(_SYMBOL_PATTERN.search(password))

    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not has_upper:
        errors.append("Password must contain at least one uppercase letter")
    if not has_lower:
        errors.append("Password must contain at least one lowercase letter")
    if not has_digit:
        errors.append("Password must contain at least one number")
    if not has_symbol:
        errors.append("Password must contain at least one special character")

    score = sum(
        [
            len(password) >= MIN_PASSWORD_LENGTH,
            len(password) >= STRONG_PASSWORD_LENGTH,
            has_upper,
            has_lower,
            has_digit,
            has_symbol,
        ]
    )
    if score <= 2:
        strength = PasswordStrength.WEAK
    elif score <= 4:
        strength = PasswordStrength.MEDIUM
    else:
        strength = PasswordStrength.STRONG

    return PasswordCheck(is_valid=not errors, strength=strength, errors=errors)


def require_valid_password(password: str) -> None:
    """Raise ValidationError listing every unmet password rule."""
    check = validate_password_strength(password)
    if not check.is_valid:
        raise ValidationError(
            "; ".join(check.errors),
            code="WeakPassword",
            details={"errors": check.errors, "strength": check.strength.value},
        )


def validate_handle_format(handle: str) -> list[str]:
    """Return the handle format violations (empty when valid)."""
    errors = []
    if len(handle) < MIN_HANDLE_LENGTH:
        errors.append(f"Username must be at least {MIN_HANDLE_LENGTH} characters long")
    if len(handle) > MAX_HANDLE_LENGTH:
        errors.append(f"Username must be less than {MAX_HANDLE_LENGTH} characters")
    if not _HANDLE_PATTERN.match(handle):
        errors.append("Username can only contain letters, numbers, and underscores")
    return errors


def sanitize_free_text(value: str | None, max_length: int = MAX_FREE_TEXT_LENGTH) -> str:
    """Trim, strip angle brackets and truncate free text.

    Guards stored free-text fields against markup injection. Not a substitute
    for output encoding.
    """
    if not value:
        return ""
    return value.strip().replace("<", "").replace(">", "")[:max_length]
