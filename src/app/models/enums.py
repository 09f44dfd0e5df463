"""Shared enums for models."""

from enum import Enum


class AccountRole(str, Enum):
    """Authorization role of an account."""

    USER = "user"
    ADMIN = "admin"


class AccountStatus(str, Enum):
    """Administrative status of an account."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    DEACTIVATED = "deactivated"


class TokenType(str, Enum):
    """Purpose of a stored credential token."""

    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"
    REFRESH = "refresh"


class GrantStatus(str, Enum):
    """Access grant review status."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    REVOKED = "revoked"


class ProtectedResource(str, Enum):
    """Closed set of subdomain resources guarded by an access grant."""

    AI_TRL = "ai-trl"
    AI_TUTOT = "ai-tutot"

    @property
    def display_name(self) -> str:
        return _RESOURCE_DISPLAY_NAMES[self]


_RESOURCE_DISPLAY_NAMES = {
    ProtectedResource.AI_TRL: "AI Training & Learning Platform",
    ProtectedResource.AI_TUTOT: "AI Tutorial Platform",
}


class ContactStatus(str, Enum):
    """Handling status of a contact form message."""

    PENDING = "pending"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"


class HttpMethod(str, Enum):
    """Request methods accepted on analytics events."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
