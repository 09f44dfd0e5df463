"""Account factory for test data generation."""

from datetime import timedelta
from functools import lru_cache

from polyfactory import Use

from src.app.core.config import get_settings
from src.app.core.security import AuthPrimitives, generate_referral_code
from src.app.models import Account
from src.app.models.enums import AccountRole, AccountStatus
from tests.factories.base import BaseFactory, generate_uuid, utc_now

# Default test password - stored for convenience in tests
DEFAULT_TEST_PASSWORD = "Correct.Horse42!"


@lru_cache
def _primitives() -> AuthPrimitives:
    return AuthPrimitives.from_settings(get_settings())


class AccountFactory(BaseFactory):
    """Factory for generating Account test data."""

    __model__ = Account

    id = Use(generate_uuid)
    email = Use(lambda: f"user_{generate_uuid().hex[-8:]}@example.com")
    handle = None
    hashed_password = Use(lambda: _primitives().hash_secret(DEFAULT_TEST_PASSWORD))
    first_name = "Test"
    last_name = "User"
    avatar_url = None
    bio = None
    role = AccountRole.USER.value
    is_active = True
    status = AccountStatus.ACTIVE.value
    email_verified = True
    email_verified_at = Use(utc_now)
    failed_login_attempts = 0
    lock_until = None
    last_login_at = None
    last_login_ip = None
    registered_at = Use(utc_now)
    registration_ip = None
    referred_by_id = None
    referral_code = Use(generate_referral_code)
    created_at = Use(utc_now)
    updated_at = Use(utc_now)

    @classmethod
    def admin(cls, **kwargs):
        """Create an admin account."""
        return cls.build(
            role=AccountRole.ADMIN.value,
            first_name=kwargs.pop("first_name", "Admin"),
            **kwargs,
        )

    @classmethod
    def unverified(cls, **kwargs):
        """Create an account that has not verified its email."""
        return cls.build(email_verified=False, email_verified_at=None, **kwargs)

    @classmethod
    def inactive(cls, **kwargs):
        """Create a deactivated account."""
        return cls.build(is_active=False, status=AccountStatus.DEACTIVATED.value, **kwargs)

    @classmethod
    def locked(cls, minutes: int = 30, **kwargs):
        """Create an account locked after repeated failed sign-ins."""
        return cls.build(
            failed_login_attempts=5,
            lock_until=utc_now() + timedelta(minutes=minutes),
            **kwargs,
        )
