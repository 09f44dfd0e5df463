"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os

# Test environment must be configured before any app imports
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_ACCESS_SECRET_KEY", "test-access-secret-0123456789abcdef0123")
os.environ.setdefault("JWT_REFRESH_SECRET_KEY", "test-refresh-secret-0123456789abcdef012")
# Cheap hashing keeps the suite fast
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("TOKEN_CLEANUP_INTERVAL_MINUTES", "0")
os.environ.setdefault("ADMIN_EMAILS", '["admin-inbox@example.com"]')

# ruff: noqa: E402 - Imports must be after env var setup
from datetime import timedelta

import pytest

from src.app.core.config import get_settings
from src.app.core.security import AuthPrimitives
from tests.helpers import RecordingEmailService

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture
def email_service() -> RecordingEmailService:
    return RecordingEmailService()


@pytest.fixture
def primitives() -> AuthPrimitives:
    """Isolated primitives with their own secrets and cheap hashing."""
    return AuthPrimitives(
        access_secret="unit-access-secret-0123456789abcdef0123456",
        refresh_secret="unit-refresh-secret-0123456789abcdef012345",
        access_ttl=timedelta(hours=24),
        refresh_ttl=timedelta(days=7),
        argon2_time_cost=1,
        argon2_memory_cost=1024,
    )
