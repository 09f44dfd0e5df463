"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import AccountFactory, AccessGrantFactory, ...
"""

from tests.factories.access import AccessGrantFactory, ContactMessageFactory
from tests.factories.account import DEFAULT_TEST_PASSWORD, AccountFactory
from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.tokens import CredentialTokenFactory, generate_token_hash

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid",
    "utc_now",
    # Accounts
    "AccountFactory",
    "DEFAULT_TEST_PASSWORD",
    # Tokens
    "CredentialTokenFactory",
    "generate_token_hash",
    # Access
    "AccessGrantFactory",
    "ContactMessageFactory",
]
