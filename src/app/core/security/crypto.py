"""Cryptographic primitives - password hashing, signed tokens, and opaque token hashing."""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from hashlib import sha256
from typing import Any, Literal
from uuid import UUID, uuid4

import argon2
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from src.app.core.config import Settings
from src.app.core.exceptions import HashingError, TokenExpiredError, TokenMalformedError

TokenKind = Literal["access", "refresh"]


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for secure storage."""
    return sha256(token.encode()).hexdigest()


def generate_secure_token() -> str:
    """Generate an opaque single-use token (32 random bytes, hex encoded)."""
    return secrets.token_hex(32)


def generate_referral_code() -> str:
    """Generate a referral code (8 random bytes, uppercase hex)."""
    return secrets.token_hex(8).upper()


def _to_naive_utc(value: datetime) -> datetime:
    return value.astimezone(UTC).replace(tzinfo=None)


@dataclass(frozen=True)
class IssuedToken:
    """A freshly signed token and its timing metadata (naive UTC)."""

    token: str
    jti: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims of a signed token (naive UTC timestamps)."""

    subject: UUID
    token_type: TokenKind
    jti: str
    issued_at: datetime
    expires_at: datetime


class AuthPrimitives:
    """Stateless hashing and token signing helpers.

    Configuration is passed at construction so tests can build isolated
    instances with their own secrets and cost factors. Access and refresh
    tokens are signed with independent secrets and carry a ``type`` claim,
    so neither can be verified as the other.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(hours=24),
        refresh_ttl: timedelta = timedelta(days=7),
        argon2_time_cost: int = 3,
        argon2_memory_cost: int = 65536,
        argon2_parallelism: int = 1,
    ):
        self._secrets: dict[TokenKind, str] = {
            "access": access_secret,
            "refresh": refresh_secret,
        }
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._password_hasher = argon2.PasswordHasher(
            time_cost=argon2_time_cost,
            memory_cost=argon2_memory_cost,
            parallelism=argon2_parallelism,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthPrimitives":
        return cls(
            access_secret=settings.jwt_access_secret_key,
            refresh_secret=settings.jwt_refresh_secret_key,
            algorithm=settings.jwt_algorithm,
            access_ttl=timedelta(hours=settings.access_token_expire_hours),
            refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
            argon2_time_cost=settings.argon2_time_cost,
            argon2_memory_cost=settings.argon2_memory_cost,
            argon2_parallelism=settings.argon2_parallelism,
        )

    # Passwords

    def hash_secret(self, plaintext: str) -> str:
        """Hash a password using Argon2id."""
        try:
            return self._password_hasher.hash(plaintext)
        except argon2.exceptions.HashingError as e:
            raise HashingError() from e

    def verify_secret(self, plaintext: str, hashed: str) -> bool:
        """Verify a password against its hash.

        Returns False on mismatch. Raises HashingError only when the stored
        hash itself is malformed.
        """
        try:
            return self._password_hasher.verify(hashed, plaintext)
        except argon2.exceptions.VerificationError:
            return False
        except argon2.exceptions.InvalidHashError as e:
            raise HashingError("Stored password hash is malformed") from e

    # Signed tokens

    def _issue(self, kind: TokenKind, account_id: UUID, ttl: timedelta) -> IssuedToken:
        issued_at = datetime.now(UTC)
        expires_at = issued_at + ttl
        jti = str(uuid4())  # Unique per token so rotated tokens never collide on hash
        token: str = jwt.encode(  # type: ignore[assignment]
            {
                "sub": str(account_id),
                "type": kind,
                "iat": issued_at,
                "exp": expires_at,
                "jti": jti,
            },
            self._secrets[kind],
            algorithm=self.algorithm,
        )
        return IssuedToken(
            token=token,
            jti=jti,
            issued_at=_to_naive_utc(issued_at),
            expires_at=_to_naive_utc(expires_at),
        )

    def issue_access_token(self, account_id: UUID, ttl: timedelta | None = None) -> IssuedToken:
        return self._issue("access", account_id, ttl or self.access_ttl)

    def issue_refresh_token(self, account_id: UUID) -> IssuedToken:
        return self._issue("refresh", account_id, self.refresh_ttl)

    def _verify(self, kind: TokenKind, token: str) -> TokenClaims:
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self.algorithm],
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JWTError as e:
            raise TokenMalformedError() from e

        if payload.get("type") != kind:
            raise TokenMalformedError("Invalid token type")

        try:
            return TokenClaims(
                subject=UUID(str(payload["sub"])),
                token_type=kind,
                jti=str(payload.get("jti", "")),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), UTC).replace(tzinfo=None),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), UTC).replace(tzinfo=None),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TokenMalformedError() from e

    def verify_access_token(self, token: str) -> TokenClaims:
        return self._verify("access", token)

    def verify_refresh_token(self, token: str) -> TokenClaims:
        return self._verify("refresh", token)
