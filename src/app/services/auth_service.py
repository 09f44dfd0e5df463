"""Authentication service - sign-up, sign-in, token rotation, recovery and verification."""

import secrets
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.config import Settings
from src.app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    LockedError,
    NotFoundError,
    ValidationError,
)
from src.app.core.logging import get_logger
from src.app.core.notifications import EmailService, NotificationQueue
from src.app.core.security import (
    AuthPrimitives,
    IssuedToken,
    TokenClaims,
    generate_referral_code,
    generate_secure_token,
    hash_token,
    require_valid_password,
    sanitize_free_text,
    validate_handle_format,
)
from src.app.models import Account, AccountStatus, CredentialToken, TokenType
from src.app.models.base import utc_now
from src.app.repositories import AccountRepository, CredentialTokenRepository
from src.app.schemas.auth import PasswordResetConfirm, SignInRequest, SignUpRequest

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class ClientInfo:
    """Request metadata recorded alongside tokens and logins."""

    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class SessionTokens:
    access: IssuedToken
    refresh: IssuedToken

    @property
    def expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return int((self.access.expires_at - self.access.issued_at).total_seconds())


@dataclass(frozen=True)
class AuthResult:
    account: Account
    tokens: SessionTokens


def ensure_account_usable(account: Account) -> None:
    """Reject accounts that are inactive, suspended, deactivated or locked."""
    if not account.is_active or account.status == AccountStatus.DEACTIVATED.value:
        raise AuthorizationError("Account is inactive", code="AccountInactive")
    if account.status != AccountStatus.ACTIVE.value:
        raise AuthorizationError(f"Account is {account.status}", code="AccountInactive")
    if account.is_locked:
        raise AuthorizationError("Account is locked", code="AccountLocked")


class AuthService:
    """Session and credential flows for a single account at a time.

    Every operation commits its own unit of work and rolls back on failure.
    Best-effort emails are handed to the notification queue after commit so a
    delivery failure never undoes the state transition.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        token_repo: CredentialTokenRepository,
        session: AsyncSession,
        primitives: AuthPrimitives,
        email_service: EmailService,
        notifications: NotificationQueue,
        settings: Settings,
    ):
        self.account_repo = account_repo
        self.token_repo = token_repo
        self.session = session
        self.primitives = primitives
        self.email_service = email_service
        self.notifications = notifications
        self.settings = settings

    # Helpers

    def _token_lifetime(self, token_type: TokenType) -> timedelta:
        if token_type == TokenType.EMAIL_VERIFICATION:
            return timedelta(hours=self.settings.email_verification_expire_hours)
        if token_type == TokenType.PASSWORD_RESET:
            return timedelta(hours=self.settings.password_reset_expire_hours)
        return timedelta(days=self.settings.refresh_token_expire_days)

    def _create_single_use_token(
        self, account: Account, token_type: TokenType, client: ClientInfo
    ) -> str:
        """Stage a verification or reset token and return its plaintext."""
        token = generate_secure_token()
        self.token_repo.add(
            CredentialToken(
                account_id=account.id,
                token_hash=hash_token(token),
                token_type=token_type.value,
                expires_at=utc_now() + self._token_lifetime(token_type),
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
        )
        return token

    def _issue_session(
        self, account: Account, client: ClientInfo, remember_me: bool = False
    ) -> SessionTokens:
        """Sign an access/refresh pair and stage the refresh record."""
        access_ttl = timedelta(days=self.settings.remember_me_expire_days) if remember_me else None
        access = self.primitives.issue_access_token(account.id, access_ttl)
        refresh = self.primitives.issue_refresh_token(account.id)
        self.token_repo.add(
            CredentialToken(
                account_id=account.id,
                token_hash=hash_token(refresh.token),
                token_type=TokenType.REFRESH.value,
                expires_at=refresh.expires_at,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
        )
        return SessionTokens(access=access, refresh=refresh)

    async def _unique_referral_code(self) -> str:
        for _ in range(5):
            code = generate_referral_code()
            if await self.account_repo.get_by_referral_code(code) is None:
                return code
        # 64 bits of randomness; repeated collisions mean something else is wrong
        return secrets.token_hex(8).upper()

    # Registration

    async def register(self, data: SignUpRequest, client: ClientInfo) -> AuthResult:
        """Create an account, issue a verification token and start a session.

        Raises:
            ValidationError: Password or handle rules not met.
            ConflictError: Email or handle already registered.
        """
        email = data.email.strip().lower()
        require_valid_password(data.password)

        handle = data.handle.strip() if data.handle else None
        if handle:
            handle_errors = validate_handle_format(handle)
            if handle_errors:
                raise ValidationError("; ".join(handle_errors), code="InvalidHandle")

        try:
            if await self.account_repo.get_by_email(email) is not None:
                raise ConflictError(
                    "An account with this email already exists", code="EmailTaken"
                )
            if handle and await self.account_repo.handle_taken(handle):
                raise ConflictError("Username is already taken", code="HandleTaken")

            referrer = None
            if data.referral_code:
                referrer = await self.account_repo.get_by_referral_code(data.referral_code)
                if referrer is None:
                    logger.info("Unknown referral code ignored", referral_code=data.referral_code)

            account = Account(
                email=email,
                handle=handle,
                hashed_password=self.primitives.hash_secret(data.password),
                first_name=sanitize_free_text(data.first_name),
                last_name=sanitize_free_text(data.last_name),
                registration_ip=client.ip_address,
                referred_by_id=referrer.id if referrer else None,
                referral_code=await self._unique_referral_code(),
            )
            self.account_repo.add(account)
            await self.session.flush()

            verification_token = self._create_single_use_token(
                account, TokenType.EMAIL_VERIFICATION, client
            )
            tokens = self._issue_session(account, client)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError(
                "An account with this email or username already exists", code="EmailTaken"
            ) from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Account registered", account_id=str(account.id))

        self.notifications.submit(
            "verification_email",
            self.email_service.send_verification_email(
                account.email, account.full_name, verification_token
            ),
            account_id=str(account.id),
        )
        self.notifications.submit(
            "welcome_email",
            self.email_service.send_welcome_email(account.email, account.full_name),
            account_id=str(account.id),
        )
        return AuthResult(account=account, tokens=tokens)

    # Sign-in

    async def sign_in(self, data: SignInRequest, client: ClientInfo) -> AuthResult:
        """Authenticate by email and password.

        Status checks run before the password check. A wrong password counts
        toward the lockout threshold and yields the same generic error as an
        unknown email.

        Raises:
            AuthenticationError: Unknown email, wrong password or inactive account.
            LockedError: Too many recent failures.
        """
        account = await self.account_repo.get_by_email(data.email)
        if account is None:
            raise AuthenticationError(INVALID_CREDENTIALS, code="InvalidCredentials")

        if account.is_locked:
            raise LockedError(
                "Account is temporarily locked due to too many failed login attempts",
                details={
                    "lock_until": account.lock_until.isoformat() if account.lock_until else None
                },
            )

        if not account.is_active or account.status != AccountStatus.ACTIVE.value:
            raise AuthenticationError("Account is inactive", code="AccountInactive")

        if not self.primitives.verify_secret(data.password, account.hashed_password):
            try:
                await self.account_repo.record_failed_login(
                    account,
                    max_attempts=self.settings.max_login_attempts,
                    lockout=timedelta(minutes=self.settings.lockout_minutes),
                )
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            logger.warning(
                "Failed sign-in",
                account_id=str(account.id),
                failed_attempts=account.failed_login_attempts,
                locked=account.is_locked,
            )
            raise AuthenticationError(INVALID_CREDENTIALS, code="InvalidCredentials")

        try:
            now = utc_now()
            account.failed_login_attempts = 0
            account.lock_until = None
            account.last_login_at = now
            account.last_login_ip = client.ip_address
            account.updated_at = now
            self.account_repo.add(account)
            tokens = self._issue_session(account, client, remember_me=data.remember_me)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Account signed in", account_id=str(account.id), remember_me=data.remember_me)
        return AuthResult(account=account, tokens=tokens)

    # Refresh and logout

    async def refresh(self, refresh_token: str | None, client: ClientInfo) -> AuthResult:
        """Rotate a refresh token into a new access/refresh pair.

        The presented token must be cryptographically valid AND have an unused
        stored record; the record is marked used so the token works only once.
        """
        if not refresh_token:
            raise AuthenticationError("Refresh token required", code="NoToken")

        claims = self.primitives.verify_refresh_token(refresh_token)

        try:
            record = await self.token_repo.get_valid(
                hash_token(refresh_token), TokenType.REFRESH, for_update=True
            )
            if record is None or record.account_id != claims.subject:
                raise AuthenticationError(
                    "Refresh token is invalid or has been revoked", code="TokenRevoked"
                )

            account = await self.account_repo.get_by_id(claims.subject)
            if (
                account is None
                or not account.is_active
                or account.status != AccountStatus.ACTIVE.value
            ):
                raise AuthenticationError("Account is inactive", code="AccountInactive")

            self.token_repo.mark_used(record)
            tokens = self._issue_session(account, client)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Refresh token rotated", account_id=str(account.id))
        return AuthResult(account=account, tokens=tokens)

    async def logout(self, account: Account) -> int:
        """Revoke every outstanding refresh token of the account."""
        try:
            revoked = await self.token_repo.revoke_all(account.id, TokenType.REFRESH)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Account logged out", account_id=str(account.id), revoked_tokens=revoked)
        return revoked

    # Password reset

    async def request_password_reset(self, email: str, client: ClientInfo) -> None:
        """Issue and email a reset token.

        Unknown and inactive accounts return silently so callers cannot check
        for registered emails. Delivery failure is raised: the emailed link is
        the only way to recover the account.

        Raises:
            EmailDeliveryError: The reset email could not be sent.
        """
        account = await self.account_repo.get_by_email(email)
        if account is None:
            logger.info("Password reset requested for unknown email")
            return
        if not account.is_active or account.status != AccountStatus.ACTIVE.value:
            logger.info("Password reset requested for inactive account", account_id=str(account.id))
            return

        try:
            await self.token_repo.revoke_all(account.id, TokenType.PASSWORD_RESET)
            token = self._create_single_use_token(account, TokenType.PASSWORD_RESET, client)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.email_service.send_password_reset_email(account.email, account.full_name, token)
        logger.info("Password reset email sent", account_id=str(account.id))

    async def reset_password(self, data: PasswordResetConfirm) -> Account:
        """Consume a reset token, set the new password and sign out everywhere.

        Raises:
            ValidationError: Mismatched or weak password, unusable token, inactive account.
        """
        if data.new_password != data.confirm_password:
            raise ValidationError("Passwords do not match", code="PasswordMismatch")
        require_valid_password(data.new_password)

        try:
            record = await self.token_repo.get_valid(
                hash_token(data.token), TokenType.PASSWORD_RESET, for_update=True
            )
            if record is None:
                raise ValidationError("Invalid or expired reset token", code="InvalidToken")

            account = await self.account_repo.get_by_id(record.account_id)
            if account is None or not account.is_active:
                raise ValidationError("Account is inactive", code="AccountInactive")

            account.hashed_password = self.primitives.hash_secret(data.new_password)
            account.failed_login_attempts = 0
            account.lock_until = None
            account.updated_at = utc_now()
            self.account_repo.add(account)
            self.token_repo.mark_used(record)
            await self.token_repo.revoke_all(account.id, TokenType.REFRESH)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Password reset completed", account_id=str(account.id))
        self.notifications.submit(
            "password_reset_confirmation",
            self.email_service.send_password_reset_confirmation(account.email, account.full_name),
            account_id=str(account.id),
        )
        return account

    # Email verification

    async def verify_email(self, token: str) -> Account:
        """Consume a verification token and mark the email verified.

        Raises:
            ValidationError: Unusable token or email already verified.
            NotFoundError: The owning account no longer exists.
        """
        try:
            record = await self.token_repo.get_valid(
                hash_token(token), TokenType.EMAIL_VERIFICATION, for_update=True
            )
            if record is None:
                raise ValidationError(
                    "Invalid or expired verification token", code="InvalidToken"
                )

            account = await self.account_repo.get_by_id(record.account_id)
            if account is None:
                raise NotFoundError("User not found", code="UserNotFound")
            if account.email_verified:
                raise ValidationError("Email is already verified", code="AlreadyVerified")

            now = utc_now()
            account.email_verified = True
            account.email_verified_at = now
            account.failed_login_attempts = 0
            account.lock_until = None
            account.updated_at = now
            self.account_repo.add(account)
            self.token_repo.mark_used(record)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Email verified", account_id=str(account.id))
        return account

    async def resend_verification(self, email: str, client: ClientInfo) -> None:
        """Send a fresh verification token. Silent for unknown or verified accounts."""
        account = await self.account_repo.get_by_email(email)
        if account is None or account.email_verified or not account.is_active:
            return

        try:
            await self.token_repo.revoke_all(account.id, TokenType.EMAIL_VERIFICATION)
            token = self._create_single_use_token(account, TokenType.EMAIL_VERIFICATION, client)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        self.notifications.submit(
            "verification_email",
            self.email_service.send_verification_email(account.email, account.full_name, token),
            account_id=str(account.id),
        )

    # Token validation

    async def validate_access_token(self, token: str | None) -> tuple[Account, TokenClaims]:
        """Resolve an access token to a usable account.

        Raises:
            AuthenticationError: No token (NoToken), TokenExpiredError, TokenMalformedError.
            NotFoundError: Account no longer exists (UserNotFound).
            AuthorizationError: Account inactive, suspended or locked.
        """
        if not token:
            raise AuthenticationError("No token provided", code="NoToken")

        claims = self.primitives.verify_access_token(token)
        account = await self.account_repo.get_by_id(claims.subject)
        if account is None:
            raise NotFoundError("User not found", code="UserNotFound")

        ensure_account_usable(account)
        return account, claims
