"""Account service - profile self-service and administrative account management."""

from datetime import UTC
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.app.core.logging import get_logger
from src.app.core.security import (
    AuthPrimitives,
    generate_referral_code,
    require_valid_password,
    sanitize_free_text,
    validate_handle_format,
)
from src.app.models import Account, AccountRole, AccountStatus, TokenType
from src.app.models.base import utc_now
from src.app.repositories import AccountRepository, CredentialTokenRepository
from src.app.schemas.account import AccountStats, PasswordChangeRequest, ProfileUpdate

logger = get_logger(__name__)


class AccountService:
    def __init__(
        self,
        account_repo: AccountRepository,
        token_repo: CredentialTokenRepository,
        session: AsyncSession,
        primitives: AuthPrimitives,
    ):
        self.account_repo = account_repo
        self.token_repo = token_repo
        self.session = session
        self.primitives = primitives

    async def get_by_id(self, account_id: UUID) -> Account:
        account = await self.account_repo.get_by_id(account_id)
        if account is None:
            raise NotFoundError("User not found", code="UserNotFound")
        return account

    # Self-service

    async def update_profile(self, account: Account, data: ProfileUpdate) -> Account:
        """Apply a partial profile update.

        Raises:
            ValidationError: Invalid handle format.
            ConflictError: Handle taken by another account.
        """
        updates = data.model_dump(exclude_unset=True)

        if "handle" in updates and updates["handle"]:
            handle = updates["handle"].strip()
            handle_errors = validate_handle_format(handle)
            if handle_errors:
                raise ValidationError("; ".join(handle_errors), code="InvalidHandle")
            if await self.account_repo.handle_taken(handle, exclude_id=account.id):
                raise ConflictError("Username is already taken", code="HandleTaken")
            updates["handle"] = handle

        for name in ("first_name", "last_name"):
            if name in updates:
                updates[name] = sanitize_free_text(updates[name])
                if len(updates[name]) < 2:
                    raise ValidationError(f"{name.replace('_', ' ').capitalize()} is too short")
        if "bio" in updates:
            updates["bio"] = sanitize_free_text(updates["bio"], max_length=500) or None

        for key, value in updates.items():
            setattr(account, key, value)
        account.updated_at = utc_now()

        try:
            self.account_repo.add(account)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Username is already taken", code="HandleTaken") from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Profile updated", account_id=str(account.id), fields=sorted(updates))
        return account

    async def change_password(self, account: Account, data: PasswordChangeRequest) -> None:
        """Replace the password after re-checking the current one.

        Raises:
            ValidationError: Mismatch, weak password, or new equals current.
            AuthenticationError: Current password is wrong.
        """
        if data.new_password != data.confirm_password:
            raise ValidationError("Passwords do not match", code="PasswordMismatch")
        require_valid_password(data.new_password)
        if not self.primitives.verify_secret(data.current_password, account.hashed_password):
            raise AuthenticationError("Current password is incorrect", code="InvalidCredentials")
        if data.new_password == data.current_password:
            raise ValidationError(
                "New password must be different from the current password", code="PasswordReused"
            )

        try:
            account.hashed_password = self.primitives.hash_secret(data.new_password)
            account.updated_at = utc_now()
            self.account_repo.add(account)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Password changed", account_id=str(account.id))

    async def delete_account(self, account: Account, password: str) -> None:
        """Soft-delete: deactivate, scrub identifying fields, revoke sessions."""
        if not self.primitives.verify_secret(password, account.hashed_password):
            raise AuthenticationError("Password is incorrect", code="InvalidCredentials")

        try:
            now = utc_now()
            account.is_active = False
            account.status = AccountStatus.DEACTIVATED.value
            deleted_ms = int(now.replace(tzinfo=UTC).timestamp() * 1000)
            account.email = f"deleted_{deleted_ms}_{account.id.hex[:8]}@deleted.com"
            account.handle = None
            account.bio = None
            account.avatar_url = None
            account.updated_at = now
            self.account_repo.add(account)
            await self.token_repo.revoke_all(account.id, TokenType.REFRESH)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Account deactivated by owner", account_id=str(account.id))

    # Administration

    async def list_accounts(
        self,
        cursor: str | None = None,
        limit: int = 20,
        role: AccountRole | None = None,
        status: AccountStatus | None = None,
        search: str | None = None,
    ) -> tuple[list[Account], str | None, bool]:
        return await self.account_repo.list_filtered(
            cursor,
            limit,
            role=role.value if role else None,
            status=status.value if status else None,
            search=search,
        )

    async def update_role(self, admin: Account, account_id: UUID, role: AccountRole) -> Account:
        """Change another account's role.

        Raises:
            AuthorizationError: Admin tried to change their own role.
            ValidationError: Role unchanged.
        """
        if account_id == admin.id:
            raise AuthorizationError("You cannot change your own role", code="SelfRoleChange")

        account = await self.get_by_id(account_id)
        if account.role == role.value:
            raise ValidationError(f"User already has role '{role.value}'", code="NoChange")

        try:
            previous = account.role
            account.role = role.value
            account.updated_at = utc_now()
            self.account_repo.add(account)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Account role changed",
            account_id=str(account.id),
            admin_id=str(admin.id),
            previous_role=previous,
            role=role.value,
        )
        return account

    async def update_status(
        self, admin: Account, account_id: UUID, status: AccountStatus
    ) -> Account:
        """Change another account's status; ``is_active`` follows ``status == active``."""
        if account_id == admin.id:
            raise AuthorizationError("You cannot change your own status", code="SelfStatusChange")

        account = await self.get_by_id(account_id)
        if account.status == status.value:
            raise ValidationError(f"User already has status '{status.value}'", code="NoChange")

        try:
            account.status = status.value
            account.is_active = status == AccountStatus.ACTIVE
            account.updated_at = utc_now()
            self.account_repo.add(account)
            if not account.is_active:
                await self.token_repo.revoke_all(account.id, TokenType.REFRESH)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Account status changed",
            account_id=str(account.id),
            admin_id=str(admin.id),
            status=status.value,
        )
        return account

    async def stats(self) -> AccountStats:
        by_role = await self.account_repo.count_by_role()
        by_status = await self.account_repo.count_by_status()
        return AccountStats(total=sum(by_role.values()), by_role=by_role, by_status=by_status)

    # Bootstrap

    async def ensure_initial_admin(self, email: str, password: str) -> Account | None:
        """Create a verified admin account if none exists for ``email``.

        Returns the created account, or None when it already existed.
        """
        email = email.strip().lower()
        if await self.account_repo.get_by_email(email) is not None:
            return None

        require_valid_password(password)
        now = utc_now()
        account = Account(
            email=email,
            hashed_password=self.primitives.hash_secret(password),
            first_name="System",
            last_name="Administrator",
            role=AccountRole.ADMIN.value,
            email_verified=True,
            email_verified_at=now,
            referral_code=generate_referral_code(),
        )
        try:
            self.account_repo.add(account)
            await self.session.commit()
        except IntegrityError:
            # Another worker created it concurrently
            await self.session.rollback()
            return None
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Initial admin account created", account_id=str(account.id))
        return account
