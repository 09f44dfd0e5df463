"""Repository for Account entity."""

from datetime import timedelta
from uuid import UUID

from sqlalchemy import and_, case, null, or_, update
from sqlmodel import col, select

from src.app.models import Account
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    model = Account

    async def get_by_email(self, email: str) -> Account | None:
        """Get account by email address (case-insensitive)."""
        result = await self.session.execute(
            select(Account).where(Account.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_referral_code(self, code: str) -> Account | None:
        result = await self.session.execute(
            select(Account).where(Account.referral_code == code.strip().upper())
        )
        return result.scalar_one_or_none()

    async def handle_taken(self, handle: str, exclude_id: UUID | None = None) -> bool:
        query = select(Account.id).where(Account.handle == handle)
        if exclude_id is not None:
            query = query.where(Account.id != exclude_id)
        result = await self.session.execute(query)
        return result.first() is not None

    async def record_failed_login(
        self, account: Account, max_attempts: int, lockout: timedelta
    ) -> Account:
        """Atomically count a failed sign-in and lock at the threshold.

        If a previous lock has already elapsed the counter restarts at 1 and the
        lock is cleared; otherwise it increments, and reaching ``max_attempts``
        while unlocked sets ``lock_until = now + lockout``. The account is
        refreshed with the stored values.
        """
        now = utc_now()
        lock_elapsed = and_(
            col(Account.lock_until).is_not(None), col(Account.lock_until) <= now
        )
        not_locked = or_(col(Account.lock_until).is_(None), col(Account.lock_until) <= now)
        stmt = (
            update(Account)
            .where(col(Account.id) == account.id)
            .values(
                failed_login_attempts=case(
                    (lock_elapsed, 1),
                    else_=Account.failed_login_attempts + 1,
                ),
                lock_until=case(
                    (lock_elapsed, null()),
                    (
                        and_(Account.failed_login_attempts + 1 >= max_attempts, not_locked),
                        now + lockout,
                    ),
                    else_=Account.lock_until,
                ),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.refresh(account, ["failed_login_attempts", "lock_until", "updated_at"])
        return account

    async def list_filtered(
        self,
        cursor: str | None,
        limit: int,
        role: str | None = None,
        status: str | None = None,
        search: str | None = None,
    ) -> tuple[list[Account], str | None, bool]:
        query = select(Account)
        if role:
            query = query.where(Account.role == role)
        if status:
            query = query.where(Account.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    col(Account.email).ilike(pattern),
                    col(Account.first_name).ilike(pattern),
                    col(Account.last_name).ilike(pattern),
                    col(Account.handle).ilike(pattern),
                )
            )
        return await self.paginate(query, cursor, limit, col(Account.created_at))

    async def count_by_role(self) -> dict[str, int]:
        return await self.count_grouped(col(Account.role))

    async def count_by_status(self) -> dict[str, int]:
        return await self.count_grouped(col(Account.status))
