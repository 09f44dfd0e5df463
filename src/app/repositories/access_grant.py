"""Repository for AccessGrant entity."""

from uuid import UUID

from sqlalchemy import delete, or_
from sqlmodel import col, select

from src.app.models import AccessGrant, GrantStatus, ProtectedResource
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class AccessGrantRepository(BaseRepository[AccessGrant]):
    model = AccessGrant

    async def get_pending(
        self, account_id: UUID, resource: ProtectedResource
    ) -> AccessGrant | None:
        result = await self.session.execute(
            select(AccessGrant).where(
                AccessGrant.account_id == account_id,
                AccessGrant.resource_id == resource.value,
                AccessGrant.status == GrantStatus.PENDING.value,
            )
        )
        return result.scalar_one_or_none()

    async def get_active(
        self, account_id: UUID, resource: ProtectedResource
    ) -> AccessGrant | None:
        """Get an approved grant that has no expiry or has not expired yet."""
        result = await self.session.execute(
            select(AccessGrant)
            .where(
                AccessGrant.account_id == account_id,
                AccessGrant.resource_id == resource.value,
                AccessGrant.status == GrantStatus.APPROVED.value,
                or_(
                    col(AccessGrant.expires_at).is_(None),
                    col(AccessGrant.expires_at) > utc_now(),
                ),
            )
            .order_by(col(AccessGrant.reviewed_at).desc())
            .limit(1)
        )
        return result.scalars().first()

    async def get_latest(
        self, account_id: UUID, resource: ProtectedResource
    ) -> AccessGrant | None:
        result = await self.session.execute(
            select(AccessGrant)
            .where(
                AccessGrant.account_id == account_id,
                AccessGrant.resource_id == resource.value,
            )
            .order_by(col(AccessGrant.created_at).desc())
            .limit(1)
        )
        return result.scalars().first()

    async def list_for_account(self, account_id: UUID) -> list[AccessGrant]:
        result = await self.session.execute(
            select(AccessGrant)
            .where(AccessGrant.account_id == account_id)
            .order_by(col(AccessGrant.created_at).desc())
        )
        return list(result.scalars().all())

    async def list_filtered(
        self,
        cursor: str | None,
        limit: int,
        status: GrantStatus | None = None,
        resource: ProtectedResource | None = None,
    ) -> tuple[list[AccessGrant], str | None, bool]:
        query = select(AccessGrant)
        if status:
            query = query.where(AccessGrant.status == status.value)
        if resource:
            query = query.where(AccessGrant.resource_id == resource.value)
        return await self.paginate(query, cursor, limit, col(AccessGrant.created_at))

    async def count_by_status(self) -> dict[str, int]:
        return await self.count_grouped(col(AccessGrant.status))

    async def purge(self) -> int:
        """Delete every access grant. Returns the number deleted."""
        result = await self.session.execute(delete(AccessGrant))
        return result.rowcount or 0  # type: ignore[attr-defined]
