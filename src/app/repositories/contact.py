"""Repository for ContactMessage entity."""

from sqlmodel import col, select

from src.app.models import ContactMessage, ContactStatus
from src.app.repositories.base import BaseRepository


class ContactMessageRepository(BaseRepository[ContactMessage]):
    model = ContactMessage

    async def list_filtered(
        self,
        cursor: str | None,
        limit: int,
        status: ContactStatus | None = None,
    ) -> tuple[list[ContactMessage], str | None, bool]:
        query = select(ContactMessage)
        if status:
            query = query.where(ContactMessage.status == status.value)
        return await self.paginate(query, cursor, limit, col(ContactMessage.created_at))

    async def count_by_status(self) -> dict[str, int]:
        return await self.count_grouped(col(ContactMessage.status))
