"""Contact form service - store messages and forward them to the admin inbox."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.db import SessionFactory
from src.app.core.exceptions import NotFoundError
from src.app.core.logging import get_logger
from src.app.core.notifications import EmailDeliveryError, EmailService, NotificationQueue
from src.app.core.security import sanitize_free_text
from src.app.models import ContactMessage, ContactStatus
from src.app.models.base import utc_now
from src.app.repositories import ContactMessageRepository
from src.app.schemas.contact import ContactCreate
from src.app.services.auth_service import ClientInfo

logger = get_logger(__name__)


class ContactService:
    def __init__(
        self,
        contact_repo: ContactMessageRepository,
        session: AsyncSession,
        email_service: EmailService,
        notifications: NotificationQueue,
        session_factory: SessionFactory,
    ):
        self.contact_repo = contact_repo
        self.session = session
        self.email_service = email_service
        self.notifications = notifications
        self.session_factory = session_factory

    async def submit(self, data: ContactCreate, client: ClientInfo) -> ContactMessage:
        """Persist a message and queue the email to the admins.

        The response does not wait on delivery. The queued task records
        ``email_sent``/``message_id`` on its own session once the send finishes.
        """
        contact = ContactMessage(
            name=sanitize_free_text(data.name),
            email=data.email.strip().lower(),
            subject=sanitize_free_text(data.subject),
            message=sanitize_free_text(data.message, max_length=2000),
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        )
        try:
            self.contact_repo.add(contact)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        self.notifications.submit(
            "contact_form_email",
            self._deliver(
                contact.id, contact.name, contact.email, contact.subject, contact.message
            ),
            contact_id=str(contact.id),
        )
        logger.info("Contact message received", contact_id=str(contact.id))
        return contact

    async def _deliver(
        self, contact_id: UUID, name: str, email: str, subject: str, message: str
    ) -> None:
        """Email the admins and record the outcome on the stored message.

        A delivery failure leaves ``email_sent`` False and is logged, not raised.
        """
        try:
            message_id = await self.email_service.send_contact_form_email(
                name, email, subject, message
            )
        except EmailDeliveryError as e:
            logger.error("Contact form email failed", contact_id=str(contact_id), error=str(e))
            return

        async with self.session_factory() as session:
            repo = ContactMessageRepository(session)
            contact = await repo.get_by_id(contact_id)
            if contact is None:
                # Deleted by an admin before the send finished
                return
            try:
                contact.email_sent = True
                contact.message_id = message_id
                contact.updated_at = utc_now()
                repo.add(contact)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def list_messages(
        self,
        cursor: str | None = None,
        limit: int = 20,
        status: ContactStatus | None = None,
    ) -> tuple[list[ContactMessage], str | None, bool]:
        return await self.contact_repo.list_filtered(cursor, limit, status=status)

    async def _get(self, contact_id: UUID) -> ContactMessage:
        contact = await self.contact_repo.get_by_id(contact_id)
        if contact is None:
            raise NotFoundError("Contact message not found")
        return contact

    async def update_status(self, contact_id: UUID, status: ContactStatus) -> ContactMessage:
        contact = await self._get(contact_id)
        try:
            contact.status = status.value
            contact.updated_at = utc_now()
            self.contact_repo.add(contact)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return contact

    async def delete(self, contact_id: UUID) -> None:
        contact = await self._get(contact_id)
        try:
            await self.contact_repo.delete(contact)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Contact message deleted", contact_id=str(contact_id))
