"""Access grant service - request, review and check access to protected subdomains."""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.app.core.logging import get_logger
from src.app.core.notifications import EmailService, NotificationQueue
from src.app.core.security import sanitize_free_text
from src.app.models import AccessGrant, Account, GrantStatus, ProtectedResource
from src.app.models.base import utc_now
from src.app.repositories import AccessGrantRepository, AccountRepository
from src.app.schemas.access_grant import AccessGrantStats, ResourceAccessStatus
from src.app.services.auth_service import ClientInfo

logger = get_logger(__name__)

PENDING_CONFLICT = "You already have a pending request for this resource"
ACTIVE_CONFLICT = "You already have access to this resource"

_DENIAL_REASONS = {
    GrantStatus.PENDING.value: "Your access request is pending review",
    GrantStatus.DENIED.value: "Your access request was denied",
    GrantStatus.REVOKED.value: "Your access has been revoked",
    GrantStatus.APPROVED.value: "Your access has expired",
}


def _to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class AccessGrantService:
    """State machine for access grants.

    pending -> approved | denied (admin review); approved -> revoked. An
    approved grant past its expiry no longer grants access.
    """

    def __init__(
        self,
        grant_repo: AccessGrantRepository,
        account_repo: AccountRepository,
        session: AsyncSession,
        email_service: EmailService,
        notifications: NotificationQueue,
    ):
        self.grant_repo = grant_repo
        self.account_repo = account_repo
        self.session = session
        self.email_service = email_service
        self.notifications = notifications

    async def _get(self, grant_id: UUID) -> AccessGrant:
        grant = await self.grant_repo.get_by_id(grant_id)
        if grant is None:
            raise NotFoundError("Access request not found", code="AccessRequestNotFound")
        return grant

    # Requester operations

    async def submit(
        self,
        account: Account,
        resource: ProtectedResource,
        reason: str | None,
        client: ClientInfo,
    ) -> AccessGrant:
        """Create a pending request.

        Raises:
            ConflictError: A pending request or active grant already exists.
        """
        if await self.grant_repo.get_pending(account.id, resource) is not None:
            raise ConflictError(PENDING_CONFLICT, code="PendingRequestExists")
        if await self.grant_repo.get_active(account.id, resource) is not None:
            raise ConflictError(ACTIVE_CONFLICT, code="AccessAlreadyGranted")

        grant = AccessGrant(
            account_id=account.id,
            resource_id=resource.value,
            request_reason=sanitize_free_text(reason, max_length=500) or None,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        )
        try:
            self.grant_repo.add(grant)
            await self.session.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent submit; the partial unique index decided
            await self.session.rollback()
            raise ConflictError(PENDING_CONFLICT, code="PendingRequestExists") from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Access requested",
            grant_id=str(grant.id),
            account_id=str(account.id),
            resource_id=resource.value,
        )
        self.notifications.submit(
            "access_request_notification",
            self.email_service.send_access_request_notification(
                account.full_name, account.email, resource, grant.request_reason
            ),
            grant_id=str(grant.id),
        )
        return grant

    async def list_for_account(self, account: Account) -> list[AccessGrant]:
        return await self.grant_repo.list_for_account(account.id)

    async def check_access(
        self, account: Account, resource: ProtectedResource
    ) -> tuple[bool, str | None]:
        """Return (has_access, denial_reason)."""
        if await self.grant_repo.get_active(account.id, resource) is not None:
            return True, None

        latest = await self.grant_repo.get_latest(account.id, resource)
        if latest is None:
            return False, "No access request found for this resource"
        return False, _DENIAL_REASONS.get(latest.status, "Access denied")

    async def access_status(
        self, account: Account, resource: ProtectedResource | None = None
    ) -> list[ResourceAccessStatus]:
        resources = [resource] if resource else list(ProtectedResource)
        statuses = []
        for item in resources:
            active = await self.grant_repo.get_active(account.id, item)
            grant = active or await self.grant_repo.get_latest(account.id, item)
            statuses.append(
                ResourceAccessStatus(
                    resource_id=item,
                    resource_name=item.display_name,
                    has_access=active is not None,
                    status=GrantStatus(grant.status) if grant else None,
                    grant_id=grant.id if grant else None,
                    expires_at=grant.expires_at if grant else None,
                )
            )
        return statuses

    # Administrative operations

    async def list_grants(
        self,
        cursor: str | None = None,
        limit: int = 20,
        status: GrantStatus | None = None,
        resource: ProtectedResource | None = None,
    ) -> tuple[list[AccessGrant], str | None, bool]:
        return await self.grant_repo.list_filtered(cursor, limit, status=status, resource=resource)

    async def stats(self) -> AccessGrantStats:
        counts = await self.grant_repo.count_by_status()
        return AccessGrantStats(total=sum(counts.values()), **counts)

    async def _review(
        self,
        admin: Account,
        grant_id: UUID,
        status: GrantStatus,
        admin_message: str | None,
        expires_at: datetime | None = None,
    ) -> AccessGrant:
        grant = await self._get(grant_id)
        if grant.status != GrantStatus.PENDING.value:
            raise ConflictError(
                f"Only pending requests can be {status.value}; this one is {grant.status}",
                code="InvalidTransition",
            )

        try:
            now = utc_now()
            grant.status = status.value
            grant.reviewed_by_id = admin.id
            grant.reviewed_at = now
            grant.admin_message = sanitize_free_text(admin_message, max_length=500) or None
            grant.expires_at = expires_at
            grant.updated_at = now
            self.grant_repo.add(grant)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Access request reviewed",
            grant_id=str(grant.id),
            admin_id=str(admin.id),
            status=status.value,
        )

        requester = await self.account_repo.get_by_id(grant.account_id)
        if requester is not None:
            self.notifications.submit(
                "access_decision_email",
                self.email_service.send_access_decision_email(
                    requester.email,
                    requester.full_name,
                    grant.resource,
                    approved=status == GrantStatus.APPROVED,
                    admin_message=grant.admin_message,
                    expires_at=grant.expires_at,
                ),
                grant_id=str(grant.id),
            )
        return grant

    async def approve(
        self,
        admin: Account,
        grant_id: UUID,
        admin_message: str | None = None,
        expires_at: datetime | None = None,
    ) -> AccessGrant:
        """Approve a pending request, optionally until ``expires_at``.

        Raises:
            ValidationError: Expiry is not in the future.
            ConflictError: Request is not pending.
        """
        expires_at = _to_naive_utc(expires_at)
        if expires_at is not None and expires_at <= utc_now():
            raise ValidationError("Expiry must be in the future", code="InvalidExpiry")
        return await self._review(admin, grant_id, GrantStatus.APPROVED, admin_message, expires_at)

    async def deny(
        self, admin: Account, grant_id: UUID, admin_message: str | None = None
    ) -> AccessGrant:
        return await self._review(admin, grant_id, GrantStatus.DENIED, admin_message)

    async def revoke(
        self, admin: Account, grant_id: UUID, admin_message: str | None = None
    ) -> AccessGrant:
        """Revoke an approved grant, effective immediately."""
        grant = await self._get(grant_id)
        if grant.status != GrantStatus.APPROVED.value:
            raise ConflictError(
                f"Only approved grants can be revoked; this one is {grant.status}",
                code="InvalidTransition",
            )

        try:
            now = utc_now()
            grant.status = GrantStatus.REVOKED.value
            grant.reviewed_by_id = admin.id
            grant.reviewed_at = now
            if admin_message:
                grant.admin_message = sanitize_free_text(admin_message, max_length=500)
            grant.updated_at = now
            self.grant_repo.add(grant)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Access revoked", grant_id=str(grant.id), admin_id=str(admin.id))
        return grant

    async def clear_expiration(self, admin: Account, grant_id: UUID) -> AccessGrant:
        """Make an approved grant permanent by clearing its expiry."""
        grant = await self._get(grant_id)
        if grant.status != GrantStatus.APPROVED.value:
            raise ConflictError(
                "Only approved grants have an expiration to clear", code="InvalidTransition"
            )

        try:
            grant.expires_at = None
            grant.updated_at = utc_now()
            self.grant_repo.add(grant)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Access expiration cleared", grant_id=str(grant.id), admin_id=str(admin.id))
        return grant

    async def purge(self, admin: Account) -> int:
        """Delete every access grant."""
        try:
            deleted = await self.grant_repo.purge()
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.warning("Access grants purged", admin_id=str(admin.id), deleted=deleted)
        return deleted
