"""Email client using Resend API."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any

import resend

from src.app.core.config import Settings
from src.app.core.exceptions import ServiceUnavailableError
from src.app.core.logging import get_logger
from src.app.core.notifications import templates
from src.app.models.enums import ProtectedResource

logger = get_logger(__name__)

# Thread pool for the blocking Resend client
_email_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="email_sender")


class EmailDeliveryError(ServiceUnavailableError):
    default_code = "EmailDeliveryFailed"
    default_message = "Email could not be sent"


class EmailService:
    """Sends transactional emails through Resend.

    Each attempt runs in a worker thread bounded by ``timeout_seconds``. Failed
    attempts are retried with linear backoff (``backoff_seconds * attempt``)
    before EmailDeliveryError is raised. A timed-out attempt is not retried, as
    its thread cannot be stopped and may still deliver. Without an API key,
    emails are logged and treated as sent.
    """

    def __init__(
        self,
        api_key: str | None,
        sender: str,
        app_name: str,
        app_url: str,
        admin_emails: list[str] | None = None,
        timeout_seconds: float = 10,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
    ):
        self.api_key = api_key
        self.sender = sender
        self.app_name = app_name
        self.app_url = app_url.rstrip("/")
        self.admin_emails = admin_emails or []
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailService":
        return cls(
            api_key=settings.resend_api_key,
            sender=settings.email_from,
            app_name=settings.app_name,
            app_url=settings.app_url,
            admin_emails=settings.admin_emails,
            timeout_seconds=settings.email_send_timeout_seconds,
            max_attempts=settings.email_max_attempts,
            backoff_seconds=settings.email_retry_backoff_seconds,
        )

    def _deliver(self, params: dict[str, Any]) -> str | None:
        resend.api_key = self.api_key
        response = resend.Emails.send(params)  # type: ignore[arg-type]
        return response.get("id") if isinstance(response, dict) else None

    async def send(
        self,
        to: str | list[str],
        subject: str,
        html: str,
        reply_to: str | None = None,
    ) -> str | None:
        """Send one email, retrying on failure.

        Returns:
            The provider message id, or None when sending is disabled.

        Raises:
            EmailDeliveryError: If every attempt failed or one timed out.
        """
        recipients = [to] if isinstance(to, str) else list(to)

        if not self.api_key:
            # Dev mode: log email instead of sending
            logger.warning(
                "RESEND_API_KEY not set - email not sent", to=recipients, subject=subject
            )
            return None

        params: dict[str, Any] = {
            "from": self.sender,
            "to": recipients,
            "subject": subject,
            "html": html,
        }
        if reply_to:
            params["reply_to"] = reply_to

        loop = asyncio.get_running_loop()
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                message_id = await asyncio.wait_for(
                    loop.run_in_executor(_email_executor, self._deliver, params),
                    timeout=self.timeout_seconds,
                )
                logger.info("Email sent", to=recipients, subject=subject, attempt=attempt)
                return message_id
            except TimeoutError as e:
                # The worker thread keeps running and may still deliver
                logger.warning(
                    "Email send timed out, not retrying",
                    to=recipients,
                    attempt=attempt,
                    timeout_seconds=self.timeout_seconds,
                )
                raise EmailDeliveryError(
                    f"Email send timed out after {self.timeout_seconds}s",
                    details={"error": "timeout"},
                ) from e
            except Exception as e:
                last_error = e
                logger.warning(
                    "Email send attempt failed",
                    to=recipients,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error=str(e) or type(e).__name__,
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.backoff_seconds * attempt)

        raise EmailDeliveryError(
            f"Failed to send email after {self.max_attempts} attempts",
            details={"error": str(last_error)},
        ) from last_error

    async def send_verification_email(self, to: str, user_name: str, token: str) -> str | None:
        url = f"{self.app_url}/verify-email?token={token}"
        return await self.send(
            to, "Verify your email address", templates.verification_email(user_name, url)
        )

    async def send_welcome_email(self, to: str, user_name: str) -> str | None:
        return await self.send(
            to,
            f"Welcome to {self.app_name}!",
            templates.welcome_email(user_name, self.app_name, self.app_url),
        )

    async def send_password_reset_email(self, to: str, user_name: str, token: str) -> str | None:
        url = f"{self.app_url}/reset-password?token={token}"
        return await self.send(
            to, "Reset your password", templates.password_reset_email(user_name, url)
        )

    async def send_password_reset_confirmation(self, to: str, user_name: str) -> str | None:
        return await self.send(
            to,
            "Your password was changed",
            templates.password_reset_confirmation_email(user_name),
        )

    async def send_access_request_notification(
        self,
        account_name: str,
        account_email: str,
        resource: ProtectedResource,
        reason: str | None,
    ) -> str | None:
        if not self.admin_emails:
            logger.warning("No admin emails configured - access request notification skipped")
            return None
        return await self.send(
            self.admin_emails,
            f"Access request: {resource.display_name}",
            templates.access_request_admin_email(
                account_name,
                account_email,
                resource.display_name,
                reason,
                f"{self.app_url}/admin/access-requests",
            ),
            reply_to=account_email,
        )

    async def send_access_decision_email(
        self,
        to: str,
        user_name: str,
        resource: ProtectedResource,
        approved: bool,
        admin_message: str | None = None,
        expires_at: datetime | None = None,
    ) -> str | None:
        subject = (
            f"Access approved: {resource.display_name}"
            if approved
            else f"Access request update: {resource.display_name}"
        )
        return await self.send(
            to,
            subject,
            templates.access_decision_email(
                user_name,
                resource.display_name,
                approved,
                admin_message,
                expires_at,
                f"{self.app_url}/dashboard",
            ),
        )

    async def send_contact_form_email(
        self, name: str, email: str, subject: str, message: str
    ) -> str | None:
        if not self.admin_emails:
            logger.warning("No admin emails configured - contact form email skipped")
            return None
        return await self.send(
            self.admin_emails,
            f"Contact form: {subject}",
            templates.contact_form_email(name, email, subject, message),
            reply_to=email,
        )
