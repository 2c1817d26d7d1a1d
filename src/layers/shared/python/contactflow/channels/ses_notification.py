"""Notification channel that emails staff and the submitter through SES."""

import asyncio

import structlog

from contactflow.channels.base import NotificationChannel
from contactflow.models.submission import ContactSubmission
from contactflow.services.email_service import EmailError, EmailService
from contactflow.services.email_templates import render_auto_reply, render_staff_notification
from contactflow.utils.exceptions import ChannelError

logger = structlog.get_logger()


class SesNotificationChannel(NotificationChannel):
    """Sends the staff notification and the submitter auto-reply.

    The staff notification is the one that matters: if it fails the
    channel fails. A failed auto-reply only lowers the count.
    """

    name = "ses"

    def __init__(
        self,
        staff_emails: list[str],
        support_email: str,
        email_service: EmailService | None = None,
    ):
        """Initialize the channel.

        Args:
            staff_emails: Recipients of the staff notification.
            support_email: Address quoted in the auto-reply.
            email_service: SES email service.
        """
        self.staff_emails = staff_emails
        self.support_email = support_email
        self.email_service = email_service or EmailService()
        self.logger = logger.bind(service="ses_notification")

    async def health_check(self) -> bool:
        """Check that SES sending is enabled for the account."""
        try:
            return await asyncio.to_thread(self.email_service.sending_enabled)
        except EmailError as e:
            self.logger.warning("SES health check failed", error=e.message)
            return False

    async def deliver(self, submission: ContactSubmission) -> int:
        """Send both emails.

        Raises:
            ChannelError: If no staff recipients are configured or the staff
                notification could not be sent.
        """
        if not self.staff_emails:
            raise ChannelError(self.name, "No staff recipients configured")

        subject, body_text, body_html = render_staff_notification(submission)
        try:
            await asyncio.to_thread(
                self.email_service.send_email,
                to=self.staff_emails,
                subject=subject,
                body_text=body_text,
                body_html=body_html,
                reply_to=[submission.email],
                tags={"type": "contact_staff"},
            )
        except EmailError as e:
            raise ChannelError(self.name, e.message, details={"code": e.code}) from e

        subject, body_text, body_html = render_auto_reply(submission, self.support_email)
        try:
            await asyncio.to_thread(
                self.email_service.send_email,
                to=submission.email,
                subject=subject,
                body_text=body_text,
                body_html=body_html,
                tags={"type": "contact_auto_reply"},
            )
        except EmailError as e:
            self.logger.warning(
                "Auto-reply failed after staff notification",
                error=e.message,
                email_domain=submission.email_domain(),
            )
            return 1

        return 2
