"""Amazon SES delivery for contact notification emails."""

import os
from typing import Any

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

logger = structlog.get_logger()

CHARSET = "UTF-8"


class EmailError(Exception):
    """Raised when an email cannot be handed to SES."""

    def __init__(self, message: str, code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


def _content(text: str) -> dict[str, str]:
    return {"Data": text, "Charset": CHARSET}


class EmailService:
    """Sends plain text + HTML emails from one verified sender."""

    def __init__(
        self,
        region_name: str | None = None,
        from_email: str | None = None,
        configuration_set: str | None = None,
    ):
        """Initialize the service.

        Args:
            region_name: SES region. Defaults to AWS_REGION.
            from_email: Verified sender. Defaults to SES_FROM_EMAIL.
            configuration_set: SES configuration set for delivery events.
        """
        self.region_name = region_name or os.environ.get("AWS_REGION", "us-east-1")
        self.from_email = from_email or os.environ.get("SES_FROM_EMAIL")
        self.configuration_set = configuration_set or os.environ.get("SES_CONFIGURATION_SET")
        self._ses = None

    @property
    def client(self):
        """SES client, created on first use."""
        if self._ses is None:
            self._ses = boto3.client("ses", region_name=self.region_name)
        return self._ses

    def sending_enabled(self) -> bool:
        """Whether the SES account is currently allowed to send.

        Raises:
            EmailError: If SES cannot be reached.
        """
        try:
            return bool(self.client.get_account_sending_enabled().get("Enabled", False))
        except (ClientError, BotoCoreError) as e:
            raise EmailError(f"SES status check failed: {e}") from e

    def send_email(
        self,
        to: str | list[str],
        subject: str,
        body_text: str | None = None,
        body_html: str | None = None,
        reply_to: list[str] | None = None,
        tags: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send one email.

        Returns:
            Dict with message_id, status and the recipient list.

        Raises:
            EmailError: If the email is incomplete or SES refuses it.
        """
        recipients = [to] if isinstance(to, str) else list(to)
        request = self._build_request(recipients, subject, body_text, body_html, reply_to, tags)

        try:
            response = self.client.send_email(**request)
        except ClientError as e:
            aws_error = e.response["Error"]
            logger.error("SES send failed", error_code=aws_error["Code"], recipients=len(recipients))
            raise EmailError(
                f"Failed to send email: {aws_error['Message']}",
                code=aws_error["Code"],
                details={"aws_error": aws_error["Message"]},
            ) from e
        except BotoCoreError as e:
            logger.error("SES request failed", error=str(e))
            raise EmailError(f"Failed to send email: {e}") from e

        logger.info("Email sent", message_id=response["MessageId"], recipients=len(recipients))
        return {"message_id": response["MessageId"], "status": "sent", "to": recipients}

    def _build_request(
        self,
        recipients: list[str],
        subject: str,
        body_text: str | None,
        body_html: str | None,
        reply_to: list[str] | None,
        tags: dict[str, str] | None,
    ) -> dict[str, Any]:
        if not self.from_email:
            raise EmailError("Sender email address is required", code="SENDER_MISSING")
        if not recipients:
            raise EmailError("Recipient email address is required", code="RECIPIENT_MISSING")
        if not body_text and not body_html:
            raise EmailError("Email body is required", code="BODY_MISSING")

        body = {}
        if body_text:
            body["Text"] = _content(body_text)
        if body_html:
            body["Html"] = _content(body_html)

        request: dict[str, Any] = {
            "Source": self.from_email,
            "Destination": {"ToAddresses": recipients},
            "Message": {"Subject": _content(subject), "Body": body},
        }
        if reply_to:
            request["ReplyToAddresses"] = reply_to
        if self.configuration_set:
            request["ConfigurationSetName"] = self.configuration_set
        if tags:
            request["Tags"] = [{"Name": name, "Value": value} for name, value in tags.items()]
        return request
