"""Notification channel that relays submissions to an HTTP email endpoint.

The relay answers with its own result object; a 2xx response whose body
says ``success: false`` is still a failed delivery.
"""

from typing import Any

import httpx
import structlog

from contactflow.channels.base import NotificationChannel
from contactflow.models.submission import ContactSubmission
from contactflow.utils.exceptions import ChannelError

logger = structlog.get_logger()

# Staff notification + submitter confirmation
DEFAULT_NOTIFICATION_COUNT = 2


class HttpNotificationChannel(NotificationChannel):
    """Posts submissions to the email relay endpoint."""

    name = "http_relay"

    def __init__(
        self,
        url: str,
        health_url: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the channel.

        Args:
            url: Relay endpoint receiving the submission payload.
            health_url: Endpoint answering 2xx when the relay is up.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used for testing).
        """
        self.url = url
        self.health_url = health_url
        self.timeout = timeout
        self.transport = transport
        self.logger = logger.bind(service="http_notification")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def health_check(self) -> bool:
        """Check that the relay's health endpoint answers 2xx."""
        if not self.health_url:
            return False

        try:
            async with self._client() as client:
                response = await client.get(self.health_url)
        except httpx.HTTPError as e:
            self.logger.warning("Relay health check failed", error=str(e))
            return False

        return response.is_success

    async def deliver(self, submission: ContactSubmission) -> int:
        """Post the submission to the relay.

        Raises:
            ChannelError: On transport errors, non-2xx responses, or a relay
                result reporting failure.
        """
        self.logger.info("Relaying submission", email_domain=submission.email_domain())

        try:
            async with self._client() as client:
                response = await client.post(self.url, json=submission.to_payload())
        except httpx.TimeoutException as e:
            raise ChannelError(self.name, "Email relay request timed out") from e
        except httpx.HTTPError as e:
            raise ChannelError(self.name, f"Email relay request failed: {e}") from e

        result = _parse_body(response)

        if not response.is_success:
            raise ChannelError(
                self.name,
                result.get("message") or "Email sending failed",
                details={"status_code": response.status_code},
            )

        if result.get("success") is not True:
            raise ChannelError(
                self.name,
                result.get("message") or "Email relay reported failure",
                details={"status_code": response.status_code},
            )

        data = result.get("data") or {}
        count = data.get("emailsSent")
        if not isinstance(count, int) or count < 1:
            count = DEFAULT_NOTIFICATION_COUNT
        return count


def _parse_body(response: httpx.Response) -> dict[str, Any]:
    """Parse a relay response body, tolerating non-JSON answers."""
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text[:200] or None}
    return body if isinstance(body, dict) else {}
