"""On-demand health of the submission channels."""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from contactflow.channels.base import NotificationChannel, PersistenceChannel
from contactflow.models.health import SystemHealth

logger = structlog.get_logger()


class StatusProbe:
    """Checks both channels independently and aggregates the result.

    A failing, slow or raising check marks only its own channel as down.
    """

    def __init__(
        self,
        persistence: PersistenceChannel,
        notification: NotificationChannel,
        timeout_seconds: float = 5.0,
    ):
        """Initialize the probe.

        Args:
            persistence: Persistence channel to check.
            notification: Notification channel to check.
            timeout_seconds: Upper bound on each health check.
        """
        self.persistence = persistence
        self.notification = notification
        self.timeout_seconds = timeout_seconds
        self.logger = logger.bind(service="status_probe")

    async def check_health(self) -> SystemHealth:
        """Query both channels concurrently. Never raises."""
        persistence_up, notification_up = await asyncio.gather(
            self._check("persistence", self.persistence.health_check),
            self._check("notification", self.notification.health_check),
        )

        health = SystemHealth.from_checks(persistence_up, notification_up)
        self.logger.info(
            "System health checked",
            persistence_up=persistence_up,
            notification_up=notification_up,
            overall=health.overall.value,
        )
        return health

    async def _check(self, channel: str, check: Callable[[], Awaitable[bool]]) -> bool:
        try:
            result = await asyncio.wait_for(check(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            self.logger.warning("Health check timed out", channel=channel)
            return False
        except Exception as e:
            self.logger.warning("Health check raised", channel=channel, error=str(e))
            return False
        return result is True
