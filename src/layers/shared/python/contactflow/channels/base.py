"""Base classes for submission channels.

A channel is an independent external system that either stores a
submission (persistence) or tells people about it (notification). Each
attempt produces its own ChannelOutcome; modeled failures are raised as
ChannelError inside the adapter and converted to a failed outcome here.
"""

from abc import ABC, abstractmethod

import structlog

from contactflow.models.outcome import ChannelOutcome
from contactflow.models.submission import ContactSubmission
from contactflow.utils.exceptions import ChannelError

logger = structlog.get_logger()


class PersistenceChannel(ABC):
    """Durably stores submissions."""

    name = "persistence"

    async def submit(self, submission: ContactSubmission) -> ChannelOutcome:
        """Store a submission.

        Args:
            submission: Sanitized submission.

        Returns:
            Outcome carrying the stored identifier, or the failure reason.
        """
        try:
            identifier = await self.store(submission)
        except ChannelError as e:
            logger.warning("Persistence attempt failed", channel=self.name, error=e.message)
            return ChannelOutcome.failed(e.message)

        logger.info("Submission persisted", channel=self.name, submission_id=identifier)
        return ChannelOutcome.persisted(identifier)

    @abstractmethod
    async def store(self, submission: ContactSubmission) -> str:
        """Store a submission and return its identifier.

        Raises:
            ChannelError: If the submission could not be stored.
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Check whether the store is reachable."""


class NotificationChannel(ABC):
    """Delivers human-facing notifications about submissions."""

    name = "notification"

    async def send(self, submission: ContactSubmission) -> ChannelOutcome:
        """Send notifications for a submission.

        Args:
            submission: Sanitized submission.

        Returns:
            Outcome carrying the number of notifications sent, or the failure reason.
        """
        try:
            count = await self.deliver(submission)
        except ChannelError as e:
            logger.warning("Notification attempt failed", channel=self.name, error=e.message)
            return ChannelOutcome.failed(e.message)

        logger.info("Notifications sent", channel=self.name, count=count)
        return ChannelOutcome.notified(count)

    @abstractmethod
    async def deliver(self, submission: ContactSubmission) -> int:
        """Send notifications and return how many were sent.

        Raises:
            ChannelError: If no notification could be delivered.
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Check whether notifications can currently be sent."""
