"""Wiring of channels, engine and probe from settings."""

from contactflow.channels.base import NotificationChannel, PersistenceChannel
from contactflow.channels.dynamodb import DynamoDBPersistenceChannel
from contactflow.channels.http_notification import HttpNotificationChannel
from contactflow.channels.ses_notification import SesNotificationChannel
from contactflow.config import ContactSettings
from contactflow.repositories.submission import SubmissionRepository
from contactflow.services.email_service import EmailService
from contactflow.services.reconciliation import ReconciliationEngine
from contactflow.services.status_probe import StatusProbe


def build_persistence_channel(settings: ContactSettings) -> PersistenceChannel:
    """Build the DynamoDB persistence channel."""
    repository = SubmissionRepository(
        table_name=settings.table_name,
        region_name=settings.region_name,
    )
    return DynamoDBPersistenceChannel(repository)


def build_notification_channel(settings: ContactSettings) -> NotificationChannel:
    """Build the configured notification channel."""
    if settings.notification_transport == "ses":
        return SesNotificationChannel(
            staff_emails=settings.staff_emails,
            support_email=settings.support_email,
            email_service=EmailService(
                region_name=settings.region_name,
                from_email=settings.from_email,
            ),
        )

    return HttpNotificationChannel(
        url=settings.notification_url,
        health_url=settings.notification_health_url,
        timeout=settings.channel_timeout_seconds,
    )


def build_engine(settings: ContactSettings) -> ReconciliationEngine:
    """Build a reconciliation engine with real channels."""
    return ReconciliationEngine(
        persistence=build_persistence_channel(settings),
        notification=build_notification_channel(settings),
        settings=settings,
    )


def build_status_probe(settings: ContactSettings) -> StatusProbe:
    """Build a status probe over the same channels the engine uses."""
    return StatusProbe(
        persistence=build_persistence_channel(settings),
        notification=build_notification_channel(settings),
        timeout_seconds=settings.channel_timeout_seconds,
    )
