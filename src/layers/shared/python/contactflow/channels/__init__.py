"""Persistence and notification channels."""

from contactflow.channels.base import NotificationChannel, PersistenceChannel
from contactflow.channels.dynamodb import DynamoDBPersistenceChannel
from contactflow.channels.http_notification import HttpNotificationChannel
from contactflow.channels.ses_notification import SesNotificationChannel

__all__ = [
    "DynamoDBPersistenceChannel",
    "HttpNotificationChannel",
    "NotificationChannel",
    "PersistenceChannel",
    "SesNotificationChannel",
]
