"""Data models for contact submissions."""

from contactflow.models.base import BaseModel, generate_ulid, utc_now
from contactflow.models.health import HealthState, SystemHealth
from contactflow.models.outcome import (
    ChannelOutcome,
    FailureKind,
    SubmissionResult,
    SubmissionResultData,
)
from contactflow.models.submission import ContactSubmission, SubmissionRecord, SubmissionStatus

__all__ = [
    # Base
    "BaseModel",
    "generate_ulid",
    "utc_now",
    # Submission
    "ContactSubmission",
    "SubmissionRecord",
    "SubmissionStatus",
    # Outcomes
    "ChannelOutcome",
    "FailureKind",
    "SubmissionResult",
    "SubmissionResultData",
    # Health
    "HealthState",
    "SystemHealth",
]
