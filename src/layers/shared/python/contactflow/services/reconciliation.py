"""Reconciliation of dual-channel contact submissions.

One submission has to be both persisted and announced through a
notification channel. Either channel can fail on its own; the engine
attempts both, classifies the pair of outcomes and decides what the caller
is told. When both channels fail, the notification channel is retried
alone as a last resort.

Outcome table (evaluated in this order):

    persisted  notified   result
    ---------  --------   -------------------------------------------
    yes        yes        success
    no         yes        success, durability warning, fallback_used
    yes        no         success, notifications_sent=0, fallback_used
    no         no         retry notification only (fallback)
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from contactflow.channels.base import NotificationChannel, PersistenceChannel
from contactflow.config import ContactSettings
from contactflow.models.outcome import (
    ChannelOutcome,
    FailureKind,
    SubmissionResult,
    SubmissionResultData,
)
from contactflow.models.submission import ContactSubmission
from contactflow.utils.exceptions import ChannelError, ValidationError
from contactflow.validation.security import SecurityScanner
from contactflow.validation.validator import FormValidator

logger = structlog.get_logger()

SIMULATED_NOTIFICATION_COUNT = 2

MSG_SAVED_AND_SENT = (
    "Message sent successfully! Your submission has been saved and we'll get back to you "
    "within 24 hours. Please check your email for confirmation."
)
MSG_SENT_NOT_SAVED = (
    "Message sent successfully! Your submission was received via email and we'll get back "
    "to you within 24 hours. Note: Data backup to database failed but your message is safe."
)
MSG_SAVED_NOT_SENT = (
    "Your submission has been saved successfully! However, email notifications failed. "
    "We have your message and will respond within 24 hours."
)
MSG_FALLBACK_SENT = (
    "Message sent successfully via email! Your submission has been received and we'll get "
    "back to you within 24 hours. Note: Data was not saved to database due to connectivity issues."
)
MSG_FALLBACK_FAILED = "Failed to send message. Please try again or contact us directly at {support_email}"
MSG_UNEXPECTED = "An unexpected error occurred. Please try again or contact us directly at {support_email}"
MSG_SIMULATED = (
    "Simulated delivery: form submitted successfully! With delivery enabled it will be "
    "saved to the database and emails sent to both staff and the submitter."
)
MSG_INVALID_PREFIX = "Please correct the following errors: "
MSG_UNSAFE_CONTENT = "Invalid characters detected in form data"

ERROR_DELIMITER = ", "


class Classification(str, Enum):
    """Combined state of the two channel attempts."""

    COMPLETE = "complete"
    NOTIFIED_ONLY = "notified_only"
    PERSISTED_ONLY = "persisted_only"
    BOTH_FAILED = "both_failed"


def classify(persistence: ChannelOutcome, notification: ChannelOutcome) -> Classification:
    """Classify a pair of channel outcomes.

    Depends only on the two success flags, never on failure reasons.
    """
    if persistence.success and notification.success:
        return Classification.COMPLETE
    if notification.success:
        return Classification.NOTIFIED_ONLY
    if persistence.success:
        return Classification.PERSISTED_ONLY
    return Classification.BOTH_FAILED


class ReconciliationEngine:
    """Processes one contact submission across both channels.

    Holds only its collaborators; every call to process() is independent.
    """

    def __init__(
        self,
        persistence: PersistenceChannel,
        notification: NotificationChannel,
        settings: ContactSettings | None = None,
        validator: FormValidator | None = None,
        scanner: SecurityScanner | None = None,
    ):
        """Initialize the engine.

        Args:
            persistence: Channel that stores submissions.
            notification: Channel that sends notifications.
            settings: Runtime settings (simulation flag, timeouts, support address).
            validator: Field validator.
            scanner: Content-safety checker and sanitizer.
        """
        self.persistence = persistence
        self.notification = notification
        self.settings = settings or ContactSettings()
        self.validator = validator or FormValidator()
        self.scanner = scanner or SecurityScanner()
        self.logger = logger.bind(service="reconciliation_engine")

    async def process(self, raw: ContactSubmission | Mapping[str, Any]) -> SubmissionResult:
        """Process a submission and return the caller-facing result.

        Never raises: every failure becomes a SubmissionResult.

        Args:
            raw: Caller input, as a dict or a ContactSubmission.

        Returns:
            SubmissionResult describing what happened.
        """
        try:
            return await self._process(raw)
        except Exception as e:
            self.logger.exception("Contact submission processing failed", error=str(e))
            return await self._recover(raw, e)

    async def _process(self, raw: ContactSubmission | Mapping[str, Any]) -> SubmissionResult:
        try:
            submission = self._validate(raw)
        except ValidationError as e:
            self.logger.info("Submission rejected by validation", error_count=len(e.errors))
            joined = ERROR_DELIMITER.join(e.errors)
            return SubmissionResult.failure(
                message=MSG_INVALID_PREFIX + joined,
                error=joined,
                kind=FailureKind.VALIDATION,
            )

        sanitized = self.scanner.sanitize(submission)
        self.logger.info("Submission validated and sanitized", email_domain=sanitized.email_domain())

        if self.settings.simulate_delivery:
            return await self._simulate(sanitized)

        persistence_outcome, notification_outcome = await asyncio.gather(
            self._attempt(self.persistence.name, self.persistence.submit, sanitized),
            self._attempt(self.notification.name, self.notification.send, sanitized),
        )

        return await self._reconcile(sanitized, persistence_outcome, notification_outcome)

    def _validate(self, raw: ContactSubmission | Mapping[str, Any]) -> ContactSubmission:
        """Coerce and validate caller input.

        Raises:
            ValidationError: With every collected error string.
        """
        if isinstance(raw, ContactSubmission):
            submission = raw
        else:
            try:
                submission = ContactSubmission.model_validate(raw)
            except PydanticValidationError as e:
                raise ValidationError([_describe_schema_error(err) for err in e.errors()]) from e

        report = self.validator.validate(submission)
        errors = list(report.errors)

        if not all(self.scanner.validate_input(value) for _, value in submission.populated_fields()):
            errors.append(MSG_UNSAFE_CONTENT)

        if submission.email.strip():
            email_check = self.scanner.validate_email(submission.email)
            if not email_check.is_valid:
                errors.append(email_check.reason or "Invalid email address")

        if errors or not report.is_valid:
            raise ValidationError(errors or ["Validation failed"])

        return submission

    async def _simulate(self, submission: ContactSubmission) -> SubmissionResult:
        """Return a synthetic success without touching either channel."""
        self.logger.info(
            "Simulated delivery, channels skipped",
            stage=self.settings.stage,
            email_domain=submission.email_domain(),
        )
        await asyncio.sleep(self.settings.simulated_latency_seconds)

        return SubmissionResult(
            success=True,
            message=MSG_SIMULATED,
            data=SubmissionResultData(
                submission_id=f"dev-{int(time.time() * 1000)}",
                notifications_sent=SIMULATED_NOTIFICATION_COUNT,
                persisted=True,
                fallback_used=False,
            ),
        )

    async def _attempt(
        self,
        channel: str,
        call: Callable[[ContactSubmission], Awaitable[ChannelOutcome]],
        submission: ContactSubmission,
    ) -> ChannelOutcome:
        """Run one channel call, bounded by the channel timeout.

        Every failure mode becomes a failed ChannelOutcome, so one channel
        can never break or cancel the other.
        """
        try:
            return await asyncio.wait_for(
                call(submission),
                timeout=self.settings.channel_timeout_seconds,
            )
        except asyncio.TimeoutError:
            self.logger.warning(
                "Channel timed out",
                channel=channel,
                timeout=self.settings.channel_timeout_seconds,
            )
            return ChannelOutcome.failed(f"{channel} channel timed out")
        except ChannelError as e:
            self.logger.warning("Channel failed", channel=channel, error=e.message)
            return ChannelOutcome.failed(e.message)
        except Exception as e:
            self.logger.exception("Channel raised unexpectedly", channel=channel, error=str(e))
            return ChannelOutcome.failed(str(e) or type(e).__name__)

    async def _reconcile(
        self,
        submission: ContactSubmission,
        persistence: ChannelOutcome,
        notification: ChannelOutcome,
    ) -> SubmissionResult:
        """Turn the two settled outcomes into the caller-facing result."""
        classification = classify(persistence, notification)
        self.logger.info(
            "Channel outcomes settled",
            classification=classification.value,
            persisted=persistence.success,
            notified=notification.success,
        )

        if classification == Classification.COMPLETE:
            return SubmissionResult(
                success=True,
                message=MSG_SAVED_AND_SENT,
                data=SubmissionResultData(
                    submission_id=persistence.identifier,
                    notifications_sent=notification.count,
                    persisted=True,
                    fallback_used=False,
                ),
            )

        if classification == Classification.NOTIFIED_ONLY:
            self.logger.warning(
                "Persistence failed but notifications sent",
                error=persistence.failure_reason,
            )
            return SubmissionResult(
                success=True,
                message=MSG_SENT_NOT_SAVED,
                data=SubmissionResultData(
                    notifications_sent=notification.count,
                    persisted=False,
                    fallback_used=True,
                ),
                error=persistence.failure_reason,
            )

        if classification == Classification.PERSISTED_ONLY:
            self.logger.warning(
                "Notifications failed but submission persisted",
                error=notification.failure_reason,
                submission_id=persistence.identifier,
            )
            return SubmissionResult(
                success=True,
                message=MSG_SAVED_NOT_SENT,
                data=SubmissionResultData(
                    submission_id=persistence.identifier,
                    notifications_sent=0,
                    persisted=True,
                    fallback_used=True,
                ),
                error=notification.failure_reason,
            )

        self.logger.error(
            "Both channels failed, attempting notification fallback",
            persistence_error=persistence.failure_reason,
            notification_error=notification.failure_reason,
        )
        return await self._fallback(submission)

    async def _fallback(self, submission: ContactSubmission) -> SubmissionResult:
        """Retry the notification channel alone."""
        outcome = await self._attempt(self.notification.name, self.notification.send, submission)

        if outcome.success:
            self.logger.info("Notification fallback succeeded", count=outcome.count)
            return self._fallback_success(outcome)

        self.logger.error("Notification fallback failed", error=outcome.failure_reason)
        return SubmissionResult.failure(
            message=MSG_FALLBACK_FAILED.format(support_email=self.settings.support_email),
            error=outcome.failure_reason or "Email sending failed",
            kind=FailureKind.DELIVERY,
        )

    @staticmethod
    def _fallback_success(outcome: ChannelOutcome) -> SubmissionResult:
        return SubmissionResult(
            success=True,
            message=MSG_FALLBACK_SENT,
            data=SubmissionResultData(
                notifications_sent=outcome.count,
                persisted=False,
                fallback_used=True,
            ),
        )

    async def _recover(
        self,
        raw: ContactSubmission | Mapping[str, Any],
        original: Exception,
    ) -> SubmissionResult:
        """Last-resort path after an unexpected error.

        Attempts the notification fallback once on the original, unsanitized
        input. If that does not deliver, returns a generic failure carrying
        the original error.
        """
        try:
            if isinstance(raw, ContactSubmission):
                submission = raw
            else:
                submission = ContactSubmission.model_validate(raw)
            outcome = await self._attempt(self.notification.name, self.notification.send, submission)
        except Exception as e:
            self.logger.error("Recovery fallback could not run", error=str(e))
            outcome = ChannelOutcome.failed(str(e))

        if outcome.success:
            self.logger.info("Recovery fallback succeeded", count=outcome.count)
            return self._fallback_success(outcome)

        return SubmissionResult.failure(
            message=MSG_UNEXPECTED.format(support_email=self.settings.support_email),
            error=str(original) or type(original).__name__,
            kind=FailureKind.UNEXPECTED,
        )


def _describe_schema_error(err: Mapping[str, Any]) -> str:
    """Turn a pydantic error into a field-level message."""
    field_name = ".".join(str(part) for part in err.get("loc", ())) or "input"
    label = field_name.replace("_", " ").capitalize()
    if err.get("type") == "missing":
        return f"{label} is required"
    return f"{label}: {err.get('msg', 'invalid value')}"
