"""Exception hierarchy for contact submission processing."""

from typing import Any


class ContactflowError(Exception):
    """Base exception for contactflow errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize ContactflowError.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ValidationError(ContactflowError):
    """Raised when a submission fails validation.

    Never retried. Carries every collected error string so the caller can
    correct all of them at once.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(
            ", ".join(self.errors) or "Validation failed",
            code="VALIDATION_ERROR",
            details={"errors": self.errors},
        )


class ChannelError(ContactflowError):
    """Raised when a persistence or notification channel fails."""

    def __init__(self, channel: str, message: str, details: dict[str, Any] | None = None):
        self.channel = channel
        super().__init__(message, code="CHANNEL_ERROR", details=details)


class ConflictError(ContactflowError):
    """Raised when a conditional write finds an existing item."""

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message, code="CONFLICT")
