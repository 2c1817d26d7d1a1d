"""Channel outcomes and caller-facing submission results."""

from enum import Enum
from typing import Any

from pydantic import BaseModel as PydanticBaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ChannelOutcome(PydanticBaseModel):
    """Result of a single channel attempt.

    Produced independently by each channel; never shared between them.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    identifier: str | None = None
    count: int | None = None
    failure_reason: str | None = None

    @classmethod
    def persisted(cls, identifier: str) -> "ChannelOutcome":
        """Create a successful persistence outcome."""
        return cls(success=True, identifier=identifier)

    @classmethod
    def notified(cls, count: int) -> "ChannelOutcome":
        """Create a successful notification outcome."""
        return cls(success=True, count=count)

    @classmethod
    def failed(cls, reason: str) -> "ChannelOutcome":
        """Create a failed outcome."""
        return cls(success=False, failure_reason=reason)


class FailureKind(str, Enum):
    """Why a submission was not accepted."""

    VALIDATION = "validation"
    DELIVERY = "delivery"
    UNEXPECTED = "unexpected"


class SubmissionResultData(PydanticBaseModel):
    """Delivery details attached to a submission result."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    submission_id: str | None = None
    notifications_sent: int | None = None
    persisted: bool | None = None
    fallback_used: bool | None = None


class SubmissionResult(PydanticBaseModel):
    """Terminal result of one submission attempt.

    Exactly one is produced per call to the reconciliation engine.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    data: SubmissionResultData | None = None
    error: str | None = None

    # Not part of the caller-facing body; lets transports pick a status code
    failure_kind: FailureKind | None = None

    @classmethod
    def failure(cls, message: str, error: str, kind: FailureKind) -> "SubmissionResult":
        """Create a failed result."""
        return cls(success=False, message=message, error=error, failure_kind=kind)

    def to_response(self) -> dict[str, Any]:
        """Get the caller-facing dict with stable camelCase data keys."""
        body: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
        }
        if self.data is not None:
            body["data"] = self.data.model_dump(by_alias=True, exclude_none=True)
        if self.error is not None:
            body["error"] = self.error
        return body
