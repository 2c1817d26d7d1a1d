"""Contact submission models."""

from collections.abc import Iterator
from enum import Enum
from typing import Any

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field

from contactflow.models.base import BaseModel

# Order in which populated fields are security-scanned.
SCANNED_FIELDS = ("name", "email", "company", "phone", "message", "service")


class ContactSubmission(PydanticBaseModel):
    """A contact request as supplied by the caller.

    Field rules (lengths, formats) are enforced by the validator, not here,
    so that every problem can be reported together.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    email: str
    message: str
    company: str | None = None
    phone: str | None = None
    service: str | None = None

    def populated_fields(self) -> Iterator[tuple[str, str]]:
        """Yield (field, value) for every non-empty field."""
        for field_name in SCANNED_FIELDS:
            value = getattr(self, field_name)
            if value:
                yield field_name, value

    def to_payload(self) -> dict[str, Any]:
        """Get the JSON payload sent to notification relays."""
        return self.model_dump(mode="json", exclude_none=True)

    def email_domain(self) -> str:
        """Get the email domain, for logging without the full address."""
        return self.email.rsplit("@", 1)[-1] if "@" in self.email else ""


class SubmissionStatus(str, Enum):
    """Lifecycle status of a stored submission."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class SubmissionRecord(BaseModel):
    """Stored contact submission.

    Key Pattern:
        PK: CONTACT#SUBMISSIONS
        SK: SUB#{id}
        GSI1PK: EMAIL#{email}
        GSI1SK: SUB#{id}
    """

    name: str
    email: str
    message: str
    company: str | None = None
    phone: str | None = None
    service: str | None = None

    status: SubmissionStatus = Field(default=SubmissionStatus.NEW)
    source_ip: str | None = None
    user_agent: str | None = Field(None, max_length=500)

    @classmethod
    def from_submission(
        cls,
        submission: ContactSubmission,
        source_ip: str | None = None,
        user_agent: str | None = None,
    ) -> "SubmissionRecord":
        """Build a record from a sanitized submission."""
        return cls(
            **submission.model_dump(),
            source_ip=source_ip,
            user_agent=user_agent[:500] if user_agent else None,
        )

    def get_pk(self) -> str:
        """Get partition key: CONTACT#SUBMISSIONS."""
        return "CONTACT#SUBMISSIONS"

    def get_sk(self) -> str:
        """Get sort key: SUB#{id}."""
        return f"SUB#{self.id}"

    def get_gsi1_keys(self) -> dict[str, str]:
        """Get GSI1 keys for looking up submissions by email."""
        return {
            "GSI1PK": f"EMAIL#{self.email.lower()}",
            "GSI1SK": f"SUB#{self.id}",
        }
