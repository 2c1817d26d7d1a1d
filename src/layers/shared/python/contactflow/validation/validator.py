"""Field-level validation rules for contact submissions."""

import re
from typing import NamedTuple

from contactflow.models.submission import ContactSubmission

# Phone validation - allows common formats
PHONE_REGEX = re.compile(r"^[\d\s\-\+\(\)\.]{7,20}$")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254
MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 5000
COMPANY_MAX_LENGTH = 100
SERVICE_MAX_LENGTH = 100
PHONE_MAX_LENGTH = 20


class ValidationReport(NamedTuple):
    """Result of validating a submission."""

    is_valid: bool
    errors: list[str]


class FormValidator:
    """Checks required fields and field lengths/formats."""

    def validate(self, submission: ContactSubmission) -> ValidationReport:
        """Validate a submission.

        Args:
            submission: The raw submission.

        Returns:
            ValidationReport with every error found.
        """
        errors: list[str] = []

        name = (submission.name or "").strip()
        if not name:
            errors.append("Name is required")
        elif len(name) < NAME_MIN_LENGTH:
            errors.append(f"Name must be at least {NAME_MIN_LENGTH} characters")
        elif len(name) > NAME_MAX_LENGTH:
            errors.append(f"Name must be less than {NAME_MAX_LENGTH} characters")

        email = (submission.email or "").strip()
        if not email:
            errors.append("Email is required")
        elif len(email) > EMAIL_MAX_LENGTH:
            errors.append("Email address is too long")

        message = (submission.message or "").strip()
        if not message:
            errors.append("Message is required")
        elif len(message) < MESSAGE_MIN_LENGTH:
            errors.append(f"Message must be at least {MESSAGE_MIN_LENGTH} characters")
        elif len(message) > MESSAGE_MAX_LENGTH:
            errors.append(f"Message must be less than {MESSAGE_MAX_LENGTH} characters")

        if submission.company and len(submission.company.strip()) > COMPANY_MAX_LENGTH:
            errors.append(f"Company name must be less than {COMPANY_MAX_LENGTH} characters")

        if submission.phone and not PHONE_REGEX.match(submission.phone.strip()):
            errors.append("Please enter a valid phone number")

        if submission.service and len(submission.service.strip()) > SERVICE_MAX_LENGTH:
            errors.append("Service selection is invalid")

        return ValidationReport(is_valid=not errors, errors=errors)
