"""Content-safety checks and sanitization for contact submissions.

Blocks markup and script injection in free-text fields and produces a
cleaned copy of a submission that is safe to store and to relay. HTML
escaping is left to the email templates that render these values.
"""

import re
from typing import NamedTuple, Pattern

import structlog

from contactflow.models.submission import ContactSubmission
from contactflow.validation.validator import (
    COMPANY_MAX_LENGTH,
    EMAIL_MAX_LENGTH,
    MESSAGE_MAX_LENGTH,
    NAME_MAX_LENGTH,
    PHONE_MAX_LENGTH,
    SERVICE_MAX_LENGTH,
)

logger = structlog.get_logger()

# Patterns that indicate markup or script injection
DANGEROUS_INPUT_PATTERNS: list[tuple[Pattern[str], str]] = [
    (re.compile(r"<\s*script", re.IGNORECASE), "script tag"),
    (re.compile(r"<\s*/\s*script", re.IGNORECASE), "script tag"),
    (re.compile(r"javascript\s*:", re.IGNORECASE), "javascript: protocol"),
    (re.compile(r"vbscript\s*:", re.IGNORECASE), "vbscript: protocol"),
    (re.compile(r"data\s*:\s*text/html", re.IGNORECASE), "data: html"),
    (re.compile(r"<[^>]*\bon[a-z]+\s*=", re.IGNORECASE), "event handler"),
    (re.compile(r"<\s*(iframe|object|embed|svg|link|meta|style)\b", re.IGNORECASE), "embedded content"),
    (re.compile(r"expression\s*\(", re.IGNORECASE), "css expression"),
]

# Control characters except tab, newline and carriage return
CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

HTML_TAG = re.compile(r"<[^>]*>")
WHITESPACE_RUN = re.compile(r"\s+")

EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

DISPOSABLE_EMAIL_DOMAINS = frozenset({
    "10minutemail.com",
    "guerrillamail.com",
    "mailinator.com",
    "maildrop.cc",
    "tempmail.com",
    "temp-mail.org",
    "throwawaymail.com",
    "trashmail.com",
    "yopmail.com",
})

FIELD_MAX_LENGTHS = {
    "name": NAME_MAX_LENGTH,
    "email": EMAIL_MAX_LENGTH,
    "company": COMPANY_MAX_LENGTH,
    "phone": PHONE_MAX_LENGTH,
    "service": SERVICE_MAX_LENGTH,
    "message": MESSAGE_MAX_LENGTH,
}


class EmailCheck(NamedTuple):
    """Result of an email address check."""

    is_valid: bool
    reason: str | None = None


class SecurityScanner:
    """Detects unsafe content and sanitizes submissions."""

    def validate_input(self, value: str) -> bool:
        """Check that a field value is free of injection content.

        Args:
            value: Field value to check.

        Returns:
            False if the value contains markup/script injection or control characters.
        """
        if CONTROL_CHARS.search(value):
            logger.warning("Control characters detected in input")
            return False

        for pattern, label in DANGEROUS_INPUT_PATTERNS:
            if pattern.search(value):
                logger.warning("Unsafe input pattern detected", pattern=label)
                return False

        return True

    def validate_email(self, email: str) -> EmailCheck:
        """Check email address format and deliverability heuristics.

        Args:
            email: Email address to check.

        Returns:
            EmailCheck with a human-readable reason when invalid.
        """
        email = (email or "").strip()
        if not email:
            return EmailCheck(False, "Email address is required")

        if not EMAIL_REGEX.match(email):
            return EmailCheck(False, "Invalid email format")

        local_part, domain = email.rsplit("@", 1)
        if len(local_part) > 64:
            return EmailCheck(False, "Email address is too long")

        if ".." in email or local_part.startswith(".") or local_part.endswith("."):
            return EmailCheck(False, "Invalid email format")

        if domain.lower() in DISPOSABLE_EMAIL_DOMAINS:
            return EmailCheck(False, "Disposable email addresses are not allowed")

        return EmailCheck(True)

    def sanitize(self, submission: ContactSubmission) -> ContactSubmission:
        """Return a cleaned copy of a submission.

        Args:
            submission: Validated submission.

        Returns:
            New ContactSubmission with control characters and markup removed.
        """
        cleaned: dict[str, str | None] = {}
        for field_name, max_length in FIELD_MAX_LENGTHS.items():
            value = getattr(submission, field_name)
            if value is None:
                cleaned[field_name] = None
                continue
            cleaned[field_name] = sanitize_text(
                value,
                max_length=max_length,
                multiline=field_name == "message",
            )

        if cleaned["email"]:
            cleaned["email"] = cleaned["email"].lower()

        return submission.model_copy(update=cleaned)


def sanitize_text(value: str, max_length: int, multiline: bool = False) -> str:
    """Sanitize a free-text value.

    Args:
        value: Raw text.
        max_length: Maximum length of the result.
        multiline: Keep line breaks (whitespace is collapsed otherwise).

    Returns:
        Text without control characters or tags.
    """
    text = CONTROL_CHARS.sub("", value)
    text = HTML_TAG.sub("", text)

    if multiline:
        text = "\n".join(line.strip() for line in text.splitlines()).strip()
    else:
        text = WHITESPACE_RUN.sub(" ", text).strip()

    return text[:max_length]
