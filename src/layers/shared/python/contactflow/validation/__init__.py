"""Validation and sanitization of contact submissions."""

from contactflow.validation.security import EmailCheck, SecurityScanner, sanitize_text
from contactflow.validation.validator import FormValidator, ValidationReport

__all__ = [
    "EmailCheck",
    "FormValidator",
    "SecurityScanner",
    "ValidationReport",
    "sanitize_text",
]
