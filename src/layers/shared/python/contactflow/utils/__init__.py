"""Utility functions and helpers."""

from contactflow.utils.exceptions import (
    ChannelError,
    ConflictError,
    ContactflowError,
    ValidationError,
)
from contactflow.utils.responses import error, success

__all__ = [
    # Response helpers
    "success",
    "error",
    # Exceptions
    "ContactflowError",
    "ChannelError",
    "ConflictError",
    "ValidationError",
]
