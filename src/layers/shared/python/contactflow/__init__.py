"""Contact submission processing across persistence and notification channels."""

__version__ = "0.1.0"
