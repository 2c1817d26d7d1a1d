"""Runtime configuration for contact submission processing."""

import os
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

PRODUCTION_STAGES = frozenset({"prod", "production"})


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str) -> list[str]:
    value = os.environ.get(name, "")
    return [item.strip() for item in value.split(",") if item.strip()]


class ContactSettings(BaseModel):
    """Settings for the reconciliation engine, its channels and the status probe.

    Construct directly in tests; use from_env() in Lambda handlers. Settings
    are frozen, so the production check cannot be bypassed after construction.
    """

    model_config = ConfigDict(frozen=True)

    stage: str = "dev"

    # Skip both channels and return a synthetic success (integration testing only)
    simulate_delivery: bool = False
    simulated_latency_seconds: float = Field(default=1.5, ge=0)

    # Upper bound on each channel call
    channel_timeout_seconds: float = Field(default=10.0, gt=0)

    support_email: str = "support@example.com"

    # Persistence
    table_name: str = "contactflow-dev"
    region_name: str = "us-east-1"

    # Notification
    notification_transport: Literal["http", "ses"] = "http"
    notification_url: str = "http://localhost:3000/api/contact"
    notification_health_url: str = "http://localhost:3000/api/health-check"
    staff_emails: list[str] = Field(default_factory=list)
    from_email: str | None = None

    @model_validator(mode="after")
    def _check_simulation_stage(self) -> "ContactSettings":
        if self.simulate_delivery and self.is_production:
            raise ValueError("simulate_delivery cannot be enabled in production")
        return self

    @property
    def is_production(self) -> bool:
        """Whether the settings target a production stage."""
        return self.stage.lower() in PRODUCTION_STAGES

    @classmethod
    def from_env(cls) -> "ContactSettings":
        """Build settings from environment variables.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        return cls(
            stage=os.environ.get("STAGE", "dev"),
            simulate_delivery=_env_bool("CONTACT_SIMULATE_DELIVERY", False),
            simulated_latency_seconds=os.environ.get("CONTACT_SIMULATED_LATENCY", "1.5"),
            channel_timeout_seconds=os.environ.get("CONTACT_CHANNEL_TIMEOUT", "10"),
            support_email=os.environ.get("CONTACT_SUPPORT_EMAIL", "support@example.com"),
            table_name=os.environ.get("TABLE_NAME", "contactflow-dev"),
            region_name=os.environ.get("AWS_REGION", os.environ.get("AWS_DEFAULT_REGION", "us-east-1")),
            notification_transport=os.environ.get("CONTACT_NOTIFICATION_TRANSPORT", "http"),
            notification_url=os.environ.get(
                "CONTACT_NOTIFICATION_URL", "http://localhost:3000/api/contact"
            ),
            notification_health_url=os.environ.get(
                "CONTACT_NOTIFICATION_HEALTH_URL", "http://localhost:3000/api/health-check"
            ),
            staff_emails=_env_list("CONTACT_STAFF_EMAILS"),
            from_email=os.environ.get("SES_FROM_EMAIL"),
        )
