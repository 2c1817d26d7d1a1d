"""System health model."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from contactflow.models.base import utc_now


class HealthState(str, Enum):
    """Aggregate health of the submission channels."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    DOWN = "down"


class SystemHealth(PydanticBaseModel):
    """Point-in-time health of both channels. Never persisted."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    persistence_up: bool
    notification_up: bool
    overall: HealthState
    checked_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_checks(cls, persistence_up: bool, notification_up: bool) -> "SystemHealth":
        """Derive the overall state from the two channel checks."""
        if persistence_up and notification_up:
            overall = HealthState.HEALTHY
        elif persistence_up or notification_up:
            overall = HealthState.DEGRADED
        else:
            overall = HealthState.DOWN

        return cls(
            persistence_up=persistence_up,
            notification_up=notification_up,
            overall=overall,
        )

    def to_response(self) -> dict[str, Any]:
        """Get the caller-facing dict."""
        return self.model_dump(mode="json", by_alias=True)
