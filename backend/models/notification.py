"""Pydantic models for notification records and dispatch results."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.types import DestinationID, DeviceToken, EpochMillis, NotificationID


class Notification(BaseModel):
    """Record stored under notifications/{id}."""

    model_config = ConfigDict(populate_by_name=True)

    id: NotificationID
    title: str = ""
    message: str = ""
    sent: bool = False
    sent_at: EpochMillis | None = Field(None, alias="sentAt")
    error: str | None = None

    @field_validator("title", "message", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        # Records are written by other clients; keep whatever text they left
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @property
    def is_pending(self) -> bool:
        return not self.sent


class DestinationToken(BaseModel):
    """Record stored under fcmTokens/{id}."""

    id: DestinationID
    token: DeviceToken = Field(..., min_length=1)
    active: bool = True


class DeliveryFailure(BaseModel):
    """Why a single destination did not receive a notification."""

    destination_id: str
    reason: str = "unknown"
    status_code: int | None = None
    error_code: str | None = None

    def describe(self) -> str:
        return f"{self.destination_id or 'unknown'}: {self.reason or 'unknown'}"


class DispatchOutcome(BaseModel):
    """Result of fanning one notification out to every destination."""

    notification_id: NotificationID
    delivered: list[str] = Field(default_factory=list)
    failures: list[DeliveryFailure] = Field(default_factory=list)
    skipped_reason: str | None = None

    @property
    def succeeded(self) -> bool:
        """At least one destination accepted the message."""
        return len(self.delivered) > 0

    @property
    def attempted(self) -> int:
        return len(self.delivered) + len(self.failures)

    def error_summary(self) -> str | None:
        """
        Diagnostic stored on the record when nothing was delivered.

        Returns None when the notification counts as sent.
        """
        if self.succeeded:
            return None
        if self.skipped_reason:
            return self.skipped_reason
        details = "; ".join(failure.describe() for failure in self.failures)
        return f"FCM: all sends failed - {details}"


class RunResult(BaseModel):
    """Counts for one invocation of the dispatcher."""

    total: int = Field(0, ge=0)
    sent: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
