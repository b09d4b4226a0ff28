"""Pydantic models for data validation and type checking."""

from models.credentials import ServiceAccount
from models.notification import (
    DeliveryFailure,
    DestinationToken,
    DispatchOutcome,
    Notification,
    RunResult,
)

__all__ = [
    "Notification",
    "DestinationToken",
    "DeliveryFailure",
    "DispatchOutcome",
    "RunResult",
    "ServiceAccount",
]
