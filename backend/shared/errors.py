"""
Error types for the notification dispatcher.

Pre-flight errors (configuration, queue and directory reads) abort the run.
Credential, token exchange and send errors are scoped to a single destination
and end up in the notification's diagnostic string. Status write errors are
reported but never undo sends that already happened.
"""

from models.notification import DeliveryFailure


class DispatchError(Exception):
    """Base class for all dispatcher errors."""


class ConfigError(DispatchError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, setting: str | None = None):
        super().__init__(message)
        self.setting = setting


class QueueReadError(DispatchError):
    """Reading the notifications subtree failed."""


class DirectoryReadError(DispatchError):
    """Reading the destination token directory failed."""


class CredentialError(DispatchError):
    """Service account credential is missing or malformed."""


class TokenExchangeError(DispatchError):
    """OAuth2 token endpoint rejected the assertion or answered garbage."""

    def __init__(
        self, message: str, status_code: int | None = None, body: str | None = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SendError(DispatchError):
    """Delivery to a single destination failed."""

    def __init__(
        self,
        destination_id: str,
        reason: str,
        status_code: int | None = None,
        error_code: str | None = None,
    ):
        super().__init__(f"{destination_id}: {reason}")
        self.destination_id = destination_id
        self.reason = reason or "unknown"
        self.status_code = status_code
        self.error_code = error_code

    def to_failure(self) -> DeliveryFailure:
        """Convert into a DeliveryFailure record."""
        return DeliveryFailure(
            destination_id=self.destination_id,
            reason=self.reason,
            status_code=self.status_code,
            error_code=self.error_code,
        )


class StatusWriteError(DispatchError):
    """Terminal status could not be written back to the datastore."""

    def __init__(self, message: str, notification_id: str | None = None):
        super().__init__(message)
        self.notification_id = notification_id


class HeartbeatError(DispatchError):
    """Telegram heartbeat message could not be delivered."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
