"""
Fan-out of one notification to every active destination token.

Destinations are independent: each send runs on a bounded thread pool, and a
failure for one device never stops delivery to the others. The notification
counts as sent when at least one device accepted it.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from models.notification import (
    DeliveryFailure,
    DestinationToken,
    DispatchOutcome,
    Notification,
)
from shared.errors import CredentialError, SendError, TokenExchangeError

NO_TOKENS_REASON = "No FCM tokens registered"
PROJECT_NOT_CONFIGURED_REASON = "FCM_PROJECT_ID not configured"


class Sender(Protocol):
    def send(self, title: str, message: str, destination: DestinationToken) -> object:
        ...


def skipped_outcome(notification: Notification, reason: str) -> DispatchOutcome:
    """Outcome for a notification that was never sent to anyone."""
    return DispatchOutcome(notification_id=notification.id, skipped_reason=reason)


def _send_one(
    sender: Sender, notification: Notification, destination: DestinationToken
) -> DeliveryFailure | None:
    try:
        sender.send(notification.title, notification.message, destination)
    except SendError as e:
        return e.to_failure()
    except (CredentialError, TokenExchangeError) as e:
        return DeliveryFailure(
            destination_id=destination.id,
            reason=str(e) or "unknown",
            status_code=getattr(e, "status_code", None),
        )
    except Exception as e:
        # Anything else still fails only this destination
        return DeliveryFailure(
            destination_id=destination.id, reason=str(e) or "unknown"
        )
    return None


def dispatch_notification(
    notification: Notification,
    tokens: list[DestinationToken],
    sender: Sender,
    max_workers: int = 8,
) -> DispatchOutcome:
    """
    Send a notification to every destination and collect the results.

    Every send is awaited before returning, so the outcome always lists each
    destination either as delivered or as failed.

    Args:
        notification: Pending notification
        tokens: Active destination tokens
        sender: Object with send(title, message, destination)
        max_workers: Upper bound on concurrent sends

    Returns:
        DispatchOutcome with delivered ids and per-destination failures
    """
    outcome = DispatchOutcome(notification_id=notification.id)
    if not tokens:
        outcome.skipped_reason = NO_TOKENS_REASON
        return outcome

    workers = max(1, min(max_workers, len(tokens)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(
            executor.map(
                lambda destination: _send_one(sender, notification, destination),
                tokens,
            )
        )

    for destination, failure in zip(tokens, results):
        if failure is None:
            outcome.delivered.append(destination.id)
            print(f"   ✓ Sent to device: {destination.id}")
        else:
            outcome.failures.append(failure)
            print(f"   ✗ Error sending to {failure.describe()}")

    return outcome
