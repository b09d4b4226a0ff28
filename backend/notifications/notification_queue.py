"""
Pending notification queue stored under notifications/ in the Realtime Database.

Reads records that still have to be dispatched and writes their terminal
status back as a partial update.
"""

from typing import Any

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin.db import TransactionAbortedError

from models.notification import Notification
from shared.db import RealtimeDatabase, child_items
from shared.errors import QueueReadError, StatusWriteError
from shared.utils import now_millis

NOTIFICATIONS_PATH = "notifications"


class _AlreadyTerminal(Exception):
    """Aborts a guarded transaction when the record is no longer pending."""


def get_pending_notifications(database: RealtimeDatabase) -> list[Notification]:
    """
    Get all notifications that have not been marked as sent.

    Args:
        database: Realtime Database handle

    Returns:
        Pending notifications in the datastore's enumeration order

    Raises:
        QueueReadError: If the notifications subtree can't be read
    """
    try:
        data = database.reference(NOTIFICATIONS_PATH).get()
    except (firebase_exceptions.FirebaseError, ValueError) as e:
        raise QueueReadError(f"Could not read {NOTIFICATIONS_PATH}: {e}") from e

    if not data:
        return []

    pending = []
    for key, record in child_items(data):
        if not isinstance(record, dict) or record.get("sent"):
            continue
        pending.append(
            Notification(
                id=key,
                title=record.get("title"),
                message=record.get("message"),
                sent=False,
                error=None,
            )
        )
    return pending


def build_status_update(error: str | None, sent_at: int) -> dict[str, Any]:
    updates: dict[str, Any] = {"sent": True, "sentAt": sent_at}
    if error:
        updates["error"] = error
    return updates


def mark_notification_as_sent(
    database: RealtimeDatabase,
    notification_id: str,
    error: str | None = None,
    sent_at: int | None = None,
    guarded: bool = False,
) -> bool:
    """
    Record a notification's terminal status.

    Sets sent=True and sentAt, plus `error` when one is given. Other fields
    are left untouched. Repeating the call with the same arguments leaves the
    record in the same state.

    Args:
        database: Realtime Database handle
        notification_id: Key under notifications/
        error: Failure diagnostic, None when the notification was delivered
        sent_at: Epoch milliseconds, defaults to now
        guarded: Only write if the record is still pending (compare-and-swap)

    Returns:
        True if the update was written, False if a guarded write found the
        record already terminal or gone

    Raises:
        StatusWriteError: If the datastore rejects the update
    """
    updates = build_status_update(error, now_millis() if sent_at is None else sent_at)
    ref = database.reference(f"{NOTIFICATIONS_PATH}/{notification_id}")

    try:
        if not guarded:
            ref.update(updates)
            return True

        def _transition(current: Any) -> Any:
            if not isinstance(current, dict) or current.get("sent"):
                raise _AlreadyTerminal()
            # Transactions replace the node, so merge onto the value read under
            # the same etag to keep every other field
            return {**current, **updates}

        ref.transaction(_transition)
        return True
    except _AlreadyTerminal:
        return False
    except (
        firebase_exceptions.FirebaseError,
        TransactionAbortedError,
        ValueError,
    ) as e:
        raise StatusWriteError(
            f"Could not update notification {notification_id}: {e}",
            notification_id=notification_id,
        ) from e
