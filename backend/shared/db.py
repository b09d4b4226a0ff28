import uuid
from typing import Any

import firebase_admin
from firebase_admin import credentials, db

from models.credentials import ServiceAccount
from shared.errors import CredentialError


class RealtimeDatabase:
    """Handle on one Firebase app's Realtime Database."""

    def __init__(self, app: firebase_admin.App):
        self.app = app

    def reference(self, path: str) -> db.Reference:
        return db.reference(path, app=self.app)

    def close(self) -> None:
        firebase_admin.delete_app(self.app)


def get_realtime_db(
    service_account: ServiceAccount, database_url: str, timeout: float | None = None
) -> RealtimeDatabase:
    """Initialize a dedicated Firebase app and return its database handle."""
    try:
        cert = credentials.Certificate(service_account.model_dump(exclude_none=True))
    except ValueError as e:
        raise CredentialError(f"Invalid service account certificate: {e}") from e
    options = {"databaseURL": database_url}
    if timeout is not None:
        options["httpTimeout"] = timeout

    # Named app so repeated runs in one process never collide with [DEFAULT]
    app = firebase_admin.initialize_app(
        cert, options, name=f"notification-dispatch-{uuid.uuid4().hex[:8]}"
    )
    return RealtimeDatabase(app)


def child_items(data: Any) -> list[tuple[str, Any]]:
    """(key, value) pairs of a subtree returned by Reference.get()."""
    # Realtime Database returns integer-like keys as a list
    if isinstance(data, list):
        return [(str(i), entry) for i, entry in enumerate(data) if entry is not None]
    if isinstance(data, dict):
        return list(data.items())
    return []
