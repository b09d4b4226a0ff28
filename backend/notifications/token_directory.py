"""Reads the registered FCM destination tokens from the Realtime Database."""

from firebase_admin import exceptions as firebase_exceptions

from models.notification import DestinationToken
from shared.db import RealtimeDatabase, child_items
from shared.errors import DirectoryReadError

TOKENS_PATH = "fcmTokens"


def get_active_tokens(database: RealtimeDatabase) -> list[DestinationToken]:
    """
    Get every destination token that should receive notifications.

    An entry is kept when it has a non-empty token and its `active` flag is
    not explicitly False (a missing flag means active).

    Args:
        database: Realtime Database handle

    Returns:
        Active tokens in the datastore's enumeration order, possibly empty

    Raises:
        DirectoryReadError: If the fcmTokens subtree can't be read
    """
    try:
        data = database.reference(TOKENS_PATH).get()
    except (firebase_exceptions.FirebaseError, ValueError) as e:
        raise DirectoryReadError(f"Could not read {TOKENS_PATH}: {e}") from e

    if not data:
        return []

    return [
        DestinationToken(id=key, token=str(entry["token"]), active=True)
        for key, entry in child_items(data)
        if isinstance(entry, dict)
        and entry.get("token")
        and entry.get("active") is not False
    ]

