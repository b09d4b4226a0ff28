"""Helper functions for creating mocked external services."""

import copy
import json
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

from firebase_admin import exceptions as firebase_exceptions


class FakeReference:
    """In-memory stand-in for firebase_admin.db.Reference."""

    def __init__(self, database: "FakeRealtimeDatabase", path: str):
        self.database = database
        self.path = path.strip("/")
        self.keys = [k for k in self.path.split("/") if k]

    def get(self):
        self.database.reads.append(self.path)
        if self.path in self.database.failing_reads:
            raise firebase_exceptions.UnavailableError(
                f"Realtime Database unavailable reading {self.path}"
            )
        node = self.database.tree
        for key in self.keys:
            if not isinstance(node, dict) or key not in node:
                return None
            node = node[key]
        return copy.deepcopy(node)

    def update(self, value: Dict[str, Any]) -> None:
        if not value:
            raise ValueError("Value argument must be a non-empty dictionary.")
        if self.database.fail_writes:
            raise firebase_exceptions.UnavailableError(
                f"Realtime Database unavailable writing {self.path}"
            )
        self.database.writes.append((self.path, copy.deepcopy(value)))
        node = self._parent_node(create=True)
        target = node.setdefault(self.keys[-1], {})
        target.update(copy.deepcopy(value))

    def transaction(self, transaction_update):
        if self.database.fail_writes:
            raise firebase_exceptions.UnavailableError(
                f"Realtime Database unavailable writing {self.path}"
            )
        current = self.get()
        new_value = transaction_update(current)
        self.database.writes.append((self.path, copy.deepcopy(new_value)))
        node = self._parent_node(create=True)
        node[self.keys[-1]] = copy.deepcopy(new_value)
        return new_value

    def _parent_node(self, create: bool = False) -> Dict[str, Any]:
        node = self.database.tree
        for key in self.keys[:-1]:
            if create:
                node = node.setdefault(key, {})
            else:
                node = node[key]
        return node


class FakeRealtimeDatabase:
    """
    In-memory Realtime Database tree with the RealtimeDatabase interface.

    Records every read path and written update so tests can assert on
    datastore traffic.
    """

    def __init__(self, tree: Optional[Dict[str, Any]] = None):
        self.tree: Dict[str, Any] = copy.deepcopy(tree) if tree else {}
        self.reads: List[str] = []
        self.writes: List[tuple] = []
        self.failing_reads: set = set()
        self.fail_writes = False
        self.closed = False

    def reference(self, path: str) -> FakeReference:
        return FakeReference(self, path)

    def close(self) -> None:
        self.closed = True

    def notification(self, notification_id: str) -> Dict[str, Any]:
        return self.tree["notifications"][notification_id]


def create_mock_database(
    notifications: Optional[Dict[str, Any]] = None,
    tokens: Optional[Dict[str, Any]] = None,
) -> FakeRealtimeDatabase:
    """
    Create a fake Realtime Database holding the given subtrees.

    Args:
        notifications: Children of notifications/
        tokens: Children of fcmTokens/

    Returns:
        FakeRealtimeDatabase
    """
    tree: Dict[str, Any] = {}
    if notifications is not None:
        tree["notifications"] = notifications
    if tokens is not None:
        tree["fcmTokens"] = tokens
    return FakeRealtimeDatabase(tree)


def create_mock_requests_response(
    status_code: int = 200,
    json_data: Any = None,
    text: Optional[str] = None,
    reason: str = "OK",
):
    """Create a mocked requests Response object."""
    mock_response = Mock()
    mock_response.status_code = status_code
    mock_response.ok = 200 <= status_code < 400
    mock_response.reason = reason

    if text is None:
        text = json.dumps(json_data) if json_data is not None else ""
    mock_response.text = text

    if json_data is not None:
        mock_response.json.return_value = json_data
    else:
        mock_response.json.side_effect = ValueError("No JSON object could be decoded")

    return mock_response


def create_fcm_error_response(
    status_code: int = 404,
    status: str = "NOT_FOUND",
    error_code: Optional[str] = "UNREGISTERED",
    message: str = "Requested entity was not found.",
):
    """Mocked FCM v1 error response."""
    details = []
    if error_code:
        details.append(
            {
                "@type": "type.googleapis.com/google.firebase.fcm.v1.FcmError",
                "errorCode": error_code,
            }
        )
    return create_mock_requests_response(
        status_code=status_code,
        json_data={
            "error": {
                "code": status_code,
                "message": message,
                "status": status,
                "details": details,
            }
        },
        reason="Error",
    )
