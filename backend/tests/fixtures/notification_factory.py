"""Factory functions for creating test notification, token and credential data."""

import json
import uuid
from functools import lru_cache
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from models.notification import DestinationToken, Notification
from shared.config import Settings


def create_test_notification_record(
    title: str = "Test Notification",
    message: str = "Test notification body",
    sent: bool | None = None,
    **overrides,
) -> dict[str, Any]:
    """
    Factory for a raw notifications/{id} record as stored in the database.

    Args:
        title: Notification title
        message: Notification body
        sent: Sent flag (omitted from the record when None)
        **overrides: Override or add any field

    Returns:
        Dictionary matching the Realtime Database record
    """
    record: dict[str, Any] = {"title": title, "message": message}
    if sent is not None:
        record["sent"] = sent
    record.update(overrides)
    return record


def create_test_notification(
    notification_id: str | None = None,
    title: str = "Test Notification",
    message: str = "Test notification body",
) -> Notification:
    return Notification(
        id=notification_id or f"-N{uuid.uuid4().hex[:12]}",
        title=title,
        message=message,
    )


def create_test_token_record(
    token: str | None = None, active: bool | None = None, **overrides
) -> dict[str, Any]:
    """Raw fcmTokens/{id} record. `active` is omitted when None."""
    record: dict[str, Any] = {
        "token": token if token is not None else f"fcm-{uuid.uuid4().hex}"
    }
    if active is not None:
        record["active"] = active
    record.update(overrides)
    return record


def create_test_token(
    destination_id: str | None = None, token: str | None = None
) -> DestinationToken:
    return DestinationToken(
        id=destination_id or f"device_{uuid.uuid4().hex[:6]}",
        token=token or f"fcm-{uuid.uuid4().hex}",
    )


@lru_cache(maxsize=1)
def create_test_key_pair() -> tuple[str, str]:
    """RSA key pair (private PEM, public PEM), generated once per test session."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return private_pem, public_pem


def create_test_service_account(**overrides) -> dict[str, Any]:
    """Service account key dict signed with the test RSA key."""
    private_pem, _ = create_test_key_pair()
    data = {
        "type": "service_account",
        "project_id": "nrd-test",
        "private_key_id": "key-123",
        "private_key": private_pem,
        "client_email": "dispatcher@nrd-test.iam.gserviceaccount.com",
        "token_uri": "https://oauth2.googleapis.com/token",
    }
    data.update(overrides)
    return data


def create_test_settings(**overrides) -> Settings:
    values: dict[str, Any] = {
        "service_account_json": json.dumps(create_test_service_account()),
        "project_id": "nrd-test",
        "database_url": "https://nrd-test-default-rtdb.firebaseio.com",
        "max_workers": 4,
        "http_timeout": 5.0,
    }
    values.update(overrides)
    return Settings(**values)
