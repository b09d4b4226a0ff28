"""
OAuth2 access tokens for Firebase Cloud Messaging.

Exchanges a signed service-account assertion (RS256 JWT) for a short-lived
bearer token using the JWT-bearer grant. Tokens are cached per run by
AccessTokenProvider and never persisted.
"""

import json
import threading
import time
from typing import Any

import requests
from jose import jwt
from jose.exceptions import JOSEError
from pydantic import ValidationError

from models.credentials import ServiceAccount
from shared.errors import CredentialError, TokenExchangeError

FCM_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_SECONDS = 3600

# Refresh a cached token this long before the provider says it expires
EXPIRY_MARGIN_SECONDS = 60


def load_service_account(raw_json: str | None) -> ServiceAccount:
    """
    Parse the service account JSON blob.

    Args:
        raw_json: Contents of FCM_SERVICE_ACCOUNT_JSON

    Returns:
        ServiceAccount

    Raises:
        CredentialError: If the blob is missing, not JSON, or lacks
            client_email/private_key
    """
    if not raw_json or not raw_json.strip():
        raise CredentialError("FCM_SERVICE_ACCOUNT_JSON is not configured")

    try:
        data = json.loads(raw_json)
    except ValueError as e:
        raise CredentialError(f"Service account JSON is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise CredentialError("Service account JSON must be an object")

    try:
        return ServiceAccount.model_validate(data)
    except ValidationError as e:
        missing = ", ".join(str(err["loc"][0]) for err in e.errors())
        raise CredentialError(f"Service account JSON is incomplete: {missing}") from e


def create_signed_assertion(
    service_account: ServiceAccount,
    scope: str = FCM_SCOPE,
    issued_at: int | None = None,
) -> str:
    """
    Build the RS256-signed JWT assertion for the token endpoint.

    Raises:
        CredentialError: If the private key can't be used for signing
    """
    now = int(time.time()) if issued_at is None else issued_at
    claims = {
        "iss": service_account.client_email,
        "sub": service_account.client_email,
        "aud": service_account.token_uri,
        "iat": now,
        "exp": now + ASSERTION_LIFETIME_SECONDS,
        "scope": scope,
    }
    headers = None
    if service_account.private_key_id:
        headers = {"kid": service_account.private_key_id}

    try:
        return jwt.encode(
            claims, service_account.private_key, algorithm="RS256", headers=headers
        )
    except (JOSEError, ValueError, TypeError) as e:
        raise CredentialError(f"Could not sign assertion: {e}") from e


def exchange_assertion(
    service_account: ServiceAccount, assertion: str, timeout: float = 15.0
) -> tuple[str, int]:
    """
    Trade a signed assertion for a bearer token.

    Returns:
        (access_token, expires_in seconds)

    Raises:
        TokenExchangeError: On transport failure, non-2xx status, or a body
            without a usable access_token. Never retried.
    """
    try:
        response = requests.post(
            service_account.token_uri,
            data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise TokenExchangeError(f"Error requesting access token: {e}") from e

    if not response.ok:
        raise TokenExchangeError(
            f"Error requesting access token: {response.status_code} - {response.text}",
            status_code=response.status_code,
            body=response.text,
        )

    try:
        payload: Any = response.json()
    except ValueError as e:
        raise TokenExchangeError(
            f"Token endpoint returned invalid JSON: {response.text[:200]}",
            status_code=response.status_code,
            body=response.text,
        ) from e

    access_token = payload.get("access_token") if isinstance(payload, dict) else None
    if not access_token:
        raise TokenExchangeError(
            "Token endpoint response has no access_token",
            status_code=response.status_code,
            body=response.text,
        )

    expires_in = payload.get("expires_in", ASSERTION_LIFETIME_SECONDS)
    try:
        expires_in = int(expires_in)
    except (TypeError, ValueError):
        expires_in = ASSERTION_LIFETIME_SECONDS
    return access_token, expires_in


def get_access_token(
    service_account: ServiceAccount, scope: str = FCM_SCOPE, timeout: float = 15.0
) -> tuple[str, int]:
    """Sign an assertion and exchange it in one step."""
    assertion = create_signed_assertion(service_account, scope=scope)
    return exchange_assertion(service_account, assertion, timeout=timeout)


class AccessTokenProvider:
    """
    Run-scoped bearer token cache shared by concurrent senders.

    The token is derived on first use, reused until shortly before it
    expires, and re-derived after invalidate().
    """

    def __init__(
        self,
        service_account: ServiceAccount,
        scope: str = FCM_SCOPE,
        timeout: float = 15.0,
        clock=time.monotonic,
    ):
        self.service_account = service_account
        self.scope = scope
        self.timeout = timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._token: str | None = None
        self._expires_at = 0.0

    def get(self) -> str:
        with self._lock:
            if self._token is None or self._clock() >= self._expires_at:
                token, expires_in = get_access_token(
                    self.service_account, scope=self.scope, timeout=self.timeout
                )
                self._token = token
                self._expires_at = (
                    self._clock() + max(expires_in - EXPIRY_MARGIN_SECONDS, 0)
                )
            return self._token

    def invalidate(self, stale_token: str) -> None:
        """Drop the cached token unless another sender already replaced it."""
        with self._lock:
            if self._token == stale_token:
                self._token = None
                self._expires_at = 0.0
