"""
Firebase Cloud Messaging HTTP v1 delivery to a single device token.
"""

from typing import Any

import requests

from models.notification import DestinationToken
from notifications.credentials import AccessTokenProvider
from shared.errors import SendError

FCM_SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"


def build_fcm_message(title: str, body: str, device_token: str) -> dict[str, Any]:
    """Request body for messages:send."""
    return {
        "message": {
            "token": device_token,
            "notification": {"title": title, "body": body},
            "data": {"title": title, "message": body},
        }
    }


def parse_fcm_error(response: requests.Response) -> str | None:
    """
    Extract the provider error code from an FCM error response.

    Prefers the FcmError detail (e.g. UNREGISTERED) over the generic status
    (e.g. NOT_FOUND). Returns None when the body isn't an FCM error object.
    """
    try:
        payload = response.json()
    except ValueError:
        return None

    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        return None

    for detail in error.get("details") or []:
        if isinstance(detail, dict) and detail.get("errorCode"):
            return str(detail["errorCode"])
    status = error.get("status")
    return str(status) if status else None


class FcmSender:
    """Sends notifications to one destination at a time."""

    def __init__(
        self,
        project_id: str,
        token_provider: AccessTokenProvider,
        timeout: float = 15.0,
    ):
        self.project_id = project_id
        self.token_provider = token_provider
        self.timeout = timeout
        self.url = FCM_SEND_URL.format(project_id=project_id)

    def send(
        self, title: str, message: str, destination: DestinationToken
    ) -> dict[str, Any]:
        """
        Deliver one notification to one device.

        A 401 means the cached bearer token went stale; it is re-derived and
        the message re-sent once.

        Args:
            title: Notification title
            message: Notification body
            destination: Device token record

        Returns:
            Parsed FCM response (contains the message `name`)

        Raises:
            SendError: On transport failure, non-2xx response, or invalid JSON
            CredentialError: If the service account can't sign an assertion
            TokenExchangeError: If a bearer token can't be obtained
        """
        body = build_fcm_message(title, message, destination.token)

        access_token = self.token_provider.get()
        response = self._post(destination, body, access_token)
        if response.status_code == 401:
            self.token_provider.invalidate(access_token)
            response = self._post(destination, body, self.token_provider.get())

        if not response.ok:
            raise SendError(
                destination.id,
                f"FCM error: {response.status_code} - {response.text or 'unknown'}",
                status_code=response.status_code,
                error_code=parse_fcm_error(response),
            )

        try:
            return response.json()
        except ValueError:
            raise SendError(
                destination.id,
                f"FCM returned invalid JSON: {response.text[:200] or 'unknown'}",
                status_code=response.status_code,
            )

    def _post(
        self, destination: DestinationToken, body: dict[str, Any], access_token: str
    ) -> requests.Response:
        try:
            return requests.post(
                self.url,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {access_token}",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise SendError(destination.id, f"FCM request failed: {e}") from e
