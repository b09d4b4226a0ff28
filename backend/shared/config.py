"""
Environment configuration for the notification dispatcher.

Values come from the process environment, optionally seeded from a .env file.
"""

import json
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from shared.errors import ConfigError

DEFAULT_MAX_WORKERS = 8
DEFAULT_HTTP_TIMEOUT = 15.0


class Settings(BaseModel):
    """Resolved configuration for one run."""

    service_account_json: str = Field(..., min_length=1)
    project_id: str | None = None
    database_url: str = Field(..., min_length=1)
    max_workers: int = Field(DEFAULT_MAX_WORKERS, ge=1, le=64)
    http_timeout: float = Field(DEFAULT_HTTP_TIMEOUT, gt=0)
    guarded_writes: bool = False

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read instead of os.environ (tests)

        Returns:
            Settings instance

        Raises:
            ConfigError: If FCM_SERVICE_ACCOUNT_JSON is unset, no database URL
                can be determined, or a numeric setting is invalid
        """
        if env is None:
            load_dotenv()
            env = dict(os.environ)

        service_account_json = (env.get("FCM_SERVICE_ACCOUNT_JSON") or "").strip()
        if not service_account_json:
            raise ConfigError(
                "FCM_SERVICE_ACCOUNT_JSON is not configured",
                setting="FCM_SERVICE_ACCOUNT_JSON",
            )

        project_id = (env.get("FCM_PROJECT_ID") or "").strip() or None

        database_url = (env.get("FIREBASE_DATABASE_URL") or "").strip()
        if not database_url:
            database_url = _default_database_url(service_account_json)
        if not database_url:
            raise ConfigError(
                "FIREBASE_DATABASE_URL is not configured and the service account "
                "has no project_id to derive it from",
                setting="FIREBASE_DATABASE_URL",
            )

        max_workers = _parse_number(env, "FCM_MAX_WORKERS", int, DEFAULT_MAX_WORKERS)
        http_timeout = _parse_number(
            env, "HTTP_TIMEOUT_SECONDS", float, DEFAULT_HTTP_TIMEOUT
        )
        if not 1 <= max_workers <= 64:
            raise ConfigError(
                f"FCM_MAX_WORKERS must be between 1 and 64, got {max_workers}",
                setting="FCM_MAX_WORKERS",
            )
        if http_timeout <= 0:
            raise ConfigError(
                f"HTTP_TIMEOUT_SECONDS must be positive, got {http_timeout}",
                setting="HTTP_TIMEOUT_SECONDS",
            )

        return cls(
            service_account_json=service_account_json,
            project_id=project_id,
            database_url=database_url,
            max_workers=max_workers,
            http_timeout=http_timeout,
            guarded_writes=env.get("GUARDED_STATUS_WRITES", "false").strip().lower()
            in ("1", "true", "yes"),
        )


def _default_database_url(service_account_json: str) -> str:
    """Default Realtime Database URL for the service account's project."""
    try:
        data = json.loads(service_account_json)
    except ValueError:
        # Malformed credentials are reported by the credential loader
        return ""
    project_id = data.get("project_id") if isinstance(data, dict) else None
    if not project_id:
        return ""
    return f"https://{project_id}-default-rtdb.firebaseio.com"


def _parse_number(env: dict[str, str], name: str, kind: type, default):
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}", setting=name)
