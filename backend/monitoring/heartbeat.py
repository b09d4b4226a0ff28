"""
CLI script that posts a heartbeat message to Telegram.

Usage:
    uv run python -m monitoring.heartbeat

Requires TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID. Exits 1 if either is
missing or the message can't be delivered.
"""

import os
import sys
import time
from typing import Any

import requests
from dotenv import load_dotenv

from shared.errors import ConfigError, HeartbeatError
from shared.utils import github_run_info, readable_timestamp

TELEGRAM_SEND_URL = "https://api.telegram.org/bot{bot_token}/sendMessage"

TRIGGER_LABELS = {
    "schedule": " (SCHEDULE/CRON)",
    "workflow_dispatch": " (MANUAL)",
    "push": " (PUSH)",
}


def send_telegram_message(
    message: str,
    bot_token: str | None = None,
    chat_id: str | None = None,
    timeout: float = 15.0,
) -> dict[str, Any]:
    """
    Send a plain-text message through the Telegram Bot API.

    Args:
        message: Text to send (no parse_mode, so no escaping needed)
        bot_token: Bot token, defaults to TELEGRAM_BOT_TOKEN
        chat_id: Target chat, defaults to TELEGRAM_CHAT_ID
        timeout: Request timeout in seconds

    Returns:
        Telegram API response body

    Raises:
        ConfigError: If the bot token or chat id is missing
        HeartbeatError: On network errors, HTTP errors, unparseable bodies
            or an `ok: false` response
    """
    bot_token = bot_token or os.getenv("TELEGRAM_BOT_TOKEN")
    chat_id = chat_id or os.getenv("TELEGRAM_CHAT_ID")

    if not bot_token or not chat_id:
        raise ConfigError("TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID are required")

    url = TELEGRAM_SEND_URL.format(bot_token=bot_token)
    print(f"URL: {url.replace(bot_token, '***')}")
    print(f"Chat ID: {chat_id}")
    print(f"Message length: {len(message)} characters")

    try:
        response = requests.post(
            url, json={"chat_id": chat_id, "text": message}, timeout=timeout
        )
    except requests.RequestException as e:
        raise HeartbeatError(f"Network error contacting Telegram: {e}") from e

    print(f"HTTP status: {response.status_code} {response.reason or 'Unknown'}")

    try:
        body = response.json()
    except ValueError as e:
        raise HeartbeatError(
            f"Could not parse Telegram response: {response.text[:500]}",
            status_code=response.status_code,
        ) from e

    if not isinstance(body, dict):
        raise HeartbeatError(
            f"Unexpected Telegram response: {response.text[:500]}",
            status_code=response.status_code,
        )

    if not response.ok:
        detail = body.get("description") or body.get("error_code") or "Unknown error"
        raise HeartbeatError(
            f"Telegram HTTP {response.status_code}: {detail}",
            status_code=response.status_code,
        )

    if not body.get("ok"):
        raise HeartbeatError(
            f"Telegram error: {body.get('description') or 'Unknown error'} "
            f"(error_code: {body.get('error_code') or 'N/A'})",
            status_code=response.status_code,
        )

    message_id = (body.get("result") or {}).get("message_id", "N/A")
    print(f"✓ Message sent. Message ID: {message_id}")
    return body


def build_heartbeat_message(
    timestamp: str | None = None, env: dict[str, str] | None = None
) -> str:
    """Heartbeat text with the run number and what triggered it."""
    env = dict(os.environ) if env is None else env
    timestamp = timestamp or readable_timestamp()

    run_info = github_run_info(env)
    run_line = ""
    if run_info:
        run_line = f"\nRun #{run_info['run_number']} (ID: {run_info['run_id']})"

    event = env.get("GITHUB_EVENT_NAME") or "unknown"
    label = TRIGGER_LABELS.get(event, "")

    return (
        f"🟢 NRD MONITOR ACTIVE - ping from GitHub Actions{run_line}\n\n"
        f"📅 {timestamp}\n\n"
        f"⚡ Triggered by: {event.upper()}{label}"
    )


def main() -> int:
    """CLI entry point. Returns the process exit code."""
    load_dotenv()
    start = time.monotonic()

    print("=" * 60)
    print("Starting heartbeat...")
    print("=" * 60)

    try:
        message = build_heartbeat_message()
        print(f"Message: {message}")
        send_telegram_message(message)
    except (ConfigError, HeartbeatError) as e:
        print(f"✗ Heartbeat failed: {e}", file=sys.stderr)
        print(f"Time until failure: {int((time.monotonic() - start) * 1000)}ms")
        return 1

    print(f"Execution time: {int((time.monotonic() - start) * 1000)}ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
