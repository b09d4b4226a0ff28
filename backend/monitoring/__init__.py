"""
Liveness monitoring for the scheduled dispatcher.

Sends a one-shot heartbeat message to a Telegram chat on every scheduled run.
"""

from .heartbeat import build_heartbeat_message, send_telegram_message

__all__ = [
    "build_heartbeat_message",
    "send_telegram_message",
]
