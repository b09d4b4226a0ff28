"""
Push notification dispatch for the NRD notification queue.

This module handles:
- Reading pending notifications and registered FCM tokens from Firebase
- Exchanging the service account for FCM access tokens
- Fanning each notification out to every active device
- Recording each notification's terminal status
"""

from .dispatcher import dispatch_notification
from .fcm_sender import FcmSender
from .notification_queue import get_pending_notifications, mark_notification_as_sent
from .token_directory import get_active_tokens

__all__ = [
    'dispatch_notification',
    'FcmSender',
    'get_active_tokens',
    'get_pending_notifications',
    'mark_notification_as_sent',
]
