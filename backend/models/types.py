"""Shared type definitions for type checking.

Uses NewType for record keys so a notification key can't be passed where a
destination token key is expected.

Uses TypeAlias for plain structural types.
"""

from typing import NewType, TypeAlias

# Realtime Database child keys
NotificationID = NewType("NotificationID", str)
DestinationID = NewType("DestinationID", str)

# Structural aliases
DeviceToken: TypeAlias = str  # FCM registration token
EpochMillis: TypeAlias = int  # milliseconds since the Unix epoch
