"""Realtime notification helpers for the infrastructure layer."""

from .change_feed import NotificationChangeFeed
from .manager import NotificationConnectionManager
from .platform import (
    PERMISSION_DEFAULT,
    PERMISSION_DENIED,
    PERMISSION_GRANTED,
    BrowserNotification,
    BrowserPlatformNotifier,
    HeadlessPlatformNotifier,
    PlatformNotifier,
)
from .publisher import RealtimeEventPublisher
from .push import (
    LocalPushMessagingProvider,
    NullPushMessagingProvider,
    PushMessagingProvider,
)
from .serialization import parse_payload, serialize_notification, serialize_payload

__all__ = [
    "PERMISSION_DEFAULT",
    "PERMISSION_DENIED",
    "PERMISSION_GRANTED",
    "BrowserNotification",
    "BrowserPlatformNotifier",
    "HeadlessPlatformNotifier",
    "LocalPushMessagingProvider",
    "NotificationChangeFeed",
    "NotificationConnectionManager",
    "NullPushMessagingProvider",
    "PlatformNotifier",
    "PushMessagingProvider",
    "RealtimeEventPublisher",
    "parse_payload",
    "serialize_notification",
    "serialize_payload",
]
