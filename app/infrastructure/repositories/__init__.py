"""Repository implementations for the notification store."""

from .notification_preferences_repository import NotificationPreferencesRepository
from .notification_repository import (
    DEFAULT_PAGE_SIZE,
    NotificationNotFoundError,
    NotificationRepository,
    NotificationStoreError,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "NotificationNotFoundError",
    "NotificationPreferencesRepository",
    "NotificationRepository",
    "NotificationStoreError",
]
