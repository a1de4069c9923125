"""ORM models used by the application infrastructure."""

from .notification import NotificationModel
from .notification_preferences import NotificationPreferencesModel

__all__ = [
    "NotificationModel",
    "NotificationPreferencesModel",
]
