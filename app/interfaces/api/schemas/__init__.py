from .notification import (
    BatchResult,
    CleanupRequest,
    NotificationIdsRequest,
    NotificationListResponse,
    NotificationOpenResponse,
    NotificationPreferencesRead,
    NotificationPreferencesUpdate,
    NotificationRead,
    NotificationStatsRead,
    UnreadCountRead,
)
from .order import (
    DeliveryAddressPayload,
    OrderEventResponse,
    OrderItemPayload,
    OrderPayload,
    StatusTransitionRequest,
)

__all__ = [
    "BatchResult",
    "CleanupRequest",
    "DeliveryAddressPayload",
    "NotificationIdsRequest",
    "NotificationListResponse",
    "NotificationOpenResponse",
    "NotificationPreferencesRead",
    "NotificationPreferencesUpdate",
    "NotificationRead",
    "NotificationStatsRead",
    "OrderEventResponse",
    "OrderItemPayload",
    "OrderPayload",
    "StatusTransitionRequest",
    "UnreadCountRead",
]
