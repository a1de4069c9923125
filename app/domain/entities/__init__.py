"""Domain entities exposed by the application."""

from .notification import (
    NOTIFICATION_TYPE_ACCOUNT,
    NOTIFICATION_TYPE_INVENTORY,
    NOTIFICATION_TYPE_MARKETING,
    NOTIFICATION_TYPE_ORDER,
    NOTIFICATION_TYPE_PAYMENT,
    NOTIFICATION_TYPE_PRODUCT,
    NOTIFICATION_TYPE_SYSTEM,
    NOTIFICATION_TYPES,
    PRIORITIES,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    NewOrderPayload,
    Notification,
    NotificationPayload,
    OrderItemSnapshot,
    OrderStatusPayload,
    PaymentPayload,
    ProductPayload,
    SystemPayload,
)
from .notification_preferences import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    CHANNEL_SMS,
    NotificationPreferences,
)
from .notification_stats import (
    SORT_KEYS,
    SORT_NEWEST,
    SORT_OLDEST,
    SORT_PRIORITY,
    SORT_TYPE,
    SORT_UNREAD,
    NotificationFilter,
    NotificationPage,
    NotificationStats,
)
from .order import (
    ORDER_STATUSES,
    ORDER_STATUS_CANCELLED,
    ORDER_STATUS_CONFIRMED,
    ORDER_STATUS_DELIVERED,
    ORDER_STATUS_OUT_FOR_DELIVERY,
    ORDER_STATUS_PENDING,
    ORDER_STATUS_PREPARING,
    PAYMENT_STATUS_FAILED,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_REFUNDED,
    DeliveryAddress,
    Order,
    OrderItem,
)

__all__ = [
    "CHANNEL_EMAIL",
    "CHANNEL_IN_APP",
    "CHANNEL_SMS",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_TYPE_ACCOUNT",
    "NOTIFICATION_TYPE_INVENTORY",
    "NOTIFICATION_TYPE_MARKETING",
    "NOTIFICATION_TYPE_ORDER",
    "NOTIFICATION_TYPE_PAYMENT",
    "NOTIFICATION_TYPE_PRODUCT",
    "NOTIFICATION_TYPE_SYSTEM",
    "ORDER_STATUSES",
    "ORDER_STATUS_CANCELLED",
    "ORDER_STATUS_CONFIRMED",
    "ORDER_STATUS_DELIVERED",
    "ORDER_STATUS_OUT_FOR_DELIVERY",
    "ORDER_STATUS_PENDING",
    "ORDER_STATUS_PREPARING",
    "PAYMENT_STATUS_FAILED",
    "PAYMENT_STATUS_PAID",
    "PAYMENT_STATUS_PENDING",
    "PAYMENT_STATUS_REFUNDED",
    "PRIORITIES",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "SORT_KEYS",
    "SORT_NEWEST",
    "SORT_OLDEST",
    "SORT_PRIORITY",
    "SORT_TYPE",
    "SORT_UNREAD",
    "DeliveryAddress",
    "NewOrderPayload",
    "Notification",
    "NotificationFilter",
    "NotificationPage",
    "NotificationPayload",
    "NotificationPreferences",
    "NotificationStats",
    "Order",
    "OrderItem",
    "OrderItemSnapshot",
    "OrderStatusPayload",
    "PaymentPayload",
    "ProductPayload",
    "SystemPayload",
]
