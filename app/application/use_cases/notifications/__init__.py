"""Public helpers for building, storing and delivering supplier notifications."""

from .aggregation import (
    build_notification_view,
    compute_stats,
    filter_notifications,
    navigation_target,
    search_notifications,
    sort_notifications,
)
from .center import NotificationCenter
from .delivery import NotificationDeliveryBridge, Toast, to_browser_notification
from .events import OrderEventHandler
from .factory import (
    derive_priority,
    inventory_notification,
    new_order_notification,
    order_status_transition,
    payment_transition,
    product_notification,
    system_notification,
)
from .order_emails import EmailDispatcherConfig, OrderEmailDispatcher, render_order_email
from .service import NotificationService
from .streams import SupplierNotificationStreams
from .subscriptions import (
    NotificationSnapshot,
    NotificationSubscription,
    NotificationSubscriptionManager,
    SubscriptionState,
)

__all__ = [
    "EmailDispatcherConfig",
    "NotificationCenter",
    "NotificationDeliveryBridge",
    "NotificationService",
    "NotificationSnapshot",
    "NotificationSubscription",
    "NotificationSubscriptionManager",
    "OrderEmailDispatcher",
    "OrderEventHandler",
    "SubscriptionState",
    "SupplierNotificationStreams",
    "Toast",
    "build_notification_view",
    "compute_stats",
    "derive_priority",
    "filter_notifications",
    "inventory_notification",
    "navigation_target",
    "new_order_notification",
    "order_status_transition",
    "payment_transition",
    "product_notification",
    "render_order_email",
    "search_notifications",
    "sort_notifications",
    "system_notification",
    "to_browser_notification",
]
