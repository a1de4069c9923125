"""Domain entity representing a supplier notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Union

NOTIFICATION_TYPE_ORDER = "order"
NOTIFICATION_TYPE_PAYMENT = "payment"
NOTIFICATION_TYPE_INVENTORY = "inventory"
NOTIFICATION_TYPE_PRODUCT = "product"
NOTIFICATION_TYPE_ACCOUNT = "account"
NOTIFICATION_TYPE_MARKETING = "marketing"
NOTIFICATION_TYPE_SYSTEM = "system"

NOTIFICATION_TYPES = (
    NOTIFICATION_TYPE_ORDER,
    NOTIFICATION_TYPE_PAYMENT,
    NOTIFICATION_TYPE_INVENTORY,
    NOTIFICATION_TYPE_PRODUCT,
    NOTIFICATION_TYPE_ACCOUNT,
    NOTIFICATION_TYPE_MARKETING,
    NOTIFICATION_TYPE_SYSTEM,
)

PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"

PRIORITIES = (PRIORITY_HIGH, PRIORITY_MEDIUM, PRIORITY_LOW)


@dataclass
class OrderItemSnapshot:
    """Copy of an order line taken when the notification was created."""

    product_name: str
    quantity: float
    unit_price: float
    total_price: float


@dataclass
class NewOrderPayload:
    """Context attached to a "new order" notification."""

    kind: ClassVar[str] = "new_order"

    customer_name: str
    customer_email: str | None = None
    customer_phone: str | None = None
    order_total: float = 0.0
    item_count: int = 0
    order_status: str | None = None
    payment_status: str | None = None
    payment_method: str | None = None
    delivery_address: dict[str, Any] | None = None
    order_notes: str | None = None
    items: list[OrderItemSnapshot] = field(default_factory=list)


@dataclass
class PaymentPayload:
    """Context attached to a payment status transition."""

    kind: ClassVar[str] = "payment"

    customer_name: str
    customer_email: str | None = None
    order_total: float = 0.0
    old_payment_status: str | None = None
    new_payment_status: str | None = None
    payment_method: str | None = None
    emoji: str | None = None


@dataclass
class OrderStatusPayload:
    """Context attached to an order status transition."""

    kind: ClassVar[str] = "order_status"

    customer_name: str
    order_total: float = 0.0
    old_status: str | None = None
    new_status: str | None = None
    order_status: str | None = None


@dataclass
class ProductPayload:
    """Context attached to product and inventory alerts."""

    kind: ClassVar[str] = "product"

    product_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class SystemPayload:
    """Free-form context attached to system or account messages."""

    kind: ClassVar[str] = "system"

    extra: dict[str, Any] = field(default_factory=dict)


NotificationPayload = Union[
    NewOrderPayload, PaymentPayload, OrderStatusPayload, ProductPayload, SystemPayload
]


@dataclass
class Notification:
    """Message delivered to a single supplier.

    ``title``, ``message`` and ``type`` never change once the record exists.
    Read state and the delivery/interaction flags only ever move forward.
    """

    id: str | None
    fournisseur_id: str
    type: str
    title: str
    message: str
    priority: str = PRIORITY_LOW
    sub_type: str = ""
    fournisseur_name: str | None = None
    order_id: str | None = None
    product_id: str | None = None
    customer_id: str | None = None
    campaign_id: str | None = None
    is_read: bool = False
    read_at: datetime | None = None
    is_archived: bool = False
    archived_at: datetime | None = None
    clicked: bool = False
    clicked_at: datetime | None = None
    action_taken: bool = False
    action_taken_at: datetime | None = None
    email_sent: bool = False
    email_sent_at: datetime | None = None
    sms_sent: bool = False
    sms_sent_at: datetime | None = None
    data: NotificationPayload | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = [
    "NOTIFICATION_TYPES",
    "NOTIFICATION_TYPE_ACCOUNT",
    "NOTIFICATION_TYPE_INVENTORY",
    "NOTIFICATION_TYPE_MARKETING",
    "NOTIFICATION_TYPE_ORDER",
    "NOTIFICATION_TYPE_PAYMENT",
    "NOTIFICATION_TYPE_PRODUCT",
    "NOTIFICATION_TYPE_SYSTEM",
    "PRIORITIES",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "NewOrderPayload",
    "Notification",
    "NotificationPayload",
    "OrderItemSnapshot",
    "OrderStatusPayload",
    "PaymentPayload",
    "ProductPayload",
    "SystemPayload",
]
