"""Order snapshots received from the order-management subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_CONFIRMED = "confirmed"
ORDER_STATUS_PREPARING = "preparing"
ORDER_STATUS_OUT_FOR_DELIVERY = "out_for_delivery"
ORDER_STATUS_DELIVERED = "delivered"
ORDER_STATUS_CANCELLED = "cancelled"

ORDER_STATUSES = (
    ORDER_STATUS_PENDING,
    ORDER_STATUS_CONFIRMED,
    ORDER_STATUS_PREPARING,
    ORDER_STATUS_OUT_FOR_DELIVERY,
    ORDER_STATUS_DELIVERED,
    ORDER_STATUS_CANCELLED,
)

PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_PAID = "paid"
PAYMENT_STATUS_FAILED = "failed"
PAYMENT_STATUS_REFUNDED = "refunded"


@dataclass
class OrderItem:
    """Single product line of a supplier order."""

    product_id: str
    product_name: str
    quantity: float
    unit_price: float
    total_price: float
    unit: str = ""
    product_image: str | None = None


@dataclass
class DeliveryAddress:
    """Address where the order has to be delivered."""

    street: str
    city: str
    postal_code: str
    country: str
    instructions: str | None = None

    def one_line(self) -> str:
        return f"{self.street}, {self.city} {self.postal_code}, {self.country}"


@dataclass
class Order:
    """Supplier sub-order as seen by the notification pipeline."""

    id: str
    fournisseur_id: str
    fournisseur_name: str
    user_id: str
    user_email: str
    user_name: str
    user_phone: str
    total: float
    status: str
    payment_status: str
    payment_method: str
    delivery_address: DeliveryAddress
    items: list[OrderItem] = field(default_factory=list)
    order_notes: str = ""
    master_order_id: str | None = None
    subtotal: float = 0.0
    delivery_fee: float = 0.0
    tax: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def reference(self) -> str:
        """Short reference shown to suppliers (last eight characters of the id)."""

        return self.id[-8:]


__all__ = [
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
    "DeliveryAddress",
    "Order",
    "OrderItem",
]
