"""Pydantic models for order events posted by the order-management subsystem."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.entities import DeliveryAddress, Order, OrderItem


class OrderItemPayload(BaseModel):
    product_id: str
    product_name: str
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    total_price: float = Field(..., ge=0)
    unit: str = ""
    product_image: str | None = None


class DeliveryAddressPayload(BaseModel):
    street: str
    city: str
    postal_code: str
    country: str
    instructions: str | None = None


class OrderPayload(BaseModel):
    """Supplier sub-order snapshot."""

    id: str = Field(..., min_length=1)
    fournisseur_id: str = Field(..., min_length=1)
    fournisseur_name: str
    user_id: str
    user_email: str
    user_name: str
    user_phone: str = ""
    total: float = Field(..., ge=0)
    status: str
    payment_status: str
    payment_method: str = "cash"
    delivery_address: DeliveryAddressPayload
    items: list[OrderItemPayload] = Field(default_factory=list)
    order_notes: str = ""
    master_order_id: str | None = None
    subtotal: float = 0.0
    delivery_fee: float = 0.0
    tax: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_entity(self) -> Order:
        return Order(
            id=self.id,
            fournisseur_id=self.fournisseur_id,
            fournisseur_name=self.fournisseur_name,
            user_id=self.user_id,
            user_email=self.user_email,
            user_name=self.user_name,
            user_phone=self.user_phone,
            total=self.total,
            status=self.status,
            payment_status=self.payment_status,
            payment_method=self.payment_method,
            delivery_address=DeliveryAddress(**self.delivery_address.model_dump()),
            items=[OrderItem(**item.model_dump()) for item in self.items],
            order_notes=self.order_notes,
            master_order_id=self.master_order_id,
            subtotal=self.subtotal,
            delivery_fee=self.delivery_fee,
            tax=self.tax,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class StatusTransitionRequest(BaseModel):
    """Order snapshot together with the status it moved from and to."""

    order: OrderPayload
    old_status: str
    new_status: str


class OrderEventResponse(BaseModel):
    notification_id: str | None = None
    created: bool


__all__ = [
    "DeliveryAddressPayload",
    "OrderEventResponse",
    "OrderItemPayload",
    "OrderPayload",
    "StatusTransitionRequest",
]
