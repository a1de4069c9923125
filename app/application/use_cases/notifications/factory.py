"""Builders turning order and catalogue events into notification records.

Every function here is pure: it returns an unsaved :class:`Notification`
(``id`` and ``created_at`` are assigned by the store) or ``None`` when the
event does not warrant a notification.
"""

from __future__ import annotations

from typing import Any, Mapping

from app.domain.entities import (
    NOTIFICATION_TYPE_INVENTORY,
    NOTIFICATION_TYPE_ORDER,
    NOTIFICATION_TYPE_PAYMENT,
    NOTIFICATION_TYPE_PRODUCT,
    NOTIFICATION_TYPE_SYSTEM,
    ORDER_STATUS_CANCELLED,
    PAYMENT_STATUS_FAILED,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_REFUNDED,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    NewOrderPayload,
    Notification,
    NotificationPayload,
    Order,
    OrderItemSnapshot,
    OrderStatusPayload,
    PaymentPayload,
    ProductPayload,
    SystemPayload,
)

ORDER_STATUS_PHRASES: dict[str, str] = {
    "pending": "en attente",
    "confirmed": "confirmée",
    "preparing": "en préparation",
    "out_for_delivery": "en livraison",
    "delivered": "livrée",
    "cancelled": "annulée",
}

NOTIFICATION_ICONS: dict[str, str] = {
    NOTIFICATION_TYPE_ORDER: "🛍️",
    NOTIFICATION_TYPE_PAYMENT: "💰",
    NOTIFICATION_TYPE_SYSTEM: "⚙️",
    NOTIFICATION_TYPE_PRODUCT: "📦",
    NOTIFICATION_TYPE_INVENTORY: "📦",
}


def _money(amount: float) -> str:
    return f"€{amount:.2f}"


def derive_priority(notification_type: str, payload: NotificationPayload | None = None) -> str:
    """Return the priority implied by ``notification_type`` and its payload."""

    if notification_type == NOTIFICATION_TYPE_ORDER:
        return PRIORITY_HIGH
    if notification_type == NOTIFICATION_TYPE_PAYMENT:
        if isinstance(payload, PaymentPayload) and payload.new_payment_status == PAYMENT_STATUS_FAILED:
            return PRIORITY_HIGH
        return PRIORITY_MEDIUM
    if notification_type == NOTIFICATION_TYPE_SYSTEM:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def notification_icon(notification_type: str) -> str:
    return NOTIFICATION_ICONS.get(notification_type, "🔔")


def new_order_notification(order: Order) -> Notification:
    """Notify the supplier that ``order`` has just been placed."""

    item_count = len(order.items)
    payload = NewOrderPayload(
        customer_name=order.user_name,
        customer_email=order.user_email,
        customer_phone=order.user_phone,
        order_total=order.total,
        item_count=item_count,
        order_status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        delivery_address={
            "street": order.delivery_address.street,
            "city": order.delivery_address.city,
            "postal_code": order.delivery_address.postal_code,
            "country": order.delivery_address.country,
            "instructions": order.delivery_address.instructions,
        },
        order_notes=order.order_notes,
        items=[
            OrderItemSnapshot(
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
            )
            for item in order.items
        ],
    )
    return Notification(
        id=None,
        fournisseur_id=order.fournisseur_id,
        fournisseur_name=order.fournisseur_name,
        type=NOTIFICATION_TYPE_ORDER,
        sub_type="new_order",
        title="Nouvelle commande reçue! 🛍️",
        message=(
            f"Vous avez reçu une nouvelle commande de {order.user_name} d'un montant de "
            f"{_money(order.total)}. La commande contient {item_count} article(s)."
        ),
        priority=derive_priority(NOTIFICATION_TYPE_ORDER, payload),
        order_id=order.id,
        customer_id=order.user_id,
        data=payload,
    )


def payment_transition(order: Order, old_status: str, new_status: str) -> Notification | None:
    """Describe a payment status change, or ``None`` for unmodelled statuses."""

    reference = order.reference
    if new_status == PAYMENT_STATUS_PAID:
        title = "Paiement reçu! 💰"
        message = (
            f"Le paiement de {_money(order.total)} a été reçu pour la commande "
            f"#{reference} de {order.user_name}"
        )
        emoji = "💰"
    elif new_status == PAYMENT_STATUS_FAILED:
        title = "Paiement échoué ❌"
        message = (
            f"Le paiement a échoué pour la commande #{reference} de {order.user_name}. "
            "Veuillez contacter le client."
        )
        emoji = "❌"
    elif new_status == PAYMENT_STATUS_PENDING:
        title = "Paiement en attente ⏳"
        message = f"Le paiement est en attente pour la commande #{reference} de {order.user_name}"
        emoji = "⏳"
    elif new_status == PAYMENT_STATUS_REFUNDED:
        title = "Paiement remboursé 💸"
        message = (
            f"Le paiement de {_money(order.total)} a été remboursé pour la commande "
            f"#{reference} de {order.user_name}"
        )
        emoji = "💸"
    else:
        return None

    payload = PaymentPayload(
        customer_name=order.user_name,
        customer_email=order.user_email,
        order_total=order.total,
        old_payment_status=old_status,
        new_payment_status=new_status,
        payment_method=order.payment_method,
        emoji=emoji,
    )
    return Notification(
        id=None,
        fournisseur_id=order.fournisseur_id,
        fournisseur_name=order.fournisseur_name,
        type=NOTIFICATION_TYPE_PAYMENT,
        sub_type=f"payment_{new_status}",
        title=title,
        message=message,
        priority=derive_priority(NOTIFICATION_TYPE_PAYMENT, payload),
        order_id=order.id,
        customer_id=order.user_id,
        data=payload,
    )


def order_status_transition(order: Order, old_status: str, new_status: str) -> Notification:
    """Describe an order status change; unknown statuses are shown verbatim."""

    phrase = ORDER_STATUS_PHRASES.get(new_status, new_status)
    payload = OrderStatusPayload(
        customer_name=order.user_name,
        order_total=order.total,
        old_status=old_status,
        new_status=new_status,
        order_status=new_status,
    )
    return Notification(
        id=None,
        fournisseur_id=order.fournisseur_id,
        fournisseur_name=order.fournisseur_name,
        type=NOTIFICATION_TYPE_ORDER,
        sub_type="order_cancelled" if new_status == ORDER_STATUS_CANCELLED else "status_changed",
        title="Statut de commande mis à jour",
        message=f"La commande de {order.user_name} est maintenant {phrase}.",
        priority=derive_priority(NOTIFICATION_TYPE_ORDER, payload),
        order_id=order.id,
        customer_id=order.user_id,
        data=payload,
    )


def system_notification(
    recipient_id: str,
    title: str,
    message: str,
    data: Mapping[str, Any] | None = None,
    *,
    sub_type: str = "",
) -> Notification:
    payload = SystemPayload(extra=dict(data)) if data else None
    return Notification(
        id=None,
        fournisseur_id=recipient_id,
        type=NOTIFICATION_TYPE_SYSTEM,
        sub_type=sub_type,
        title=title,
        message=message,
        priority=derive_priority(NOTIFICATION_TYPE_SYSTEM, payload),
        data=payload,
    )


def product_notification(
    recipient_id: str,
    title: str,
    message: str,
    product_id: str | None = None,
    data: Mapping[str, Any] | None = None,
    *,
    sub_type: str = "",
) -> Notification:
    payload = ProductPayload(product_id=product_id, extra=dict(data or {}))
    return Notification(
        id=None,
        fournisseur_id=recipient_id,
        type=NOTIFICATION_TYPE_PRODUCT,
        sub_type=sub_type,
        title=title,
        message=message,
        priority=derive_priority(NOTIFICATION_TYPE_PRODUCT, payload),
        product_id=product_id,
        data=payload,
    )


def inventory_notification(
    recipient_id: str,
    *,
    product_id: str,
    product_name: str,
    stock_quantity: float,
    threshold: float,
) -> Notification | None:
    """Build a stock alert; ``None`` while the stock is above ``threshold``."""

    if stock_quantity > threshold:
        return None
    if stock_quantity <= 0:
        sub_type = "out_of_stock"
        title = "Rupture de stock 📦"
        message = f"Le produit {product_name} est en rupture de stock."
    else:
        sub_type = "low_inventory"
        title = "Stock faible 📦"
        message = (
            f"Il ne reste que {stock_quantity:g} unité(s) du produit {product_name} "
            f"(seuil: {threshold:g})."
        )
    payload = ProductPayload(
        product_id=product_id,
        extra={
            "product_name": product_name,
            "stock_quantity": stock_quantity,
            "threshold": threshold,
        },
    )
    return Notification(
        id=None,
        fournisseur_id=recipient_id,
        type=NOTIFICATION_TYPE_INVENTORY,
        sub_type=sub_type,
        title=title,
        message=message,
        priority=derive_priority(NOTIFICATION_TYPE_INVENTORY, payload),
        product_id=product_id,
        data=payload,
    )


__all__ = [
    "ORDER_STATUS_PHRASES",
    "derive_priority",
    "inventory_notification",
    "new_order_notification",
    "notification_icon",
    "order_status_transition",
    "payment_transition",
    "product_notification",
    "system_notification",
]
