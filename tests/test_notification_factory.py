"""Tests for the notification builders used by the order event handler."""

from __future__ import annotations

import pytest

from app.application.use_cases.notifications import (
    derive_priority,
    inventory_notification,
    new_order_notification,
    order_status_transition,
    payment_transition,
    product_notification,
    system_notification,
)
from app.domain.entities import (
    NewOrderPayload,
    OrderStatusPayload,
    PaymentPayload,
    SystemPayload,
)


def test_new_order_notification(make_order) -> None:
    notification = new_order_notification(make_order())

    assert notification.id is None
    assert notification.type == "order"
    assert notification.sub_type == "new_order"
    assert notification.priority == "high"
    assert notification.title == "Nouvelle commande reçue! 🛍️"
    assert "Test Customer" in notification.message
    assert "€33.59" in notification.message
    assert "2 article(s)" in notification.message
    assert notification.order_id == "order-0001-abcd1234"
    assert isinstance(notification.data, NewOrderPayload)
    assert notification.data.item_count == 2
    assert [item.product_name for item in notification.data.items] == ["Tomates", "Miel"]


def test_payment_received_transition(make_order) -> None:
    notification = payment_transition(make_order(), "pending", "paid")

    assert notification is not None
    assert notification.priority == "medium"
    assert "reçu" in notification.title
    assert notification.sub_type == "payment_paid"
    assert isinstance(notification.data, PaymentPayload)
    assert notification.data.new_payment_status == "paid"
    assert notification.data.old_payment_status == "pending"
    assert "#abcd1234" in notification.message


def test_failed_payment_is_high_priority(make_order) -> None:
    notification = payment_transition(make_order(), "pending", "failed")

    assert notification is not None
    assert notification.priority == "high"
    assert "échoué" in notification.title


@pytest.mark.parametrize("status", ["pending", "refunded"])
def test_other_known_payment_statuses(make_order, status) -> None:
    notification = payment_transition(make_order(), "paid", status)

    assert notification is not None
    assert notification.priority == "medium"
    assert notification.sub_type == f"payment_{status}"


def test_unknown_payment_status_produces_nothing(make_order) -> None:
    assert payment_transition(make_order(), "pending", "shipped") is None


def test_order_status_transition_uses_french_phrase(make_order) -> None:
    notification = order_status_transition(make_order(), "preparing", "out_for_delivery")

    assert "en livraison" in notification.message
    assert notification.sub_type == "status_changed"
    assert notification.priority == "high"
    assert isinstance(notification.data, OrderStatusPayload)
    assert notification.data.old_status == "preparing"


def test_unknown_order_status_is_echoed(make_order) -> None:
    notification = order_status_transition(make_order(), "pending", "foo")

    assert "foo" in notification.message


def test_cancelled_order_has_dedicated_sub_type(make_order) -> None:
    notification = order_status_transition(make_order(), "confirmed", "cancelled")

    assert notification.sub_type == "order_cancelled"
    assert "annulée" in notification.message


def test_system_and_product_notifications() -> None:
    system = system_notification("supplier-1", "Maintenance", "Tonight", {"window": "2h"})
    product = product_notification("supplier-1", "Review", "5 stars", product_id="p-9")

    assert system.priority == "medium"
    assert isinstance(system.data, SystemPayload)
    assert system.data.extra == {"window": "2h"}
    assert product.priority == "low"
    assert product.product_id == "p-9"


def test_inventory_notification_thresholds() -> None:
    assert (
        inventory_notification(
            "supplier-1", product_id="p-1", product_name="Miel", stock_quantity=12, threshold=5
        )
        is None
    )

    low = inventory_notification(
        "supplier-1", product_id="p-1", product_name="Miel", stock_quantity=3, threshold=5
    )
    empty = inventory_notification(
        "supplier-1", product_id="p-1", product_name="Miel", stock_quantity=0, threshold=5
    )

    assert low is not None and low.sub_type == "low_inventory"
    assert empty is not None and empty.sub_type == "out_of_stock"
    assert empty.type == "inventory"
    assert empty.priority == "low"


def test_derive_priority_defaults_to_low() -> None:
    assert derive_priority("marketing") == "low"
    assert derive_priority("account") == "low"
    assert derive_priority("system") == "medium"
