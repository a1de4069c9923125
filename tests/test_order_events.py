"""Tests for the order event handler feeding the notification store."""

from __future__ import annotations

import asyncio

import pytest

from app.application.use_cases.notifications import OrderEventHandler
from app.infrastructure.repositories import (
    NotificationPreferencesRepository,
    NotificationRepository,
)


class FakeDispatcher:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.orders: list = []

    async def send_order_notification(self, order) -> bool:
        self.orders.append(order)
        return self.result


@pytest.fixture()
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture()
def handler(session_factory, change_feed, dispatcher) -> OrderEventHandler:
    return OrderEventHandler(session_factory, change_feed, dispatcher)


def test_order_created_persists_and_emails(handler, dispatcher, session, make_order) -> None:
    notification = asyncio.run(handler.order_created(make_order()))

    assert notification is not None
    assert notification.email_sent is True
    assert dispatcher.orders[0].id == "order-0001-abcd1234"
    stored = NotificationRepository(session).get(notification.id)
    assert stored.sub_type == "new_order"
    assert stored.email_sent is True


def test_failed_email_leaves_flag_unset(session_factory, change_feed, make_order) -> None:
    handler = OrderEventHandler(session_factory, change_feed, FakeDispatcher(result=False))

    notification = asyncio.run(handler.order_created(make_order()))

    assert notification is not None
    assert notification.email_sent is False


def test_payment_events_do_not_send_email(handler, dispatcher, make_order) -> None:
    notification = asyncio.run(handler.payment_status_changed(make_order(), "pending", "paid"))

    assert notification is not None
    assert notification.type == "payment"
    assert dispatcher.orders == []


def test_unmodelled_payment_status_is_ignored(handler, session, make_order) -> None:
    assert asyncio.run(handler.payment_status_changed(make_order(), "pending", "shipped")) is None
    assert NotificationRepository(session).count_unread("supplier-1") == 0


def test_status_change_notifies_subscribers(handler, change_feed, make_order) -> None:
    seen: list[str] = []
    change_feed.listen("supplier-1", seen.append)

    notification = asyncio.run(
        handler.order_status_changed(make_order(status="delivered"), "out_for_delivery", "delivered")
    )

    assert notification is not None
    assert "livrée" in notification.message
    assert seen


def test_disabled_sub_type_blocks_notification_and_email(
    handler, dispatcher, session, make_order
) -> None:
    NotificationPreferencesRepository(session).update("supplier-1", {"new_order_received": False})

    assert asyncio.run(handler.order_created(make_order())) is None
    assert NotificationRepository(session).count_unread("supplier-1") == 0
    assert dispatcher.orders == []


def test_email_preference_blocks_email(handler, dispatcher, session, make_order) -> None:
    NotificationPreferencesRepository(session).update("supplier-1", {"email_notifications": False})

    notification = asyncio.run(handler.order_created(make_order()))

    assert notification is not None
    assert notification.email_sent is False
    assert dispatcher.orders == []
