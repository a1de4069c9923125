"""Tests for the delivery bridge and platform notifiers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.application.use_cases.notifications import NotificationDeliveryBridge, Toast
from app.application.use_cases.notifications.delivery import to_browser_notification
from app.infrastructure.notifications import (
    BrowserPlatformNotifier,
    HeadlessPlatformNotifier,
    LocalPushMessagingProvider,
    NullPushMessagingProvider,
)

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def _seconds_ago(seconds: float) -> datetime:
    return NOW - timedelta(seconds=seconds)


def test_only_recent_unread_notifications_are_announced(make_notification) -> None:
    notifier = HeadlessPlatformNotifier()
    bridge = NotificationDeliveryBridge(notifier, clock=lambda: NOW)
    items = [
        make_notification(id="fresh", created_at=_seconds_ago(3)),
        make_notification(id="old", created_at=_seconds_ago(30)),
        make_notification(id="read", created_at=_seconds_ago(1), is_read=True),
    ]

    shown = bridge.handle_update(items)

    assert [item.notification_id for item in shown] == ["fresh"]
    assert [item.tag for item in notifier.shown] == ["fresh"]


def test_each_notification_is_announced_once(make_notification) -> None:
    notifier = HeadlessPlatformNotifier()
    bridge = NotificationDeliveryBridge(notifier, clock=lambda: NOW)
    items = [make_notification(id="fresh", created_at=_seconds_ago(2))]

    bridge.handle_update(items)
    bridge.handle_update(items)

    assert len(notifier.shown) == 1


def test_nothing_is_shown_without_permission(make_notification) -> None:
    notifier = HeadlessPlatformNotifier(permission="denied")
    bridge = NotificationDeliveryBridge(notifier, clock=lambda: NOW)

    shown = bridge.handle_update([make_notification(id="fresh", created_at=_seconds_ago(1))])

    assert shown == []
    assert notifier.shown == []


def test_order_notifications_require_interaction(make_notification) -> None:
    order = to_browser_notification(
        make_notification(id="n-1", type="order", order_id="o-7", title="Nouvelle commande")
    )
    system = to_browser_notification(make_notification(id="n-2", type="system"))

    assert order.require_interaction is True
    assert order.auto_close_seconds is None
    assert order.url == "/orders?highlight=o-7"
    assert system.require_interaction is False
    assert system.auto_close_seconds == 10
    assert system.url == "/notifications"


def test_foreground_messages_become_toasts() -> None:
    provider = LocalPushMessagingProvider(token="token-123")
    bridge = NotificationDeliveryBridge(HeadlessPlatformNotifier())
    toasts: list[Toast] = []

    remove = bridge.attach_foreground_messages(provider, toasts.append)
    provider.emit({"notification": {"title": "Commande", "body": "Nouvelle commande"}})
    provider.emit({})
    remove()
    provider.emit({"notification": {"title": "ignored"}})

    assert [toast.title for toast in toasts] == ["Commande", "New Notification"]
    assert toasts[1].message == "You have a new notification"
    assert toasts[0].duration_ms == 6000


def test_null_provider_never_delivers() -> None:
    provider = NullPushMessagingProvider()
    toasts: list[Toast] = []

    NotificationDeliveryBridge(HeadlessPlatformNotifier()).attach_foreground_messages(
        provider, toasts.append
    )()

    assert provider.request_token() is None
    assert toasts == []


class RecordingPublisher:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, object]] = []

    def dispatch(self, fournisseur_id, *, event_type, payload) -> None:
        self.events.append((fournisseur_id, event_type, payload))


def test_browser_notifier_waits_for_granted_permission(make_notification) -> None:
    publisher = RecordingPublisher()
    notifier = BrowserPlatformNotifier("supplier-1", publisher)
    bridge = NotificationDeliveryBridge(notifier, clock=lambda: NOW)
    items = [make_notification(id="fresh", created_at=_seconds_ago(2))]

    assert bridge.handle_update(items) == []
    notifier.update_permission("bogus")
    assert notifier.permission == "default"

    notifier.update_permission("granted")
    bridge.handle_update(items)

    assert len(publisher.events) == 1
    supplier, event_type, payload = publisher.events[0]
    assert supplier == "supplier-1"
    assert event_type == "browser-notification"
    assert payload["notification_id"] == "fresh"
