"""Tests for the per-supplier websocket stream fan-out."""

from __future__ import annotations

import threading
import time

import pytest

from app.application.use_cases.notifications import (
    NotificationSubscriptionManager,
    SupplierNotificationStreams,
)
from app.infrastructure.database import build_engine, build_session_factory, initialize_database
from app.infrastructure.repositories import NotificationRepository

SUPPLIER = "supplier-1"


class RecordingPublisher:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, object]] = []
        self._lock = threading.Lock()

    def dispatch(self, fournisseur_id, *, event_type, payload) -> None:
        with self._lock:
            self.events.append((fournisseur_id, event_type, payload))

    def types(self) -> list[str]:
        return [event_type for _, event_type, _ in self.events]


class SlowSubscriptionManager(NotificationSubscriptionManager):
    """Subscription manager whose snapshot loads take a noticeable time."""

    def load_snapshot(self, recipient_id):
        time.sleep(0.05)
        return super().load_snapshot(recipient_id)


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def streams(session_factory, change_feed, publisher) -> SupplierNotificationStreams:
    manager = NotificationSubscriptionManager(session_factory, change_feed)
    return SupplierNotificationStreams(manager, publisher)


@pytest.fixture()
def repository(session, change_feed) -> NotificationRepository:
    return NotificationRepository(session, change_feed=change_feed)


def test_concurrent_opens_share_one_subscription(tmp_path, change_feed, publisher) -> None:
    engine = build_engine(f"sqlite:///{tmp_path / 'streams.db'}")
    initialize_database(engine)
    streams = SupplierNotificationStreams(
        SlowSubscriptionManager(build_session_factory(engine), change_feed), publisher
    )
    barrier = threading.Barrier(2)
    failures: list[BaseException] = []

    def connect() -> None:
        try:
            barrier.wait(timeout=5)
            streams.open(SUPPLIER)
        except BaseException as exc:
            failures.append(exc)

    workers = [threading.Thread(target=connect) for _ in range(2)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(timeout=5)

    assert failures == []
    assert change_feed.listener_count(SUPPLIER) == 1

    streams.close(SUPPLIER)
    assert streams.is_open(SUPPLIER) is True
    assert change_feed.listener_count(SUPPLIER) == 1

    streams.close(SUPPLIER)
    assert streams.is_open(SUPPLIER) is False
    assert change_feed.listener_count(SUPPLIER) == 0
    engine.dispose()


def test_second_connection_receives_a_fresh_snapshot(streams, publisher, change_feed) -> None:
    streams.open(SUPPLIER)
    assert publisher.types() == ["notifications", "unread-count"]

    streams.open(SUPPLIER)

    assert publisher.types() == ["notifications", "unread-count"] * 2
    assert change_feed.listener_count(SUPPLIER) == 1


def test_stream_survives_until_the_last_connection_closes(
    streams, publisher, repository, change_feed, make_notification
) -> None:
    streams.open(SUPPLIER)
    streams.open(SUPPLIER)
    streams.close(SUPPLIER)

    before = len(publisher.events)
    repository.create(make_notification())
    assert publisher.types()[before:] == ["notifications", "unread-count"]

    streams.close(SUPPLIER)
    assert change_feed.listener_count(SUPPLIER) == 0

    after_close = len(publisher.events)
    repository.create(make_notification())
    assert len(publisher.events) == after_close


def test_permission_replays_new_items_once(streams, publisher, repository, make_notification) -> None:
    streams.open(SUPPLIER)
    streams.open(SUPPLIER)
    saved = repository.create(
        make_notification(type="order", title="Nouvelle commande", order_id="order-1")
    )
    assert "browser-notification" not in publisher.types()

    shown = streams.update_permission(SUPPLIER, "granted")

    assert [item.notification_id for item in shown] == [saved.id]
    assert shown[0].require_interaction is True
    announced = [
        payload
        for _, event_type, payload in publisher.events
        if event_type == "browser-notification"
    ]
    assert len(announced) == 1
    assert announced[0]["url"] == "/orders?highlight=order-1"

    assert streams.update_permission(SUPPLIER, "granted") == []


def test_permission_for_unknown_supplier_is_ignored(streams) -> None:
    assert streams.update_permission("nobody", "granted") == []
