"""Tests for live notification subscriptions backed by the change feed."""

from __future__ import annotations

import threading

import pytest
from sqlalchemy.exc import OperationalError

from app.application.use_cases.notifications import (
    NotificationSnapshot,
    NotificationSubscription,
    NotificationSubscriptionManager,
    SubscriptionState,
)
from app.infrastructure.repositories import NotificationRepository

SUPPLIER = "supplier-1"


@pytest.fixture()
def manager(session_factory, change_feed) -> NotificationSubscriptionManager:
    return NotificationSubscriptionManager(session_factory, change_feed, window=3)


@pytest.fixture()
def repository(session, change_feed, clock) -> NotificationRepository:
    return NotificationRepository(session, change_feed=change_feed, clock=clock)


def test_initial_snapshot_is_delivered_immediately(manager, repository, make_notification) -> None:
    repository.create(make_notification())
    lists: list[list] = []
    counts: list[int] = []

    subscription = manager.subscribe(SUPPLIER, lists.append, counts.append)

    assert subscription.state is SubscriptionState.SUBSCRIBED
    assert len(lists) == 1 and len(lists[0]) == 1
    assert counts == [1]


def test_updates_follow_store_changes(manager, repository, make_notification) -> None:
    lists: list[list] = []
    counts: list[int] = []
    manager.subscribe(SUPPLIER, lists.append, counts.append)

    saved = repository.create(make_notification())
    repository.mark_as_read(saved.id)

    assert counts == [0, 1, 0]
    assert lists[-1][0].is_read is True


def test_window_limits_the_streamed_list(manager, repository, make_notification) -> None:
    repository.create_many([make_notification(title=f"n{i}") for i in range(5)])
    lists: list[list] = []
    counts: list[int] = []

    manager.subscribe(SUPPLIER, lists.append, counts.append)

    assert len(lists[-1]) == 3
    assert counts[-1] == 5


def test_other_suppliers_do_not_trigger_callbacks(manager, repository, make_notification) -> None:
    counts: list[int] = []
    manager.subscribe_unread_count(SUPPLIER, counts.append)

    repository.create(make_notification(fournisseur_id="supplier-2"))

    assert counts == [0]


def test_no_callback_after_unsubscribe(manager, repository, change_feed, make_notification) -> None:
    counts: list[int] = []
    subscription = manager.subscribe_unread_count(SUPPLIER, counts.append)

    subscription.unsubscribe()
    subscription.unsubscribe()
    repository.create(make_notification())

    assert counts == [0]
    assert subscription.state is SubscriptionState.IDLE
    assert change_feed.listener_count(SUPPLIER) == 0


def test_unsubscribe_inside_callback_stops_pending_deliveries(
    manager, repository, make_notification
) -> None:
    counts: list[int] = []
    holder = {}

    def on_count(count: int) -> None:
        counts.append(count)
        if count == 1:
            holder["subscription"].unsubscribe()

    holder["subscription"] = manager.subscribe_unread_count(SUPPLIER, on_count)
    repository.create(make_notification())
    repository.create(make_notification())

    assert counts == [0, 1]


def test_changes_during_a_callback_are_coalesced(manager, repository, make_notification) -> None:
    counts: list[int] = []

    def on_count(count: int) -> None:
        counts.append(count)
        if len(counts) == 2:
            repository.create(make_notification())
            repository.create(make_notification())

    manager.subscribe_unread_count(SUPPLIER, on_count)
    repository.create(make_notification())

    assert counts == [0, 1, 3]


def test_change_from_another_thread_waits_for_the_running_delivery() -> None:
    entered = threading.Event()
    release = threading.Event()
    loads: list[str] = []

    def loader(recipient_id: str) -> NotificationSnapshot:
        loads.append(threading.current_thread().name)
        if len(loads) == 1:
            entered.set()
            release.wait(timeout=5)
        return NotificationSnapshot(recipient_id=recipient_id, unread_count=len(loads))

    counts: list[int] = []
    subscription = NotificationSubscription(SUPPLIER, loader, on_unread_count=counts.append)
    subscription.attach(lambda: None)

    worker = threading.Thread(target=subscription.handle_change, args=(SUPPLIER,), name="worker")
    worker.start()
    assert entered.wait(timeout=5)

    subscription.handle_change(SUPPLIER)
    assert counts == []

    release.set()
    worker.join(timeout=5)

    assert counts == [1, 2]
    assert loads == ["worker", "worker"]


def test_loader_failure_moves_subscription_to_error(
    manager, repository, change_feed, make_notification, monkeypatch, caplog
) -> None:
    errors: list[Exception] = []
    counts: list[int] = []
    subscription = manager.subscribe_unread_count(SUPPLIER, counts.append, on_error=errors.append)

    def broken_count(self, recipient_id):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(NotificationRepository, "count_unread", broken_count)
    with caplog.at_level("ERROR"):
        repository.create(make_notification())

    assert counts == [0]
    assert len(errors) == 1
    assert subscription.last_error is errors[0]
    assert subscription.state is SubscriptionState.IDLE
    assert change_feed.listener_count(SUPPLIER) == 0
    assert "subscription for supplier supplier-1 failed" in caplog.text
