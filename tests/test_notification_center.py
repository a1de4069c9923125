"""Tests for the dashboard notification center."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from app.application.use_cases.notifications import (
    NotificationCenter,
    NotificationDeliveryBridge,
    NotificationSubscriptionManager,
)
from app.infrastructure.notifications import HeadlessPlatformNotifier
from app.infrastructure.repositories import NotificationRepository

SUPPLIER = "supplier-1"


@pytest.fixture()
def repository(session, change_feed) -> NotificationRepository:
    return NotificationRepository(session, change_feed=change_feed)


@pytest.fixture()
def center(session_factory, change_feed) -> NotificationCenter:
    return NotificationCenter(SUPPLIER, session_factory, change_feed)


def _break_commits(monkeypatch: pytest.MonkeyPatch, session_factory) -> None:
    def failing_commit(self):
        raise OperationalError("UPDATE", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session_factory.class_, "commit", failing_commit)


def test_refresh_loads_notifications(center, repository, make_notification) -> None:
    repository.create_many([make_notification(), make_notification()])

    assert center.refresh() is True
    assert len(center.notifications) == 2
    assert center.unread_count == 2
    assert center.loading is False


def test_mark_as_read_updates_local_state(center, repository, make_notification) -> None:
    saved = repository.create(make_notification())
    center.refresh()

    assert center.mark_as_read(saved.id) is True
    assert center.notifications[0].is_read is True
    assert center.unread_count == 0
    assert center.error is None


def test_failed_command_keeps_local_state_and_sets_error(
    center, repository, session_factory, make_notification, monkeypatch
) -> None:
    saved = repository.create(make_notification())
    center.refresh()
    _break_commits(monkeypatch, session_factory)

    assert center.mark_as_read(saved.id) is False
    assert center.error == "Failed to mark notification as read"
    assert center.notifications[0].is_read is False
    assert center.unread_count == 1

    monkeypatch.undo()
    assert center.mark_as_read(saved.id) is True
    assert center.error is None


def test_unknown_id_sets_error(center) -> None:
    assert center.delete("missing") is False
    assert center.error == "Failed to delete notification"

    center.clear_error()
    assert center.error is None


def test_delete_and_mark_all(center, repository, make_notification) -> None:
    first, second, third = repository.create_many(
        [make_notification(), make_notification(), make_notification()]
    )
    center.refresh()

    assert center.delete(first) is True
    assert center.unread_count == 2
    assert center.mark_all_as_read() is True
    assert center.unread_count == 0
    assert all(item.is_read for item in center.notifications)
    assert {item.id for item in center.search("maintenance")} == {second, third}
    stats = center.stats()
    assert stats is not None and stats.total == 2


def test_live_updates_and_dispose(session_factory, change_feed, repository, make_notification) -> None:
    notifier = HeadlessPlatformNotifier()
    center = NotificationCenter(
        SUPPLIER,
        session_factory,
        change_feed,
        subscription_manager=NotificationSubscriptionManager(session_factory, change_feed),
        delivery_bridge=NotificationDeliveryBridge(notifier),
    )
    center.start()

    repository.create(make_notification(title="Nouvelle commande", type="order"))
    assert center.unread_count == 1
    assert [item.title for item in center.notifications] == ["Nouvelle commande"]
    assert [item.title for item in notifier.shown] == ["Nouvelle commande"]

    center.dispose()
    repository.create(make_notification())
    assert center.unread_count == 1
    assert change_feed.listener_count(SUPPLIER) == 0


def test_batch_reads_take_read_timestamps_from_the_store(
    center, repository, session, make_notification
) -> None:
    first, second, third = repository.create_many(
        [make_notification(), make_notification(), make_notification()]
    )
    center.refresh()

    assert center.mark_many_as_read([first, second]) is True
    session.expire_all()
    local = {item.id: item for item in center.notifications}
    assert local[first].read_at is not None
    assert local[first].read_at == repository.get(first).read_at
    assert local[third].read_at is None
    assert center.unread_count == 1

    assert center.mark_all_as_read() is True
    session.expire_all()
    local = {item.id: item for item in center.notifications}
    assert local[third].is_read is True
    assert local[third].read_at == repository.get(third).read_at
    assert all(item.read_at is not None for item in center.notifications)
