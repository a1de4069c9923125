"""Tests for filtering, sorting and statistics over notification lists."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.application.use_cases.notifications import (
    build_notification_view,
    compute_stats,
    filter_notifications,
    navigation_target,
    search_notifications,
    sort_notifications,
)
from app.domain.entities import NotificationFilter
from app.utils import format_relative_time

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def _at(minutes_ago: float) -> datetime:
    return NOW - timedelta(minutes=minutes_ago)


def test_priority_sort_breaks_ties_by_newest(make_notification) -> None:
    items = [
        make_notification(id="low-new", priority="low", created_at=_at(1)),
        make_notification(id="high-old", priority="high", created_at=_at(30)),
        make_notification(id="medium", priority="medium", created_at=_at(5)),
        make_notification(id="high-new", priority="high", created_at=_at(2)),
    ]

    ordered = sort_notifications(items, "priority")

    assert [item.id for item in ordered] == ["high-new", "high-old", "medium", "low-new"]


def test_other_sort_keys(make_notification) -> None:
    items = [
        make_notification(id="a", type="payment", is_read=True, created_at=_at(3)),
        make_notification(id="b", type="order", is_read=False, created_at=_at(2)),
        make_notification(id="c", type="order", is_read=True, created_at=_at(1)),
    ]

    assert [item.id for item in sort_notifications(items, "newest")] == ["c", "b", "a"]
    assert [item.id for item in sort_notifications(items, "oldest")] == ["a", "b", "c"]
    assert [item.id for item in sort_notifications(items, "unread")] == ["b", "c", "a"]
    assert [item.id for item in sort_notifications(items, "type")] == ["c", "b", "a"]


def test_search_returns_only_matching_titles(make_notification) -> None:
    items = [
        make_notification(title="New Order", message="From Alice"),
        make_notification(title="Payment Received", message="Settled"),
    ]

    assert [item.title for item in search_notifications(items, "order")] == ["New Order"]
    assert len(search_notifications(items, "")) == 2


def test_filter_combines_criteria(make_notification) -> None:
    items = [
        make_notification(id="1", type="order", priority="high", created_at=_at(10)),
        make_notification(id="2", type="order", priority="low", is_read=True, created_at=_at(5)),
        make_notification(id="3", type="payment", priority="high", created_at=_at(1)),
    ]

    assert [n.id for n in filter_notifications(items, NotificationFilter(type="order"))] == ["1", "2"]
    assert [n.id for n in filter_notifications(items, NotificationFilter(is_read=False))] == ["1", "3"]
    assert [
        n.id for n in filter_notifications(items, NotificationFilter(date_from=_at(6)))
    ] == ["2", "3"]
    assert len(filter_notifications(items, NotificationFilter(type="all", priority="all"))) == 3


def test_build_view_filters_searches_and_sorts(make_notification) -> None:
    items = [
        make_notification(id="1", type="order", title="Order A", created_at=_at(10)),
        make_notification(id="2", type="order", title="Order B", created_at=_at(5)),
        make_notification(id="3", type="payment", title="Order paid", created_at=_at(1)),
    ]

    view = build_notification_view(items, NotificationFilter(type="order"), "order", "oldest")

    assert [item.id for item in view] == ["1", "2"]


def test_stats_on_empty_set() -> None:
    stats = compute_stats([], NOW)

    assert stats.total == 0
    assert stats.click_through_rate == 0
    assert stats.average_read_time == 0


def test_stats_counts_and_rates(make_notification) -> None:
    items = [
        make_notification(
            type="order",
            priority="high",
            created_at=_at(60),
            is_read=True,
            read_at=_at(50),
            clicked=True,
        ),
        make_notification(type="order", priority="high", created_at=_at(60 * 48)),
        make_notification(
            type="payment",
            priority="medium",
            created_at=_at(60 * 24 * 10),
            is_read=True,
            read_at=_at(60 * 24 * 10 - 30),
            is_archived=True,
        ),
        make_notification(type="system", created_at=_at(60 * 24 * 40)),
    ]

    stats = compute_stats(items, NOW)

    assert stats.total == 4
    assert stats.unread == 2
    assert stats.archived == 1
    assert stats.by_type == {"order": 2, "payment": 1, "system": 1}
    assert stats.by_priority == {"high": 2, "medium": 2}
    assert stats.recent == 1
    assert stats.this_week == 2
    assert stats.this_month == 3
    assert stats.click_through_rate == 25.0
    assert 0 <= stats.click_through_rate <= 100
    assert stats.average_read_time == 20.0


def test_navigation_targets(make_notification) -> None:
    assert navigation_target(make_notification(type="order", order_id="o-1")) == "/orders?highlight=o-1"
    assert navigation_target(make_notification(type="order")) == "/orders"
    assert navigation_target(make_notification(type="payment", order_id="o-1")) == "/orders"
    assert (
        navigation_target(make_notification(type="inventory", product_id="p-1"))
        == "/products?highlight=p-1"
    )
    assert navigation_target(make_notification(type="product")) == "/products"
    assert navigation_target(make_notification(type="system")) == "/notifications"


def test_format_relative_time() -> None:
    assert format_relative_time(NOW - timedelta(seconds=20), NOW) == "Just now"
    assert format_relative_time(_at(5), NOW) == "5m ago"
    assert format_relative_time(_at(180), NOW) == "3h ago"
    assert format_relative_time(_at(60 * 24 * 2), NOW) == "2d ago"
    assert format_relative_time(_at(60 * 24 * 30), NOW) == "10/04/2024"
