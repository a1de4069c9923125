"""Filtering, sorting and statistics over an in-memory notification set."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Sequence

from app.domain.entities import (
    NOTIFICATION_TYPE_INVENTORY,
    NOTIFICATION_TYPE_ORDER,
    NOTIFICATION_TYPE_PAYMENT,
    NOTIFICATION_TYPE_PRODUCT,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    SORT_NEWEST,
    SORT_OLDEST,
    SORT_PRIORITY,
    SORT_TYPE,
    SORT_UNREAD,
    Notification,
    NotificationFilter,
    NotificationStats,
)
from app.utils import ensure_utc, utc_now

_PRIORITY_RANK = {PRIORITY_HIGH: 3, PRIORITY_MEDIUM: 2, PRIORITY_LOW: 1}


def _created(notification: Notification) -> float:
    moment = ensure_utc(notification.created_at)
    if moment is None:
        return 0.0
    return moment.timestamp()


def matches_search(notification: Notification, term: str | None) -> bool:
    if not term:
        return True
    needle = term.lower()
    return needle in notification.title.lower() or needle in notification.message.lower()


def search_notifications(
    notifications: Iterable[Notification], term: str | None
) -> list[Notification]:
    """Keep notifications whose title or message contains ``term``."""

    return [notification for notification in notifications if matches_search(notification, term)]


def filter_notifications(
    notifications: Iterable[Notification], criteria: NotificationFilter | None
) -> list[Notification]:
    """Apply every populated field of ``criteria``."""

    if criteria is None:
        return list(notifications)

    date_from = ensure_utc(criteria.date_from)
    date_to = ensure_utc(criteria.date_to)

    def keep(notification: Notification) -> bool:
        if criteria.type and criteria.type != "all" and notification.type != criteria.type:
            return False
        if criteria.sub_type and notification.sub_type != criteria.sub_type:
            return False
        if (
            criteria.priority
            and criteria.priority != "all"
            and notification.priority != criteria.priority
        ):
            return False
        if criteria.is_read is not None and notification.is_read != criteria.is_read:
            return False
        if criteria.is_archived is not None and notification.is_archived != criteria.is_archived:
            return False
        created_at = ensure_utc(notification.created_at)
        if date_from is not None and (created_at is None or created_at < date_from):
            return False
        if date_to is not None and (created_at is None or created_at > date_to):
            return False
        return matches_search(notification, criteria.search_term)

    return [notification for notification in notifications if keep(notification)]


def sort_notifications(
    notifications: Iterable[Notification], sort_by: str = SORT_NEWEST
) -> list[Notification]:
    """Order notifications by ``sort_by``; unknown keys behave like ``newest``.

    Every key except ``oldest`` breaks ties by creation time, newest first.
    """

    items = list(notifications)
    if sort_by == SORT_OLDEST:
        return sorted(items, key=_created)
    if sort_by == SORT_PRIORITY:
        return sorted(
            items,
            key=lambda item: (-_PRIORITY_RANK.get(item.priority, 0), -_created(item)),
        )
    if sort_by == SORT_UNREAD:
        return sorted(items, key=lambda item: (item.is_read, -_created(item)))
    if sort_by == SORT_TYPE:
        return sorted(items, key=lambda item: (item.type, -_created(item)))
    return sorted(items, key=_created, reverse=True)


def build_notification_view(
    notifications: Iterable[Notification],
    criteria: NotificationFilter | None = None,
    search_term: str | None = None,
    sort_by: str = SORT_NEWEST,
) -> list[Notification]:
    """Return the ordered list displayed on the supplier dashboard."""

    filtered = search_notifications(filter_notifications(notifications, criteria), search_term)
    return sort_notifications(filtered, sort_by)


def compute_stats(
    notifications: Sequence[Notification], now: datetime | None = None
) -> NotificationStats:
    """Recompute the supplier statistics in a single pass over ``notifications``."""

    reference = ensure_utc(now) or utc_now()
    day_ago = reference - timedelta(hours=24)
    week_ago = reference - timedelta(days=7)
    month_ago = reference - timedelta(days=30)

    stats = NotificationStats()
    clicked = 0
    read_minutes: list[float] = []

    for notification in notifications:
        stats.total += 1
        if not notification.is_read:
            stats.unread += 1
        if notification.is_archived:
            stats.archived += 1
        if notification.clicked:
            clicked += 1
        stats.by_type[notification.type] = stats.by_type.get(notification.type, 0) + 1
        stats.by_priority[notification.priority] = (
            stats.by_priority.get(notification.priority, 0) + 1
        )

        created_at = ensure_utc(notification.created_at)
        if created_at is not None:
            if created_at > day_ago:
                stats.recent += 1
            if created_at > week_ago:
                stats.this_week += 1
            if created_at > month_ago:
                stats.this_month += 1
            read_at = ensure_utc(notification.read_at)
            if notification.is_read and read_at is not None:
                read_minutes.append(max((read_at - created_at).total_seconds(), 0.0) / 60)

    if stats.total:
        stats.click_through_rate = min(clicked / stats.total * 100, 100.0)
    if read_minutes:
        stats.average_read_time = sum(read_minutes) / len(read_minutes)
    return stats


def navigation_target(notification: Notification) -> str:
    """Return the dashboard path opened when ``notification`` is clicked."""

    if notification.type == NOTIFICATION_TYPE_ORDER:
        if notification.order_id:
            return f"/orders?highlight={notification.order_id}"
        return "/orders"
    if notification.type == NOTIFICATION_TYPE_PAYMENT:
        return "/orders"
    if notification.type in (NOTIFICATION_TYPE_INVENTORY, NOTIFICATION_TYPE_PRODUCT):
        if notification.product_id:
            return f"/products?highlight={notification.product_id}"
        return "/products"
    return "/notifications"


__all__ = [
    "build_notification_view",
    "compute_stats",
    "filter_notifications",
    "matches_search",
    "navigation_target",
    "search_notifications",
    "sort_notifications",
]
