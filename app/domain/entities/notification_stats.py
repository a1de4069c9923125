"""Derived views over a supplier's notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .notification import Notification

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"
SORT_PRIORITY = "priority"
SORT_UNREAD = "unread"
SORT_TYPE = "type"

SORT_KEYS = (SORT_NEWEST, SORT_OLDEST, SORT_PRIORITY, SORT_UNREAD, SORT_TYPE)


@dataclass
class NotificationFilter:
    """Criteria applied to a notification list.

    ``None`` means "do not filter on this field"; ``"all"`` is accepted for
    ``type`` and ``priority`` with the same meaning.
    """

    type: str | None = None
    sub_type: str | None = None
    priority: str | None = None
    is_read: bool | None = None
    is_archived: bool | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    search_term: str | None = None


@dataclass
class NotificationStats:
    """Aggregated counters recomputed from the full notification set."""

    total: int = 0
    unread: int = 0
    archived: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)
    recent: int = 0
    this_week: int = 0
    this_month: int = 0
    click_through_rate: float = 0.0
    average_read_time: float = 0.0


@dataclass
class NotificationPage:
    """One page of notifications fetched from the store."""

    notifications: list[Notification]
    has_more: bool


__all__ = [
    "NotificationFilter",
    "NotificationPage",
    "NotificationStats",
    "SORT_KEYS",
    "SORT_NEWEST",
    "SORT_OLDEST",
    "SORT_PRIORITY",
    "SORT_TYPE",
    "SORT_UNREAD",
]
