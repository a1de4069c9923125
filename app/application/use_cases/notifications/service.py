"""Store-backed operations on supplier notifications."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session

from app.domain.entities import (
    SORT_NEWEST,
    Notification,
    NotificationFilter,
    NotificationPage,
    NotificationStats,
)
from app.infrastructure.notifications.change_feed import NotificationChangeFeed
from app.infrastructure.repositories import (
    DEFAULT_PAGE_SIZE,
    NotificationPreferencesRepository,
    NotificationRepository,
)

from .aggregation import build_notification_view, compute_stats, navigation_target

logger = logging.getLogger(__name__)


class NotificationService:
    """Operations a supplier dashboard performs on its notifications."""

    def __init__(
        self, session: Session, *, change_feed: NotificationChangeFeed | None = None
    ) -> None:
        self.repository = NotificationRepository(session, change_feed=change_feed)
        self.preferences = NotificationPreferencesRepository(session)

    def create(self, notification: Notification) -> str:
        saved = self.repository.create(notification)
        logger.info(
            "Created %s notification %s for supplier %s",
            saved.type,
            saved.id,
            saved.fournisseur_id,
        )
        return saved.id or ""

    def create_bulk(self, notifications: Iterable[Notification]) -> list[str]:
        return self.repository.create_many(list(notifications))

    def list(
        self, fournisseur_id: str, *, limit: int = DEFAULT_PAGE_SIZE, cursor: str | None = None
    ) -> list[Notification]:
        return self.repository.list_for_recipient(fournisseur_id, limit=limit, cursor=cursor)

    def query(
        self,
        fournisseur_id: str,
        notification_filter: NotificationFilter | None = None,
        *,
        page: int = 1,
        page_size: int = 20,
    ) -> NotificationPage:
        offset = max(page - 1, 0) * page_size
        return self.repository.query(
            fournisseur_id, notification_filter, limit=page_size, offset=offset
        )

    def view(
        self,
        fournisseur_id: str,
        notification_filter: NotificationFilter | None = None,
        *,
        sort_by: str = SORT_NEWEST,
        page: int = 1,
        page_size: int = 20,
    ) -> NotificationPage:
        """Return a filtered page in the requested order.

        Newest-first pages are read straight from the store; any other order
        needs the whole partition.
        """

        if sort_by == SORT_NEWEST:
            return self.query(
                fournisseur_id, notification_filter, page=page, page_size=page_size
            )
        ordered = build_notification_view(
            self.repository.list_all_for_recipient(fournisseur_id),
            notification_filter,
            sort_by=sort_by,
        )
        offset = max(page - 1, 0) * page_size
        return NotificationPage(
            notifications=ordered[offset : offset + page_size],
            has_more=len(ordered) > offset + page_size,
        )

    def search(self, fournisseur_id: str, term: str, type: str | None = None) -> list[Notification]:
        return self.repository.search(fournisseur_id, term, type=type)

    def stats(self, fournisseur_id: str, now: datetime | None = None) -> NotificationStats:
        return compute_stats(self.repository.list_all_for_recipient(fournisseur_id), now)

    def unread_count(self, fournisseur_id: str) -> int:
        return self.repository.count_unread(fournisseur_id)

    def mark_as_read(self, fournisseur_id: str, notification_id: str) -> Notification:
        return self.repository.mark_as_read(notification_id, recipient_id=fournisseur_id)

    def mark_many_as_read(self, fournisseur_id: str, notification_ids: Iterable[str]) -> int:
        return self.repository.mark_many_as_read(notification_ids, recipient_id=fournisseur_id)

    def mark_all_as_read(self, fournisseur_id: str) -> int:
        return self.repository.mark_all_as_read(fournisseur_id)

    def archive(self, fournisseur_id: str, notification_id: str) -> Notification:
        return self.repository.archive(notification_id, recipient_id=fournisseur_id)

    def archive_many(self, fournisseur_id: str, notification_ids: Iterable[str]) -> int:
        return self.repository.archive_many(notification_ids, recipient_id=fournisseur_id)

    def delete(self, fournisseur_id: str, notification_id: str) -> Notification:
        return self.repository.delete(notification_id, recipient_id=fournisseur_id)

    def delete_many(self, fournisseur_id: str, notification_ids: Iterable[str]) -> int:
        return self.repository.delete_many(notification_ids, recipient_id=fournisseur_id)

    def open_notification(
        self, fournisseur_id: str, notification_id: str
    ) -> tuple[Notification, str]:
        """Record a click, mark the notification read and return where to navigate."""

        notification = self.repository.mark_as_clicked(notification_id, recipient_id=fournisseur_id)
        if not notification.is_read:
            notification = self.repository.mark_as_read(
                notification_id, recipient_id=fournisseur_id
            )
        return notification, navigation_target(notification)

    def record_action(self, fournisseur_id: str, notification_id: str) -> Notification:
        return self.repository.mark_action_taken(notification_id, recipient_id=fournisseur_id)

    def cleanup(self, fournisseur_id: str, days: int) -> int:
        deleted = self.repository.cleanup_older_than(fournisseur_id, days)
        if deleted:
            logger.info(
                "Removed %d notification(s) older than %d days for supplier %s",
                deleted,
                days,
                fournisseur_id,
            )
        return deleted

    def cleanup_expired(self) -> int:
        deleted = self.repository.cleanup_expired()
        if deleted:
            logger.info("Removed %d expired notification(s)", deleted)
        return deleted


__all__ = ["NotificationService"]
