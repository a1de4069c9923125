"""Dashboard-side state holder for a supplier's notifications."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, TypeVar

from sqlalchemy.orm import Session

from app.domain.entities import (
    SORT_NEWEST,
    Notification,
    NotificationFilter,
    NotificationStats,
)
from app.infrastructure.notifications.change_feed import NotificationChangeFeed
from app.infrastructure.repositories import NotificationNotFoundError, NotificationStoreError

from .aggregation import build_notification_view
from .delivery import NotificationDeliveryBridge
from .service import NotificationService
from .subscriptions import NotificationSubscription, NotificationSubscriptionManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NotificationCenter:
    """Keep the notification list, unread count and last error of one supplier.

    Commands wait for the store before touching local state, so a failed
    write leaves the local view untouched and only records ``error``. The
    error stays until :meth:`clear_error` or the next successful command.
    """

    def __init__(
        self,
        fournisseur_id: str,
        session_factory: Callable[[], Session],
        change_feed: NotificationChangeFeed,
        *,
        subscription_manager: NotificationSubscriptionManager | None = None,
        delivery_bridge: NotificationDeliveryBridge | None = None,
        page_size: int = 50,
    ) -> None:
        self.fournisseur_id = fournisseur_id
        self._session_factory = session_factory
        self._change_feed = change_feed
        self._subscription_manager = subscription_manager
        self._delivery_bridge = delivery_bridge
        self._page_size = page_size
        self._subscriptions: list[NotificationSubscription] = []
        self._disposed = False

        self.notifications: list[Notification] = []
        self.unread_count = 0
        self.loading = False
        self.error: str | None = None

    @property
    def disposed(self) -> bool:
        return self._disposed

    # -- lifecycle ---------------------------------------------------------------

    def refresh(self) -> bool:
        """Fetch the latest page and unread count from the store."""

        self.loading = True
        try:
            result = self._run(
                lambda service: (
                    service.list(self.fournisseur_id, limit=self._page_size),
                    service.unread_count(self.fournisseur_id),
                ),
                "Failed to fetch notifications",
            )
        finally:
            self.loading = False
        if result is None or self._disposed:
            return False
        self.notifications, self.unread_count = result
        return True

    def start(self) -> None:
        """Open the live subscriptions; the first snapshot arrives immediately."""

        if self._subscription_manager is None or self._disposed or self._subscriptions:
            return
        self._subscriptions.append(
            self._subscription_manager.subscribe(
                self.fournisseur_id,
                self._on_notifications,
                on_error=self._on_subscription_error,
            )
        )
        self._subscriptions.append(
            self._subscription_manager.subscribe_unread_count(
                self.fournisseur_id,
                self._on_unread_count,
                on_error=self._on_subscription_error,
            )
        )

    def stop(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.unsubscribe()

    def dispose(self) -> None:
        """Stop live updates; results arriving afterwards are ignored."""

        self.stop()
        self._disposed = True

    def clear_error(self) -> None:
        self.error = None

    # -- commands ----------------------------------------------------------------

    def mark_as_read(self, notification_id: str) -> bool:
        updated = self._run(
            lambda service: service.mark_as_read(self.fournisseur_id, notification_id),
            "Failed to mark notification as read",
        )
        if updated is None or self._disposed:
            return False
        was_unread = any(
            item.id == notification_id and not item.is_read for item in self.notifications
        )
        self.notifications = [
            updated if item.id == notification_id else item for item in self.notifications
        ]
        if was_unread:
            self.unread_count = max(0, self.unread_count - 1)
        return True

    def mark_many_as_read(self, notification_ids: Iterable[str]) -> bool:
        ids = list(notification_ids)
        result = self._run(
            lambda service: (
                service.mark_many_as_read(self.fournisseur_id, ids),
                self._reload(service, ids),
            ),
            "Failed to mark notifications as read",
        )
        if result is None or self._disposed:
            return False
        changed, stored = result
        self._apply_stored(stored)
        self.unread_count = max(0, self.unread_count - changed)
        return True

    def mark_all_as_read(self) -> bool:
        unread_ids = [item.id for item in self.notifications if not item.is_read and item.id]
        result = self._run(
            lambda service: (
                service.mark_all_as_read(self.fournisseur_id),
                self._reload(service, unread_ids),
            ),
            "Failed to mark all notifications as read",
        )
        if result is None or self._disposed:
            return False
        self._apply_stored(result[1])
        self.unread_count = 0
        return True

    def delete(self, notification_id: str) -> bool:
        deleted = self._run(
            lambda service: service.delete(self.fournisseur_id, notification_id),
            "Failed to delete notification",
        )
        if deleted is None or self._disposed:
            return False
        self.notifications = [item for item in self.notifications if item.id != notification_id]
        if not deleted.is_read:
            self.unread_count = max(0, self.unread_count - 1)
        return True

    def search(self, term: str, type: str | None = None) -> list[Notification]:
        results = self._run(
            lambda service: service.search(self.fournisseur_id, term, type),
            "Failed to search notifications",
        )
        return results or []

    def stats(self) -> NotificationStats | None:
        return self._run(
            lambda service: service.stats(self.fournisseur_id),
            "Failed to get notification statistics",
        )

    def view(
        self,
        notification_filter: NotificationFilter | None = None,
        search_term: str | None = None,
        sort_by: str = SORT_NEWEST,
    ) -> list[Notification]:
        return build_notification_view(self.notifications, notification_filter, search_term, sort_by)

    # -- internals ---------------------------------------------------------------

    def _run(self, action: Callable[[NotificationService], T], error_message: str) -> T | None:
        session = self._session_factory()
        try:
            result = action(NotificationService(session, change_feed=self._change_feed))
        except (NotificationStoreError, NotificationNotFoundError) as exc:
            logger.error("%s for supplier %s: %s", error_message, self.fournisseur_id, exc)
            if not self._disposed:
                self.error = error_message
            return None
        finally:
            session.close()
        if not self._disposed:
            self.error = None
        return result

    def _reload(self, service: NotificationService, ids: Iterable[str]) -> dict[str, Notification]:
        """Return the stored version of each id still present in the store."""

        stored: dict[str, Notification] = {}
        for notification_id in ids:
            notification = service.repository.get(
                notification_id, recipient_id=self.fournisseur_id
            )
            if notification is not None:
                stored[notification_id] = notification
        return stored

    def _apply_stored(self, stored: dict[str, Notification]) -> None:
        self.notifications = [
            stored.get(item.id, item) if item.id else item for item in self.notifications
        ]

    def _on_notifications(self, notifications: list[Notification]) -> None:
        if self._disposed:
            return
        self.notifications = notifications
        if self._delivery_bridge is not None:
            self._delivery_bridge.handle_update(notifications)

    def _on_unread_count(self, count: int) -> None:
        if self._disposed:
            return
        self.unread_count = count

    def _on_subscription_error(self, exc: Exception) -> None:
        if self._disposed:
            return
        self.error = "Live notification updates interrupted"


__all__ = ["NotificationCenter"]
