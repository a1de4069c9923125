"""Live subscriptions to a supplier's notification list and unread count."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import Callable

from sqlalchemy.orm import Session

from app.domain.entities import Notification
from app.infrastructure.notifications.change_feed import NotificationChangeFeed
from app.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)

DEFAULT_REALTIME_WINDOW = 50

NotificationsCallback = Callable[[list[Notification]], None]
UnreadCountCallback = Callable[[int], None]
ErrorCallback = Callable[[Exception], None]


class SubscriptionState(str, Enum):
    IDLE = "idle"
    SUBSCRIBED = "subscribed"
    ERROR = "error"


@dataclass
class NotificationSnapshot:
    """Latest window of a supplier partition plus its unread count."""

    recipient_id: str
    notifications: list[Notification] = field(default_factory=list)
    unread_count: int = 0


class NotificationSubscription:
    """Handle returned by :meth:`NotificationSubscriptionManager.subscribe`.

    Callbacks run one at a time. A change published while a callback is still
    running is coalesced into a single extra delivery once it returns.
    """

    def __init__(
        self,
        recipient_id: str,
        loader: Callable[[str], NotificationSnapshot],
        *,
        on_notifications: NotificationsCallback | None = None,
        on_unread_count: UnreadCountCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.recipient_id = recipient_id
        self._loader = loader
        self._on_notifications = on_notifications
        self._on_unread_count = on_unread_count
        self._on_error = on_error
        self._state = SubscriptionState.IDLE
        self._detach: Callable[[], None] | None = None
        self._dispatching = False
        self._pending = False
        self._guard = Lock()
        self.last_error: Exception | None = None

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state is SubscriptionState.SUBSCRIBED

    def attach(self, detach: Callable[[], None]) -> None:
        self._detach = detach
        self._state = SubscriptionState.SUBSCRIBED

    def unsubscribe(self) -> None:
        """Stop every future delivery. Calling it again has no effect."""

        if self._state is SubscriptionState.IDLE and self._detach is None:
            return
        self._state = SubscriptionState.IDLE
        with self._guard:
            self._pending = False
        detach, self._detach = self._detach, None
        if detach is not None:
            detach()

    def handle_change(self, recipient_id: str) -> None:
        """Change feed listener: reload the partition and forward it."""

        if not self.active or recipient_id != self.recipient_id:
            return
        with self._guard:
            self._pending = True
            if self._dispatching:
                return
            self._dispatching = True

        try:
            while True:
                with self._guard:
                    if not self._pending or not self.active:
                        self._dispatching = False
                        return
                    self._pending = False
                self._deliver()
        except BaseException:
            with self._guard:
                self._dispatching = False
            raise

    def _deliver(self) -> None:
        try:
            snapshot = self._loader(self.recipient_id)
        except Exception as exc:
            self._fail(exc)
            return

        if self.active and self._on_notifications is not None:
            self._on_notifications(snapshot.notifications)
        if self.active and self._on_unread_count is not None:
            self._on_unread_count(snapshot.unread_count)

    def _fail(self, exc: Exception) -> None:
        logger.error(
            "Notification subscription for supplier %s failed: %s", self.recipient_id, exc
        )
        self.last_error = exc
        self._state = SubscriptionState.ERROR
        detach, self._detach = self._detach, None
        if detach is not None:
            detach()
        if self._on_error is not None:
            try:
                self._on_error(exc)
            finally:
                self._state = SubscriptionState.IDLE
        else:
            self._state = SubscriptionState.IDLE


class NotificationSubscriptionManager:
    """Open live subscriptions backed by the store change feed.

    No resubscription is attempted after a failure; the owner decides when to
    call :meth:`subscribe` again.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        change_feed: NotificationChangeFeed,
        *,
        window: int = DEFAULT_REALTIME_WINDOW,
    ) -> None:
        self._session_factory = session_factory
        self._change_feed = change_feed
        self._window = window

    @property
    def window(self) -> int:
        return self._window

    def load_snapshot(self, recipient_id: str) -> NotificationSnapshot:
        session = self._session_factory()
        try:
            repository = NotificationRepository(session)
            return NotificationSnapshot(
                recipient_id=recipient_id,
                notifications=repository.list_for_recipient(recipient_id, limit=self._window),
                unread_count=repository.count_unread(recipient_id),
            )
        finally:
            session.close()

    def subscribe(
        self,
        recipient_id: str,
        on_notifications: NotificationsCallback | None = None,
        on_unread_count: UnreadCountCallback | None = None,
        *,
        on_error: ErrorCallback | None = None,
    ) -> NotificationSubscription:
        """Start streaming ``recipient_id``'s partition.

        The current snapshot is delivered before this method returns.
        """

        subscription = NotificationSubscription(
            recipient_id,
            self.load_snapshot,
            on_notifications=on_notifications,
            on_unread_count=on_unread_count,
            on_error=on_error,
        )
        subscription.attach(self._change_feed.listen(recipient_id, subscription.handle_change))
        logger.debug("Supplier %s subscribed to notifications", recipient_id)
        subscription.handle_change(recipient_id)
        return subscription

    def subscribe_unread_count(
        self,
        recipient_id: str,
        callback: UnreadCountCallback,
        *,
        on_error: ErrorCallback | None = None,
    ) -> NotificationSubscription:
        return self.subscribe(recipient_id, None, callback, on_error=on_error)


__all__ = [
    "DEFAULT_REALTIME_WINDOW",
    "NotificationSnapshot",
    "NotificationSubscription",
    "NotificationSubscriptionManager",
    "SubscriptionState",
]
