"""Fan-out of live supplier notification streams to websocket connections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import Lock

from app.domain.entities import Notification
from app.infrastructure.notifications.platform import (
    BrowserNotification,
    BrowserPlatformNotifier,
)
from app.infrastructure.notifications.publisher import RealtimeEventPublisher
from app.infrastructure.notifications.serialization import serialize_notification

from .delivery import NEW_NOTIFICATION_WINDOW_SECONDS, NotificationDeliveryBridge
from .subscriptions import NotificationSubscription, NotificationSubscriptionManager

logger = logging.getLogger(__name__)


@dataclass
class _SupplierStream:
    subscription: NotificationSubscription
    notifier: BrowserPlatformNotifier
    bridge: NotificationDeliveryBridge
    latest: list[Notification] = field(default_factory=list)
    connections: int = 1


class SupplierNotificationStreams:
    """Keep one subscription per connected supplier, shared by all their sockets.

    Every list update is published as a ``notifications`` event, every unread
    count as ``unread-count``. Newly arrived items additionally go through the
    delivery bridge, which emits ``browser-notification`` events once the
    browser reported a granted permission.
    """

    def __init__(
        self,
        subscription_manager: NotificationSubscriptionManager,
        publisher: RealtimeEventPublisher,
        *,
        window_seconds: int = NEW_NOTIFICATION_WINDOW_SECONDS,
    ) -> None:
        self._subscription_manager = subscription_manager
        self._publisher = publisher
        self._window_seconds = window_seconds
        self._streams: dict[str, _SupplierStream] = {}
        self._lock = Lock()

    def is_open(self, fournisseur_id: str) -> bool:
        return fournisseur_id in self._streams

    def open(self, fournisseur_id: str) -> None:
        """Register a connection, subscribing on the first one.

        Later connections trigger a fresh delivery of the current snapshot so
        the new socket starts from the same state as the others.
        """

        with self._lock:
            stream = self._streams.get(fournisseur_id)
            shared = stream is not None and stream.subscription.active
            if shared:
                stream.connections += 1
        if shared:
            stream.subscription.handle_change(fournisseur_id)
            return

        notifier = BrowserPlatformNotifier(fournisseur_id, self._publisher)
        bridge = NotificationDeliveryBridge(notifier, window_seconds=self._window_seconds)
        latest: list[Notification] = []

        def on_notifications(notifications: list[Notification]) -> None:
            latest[:] = notifications
            self._publisher.dispatch(
                fournisseur_id,
                event_type="notifications",
                payload=[serialize_notification(item) for item in notifications],
            )
            bridge.handle_update(notifications)

        def on_unread_count(count: int) -> None:
            self._publisher.dispatch(
                fournisseur_id, event_type="unread-count", payload={"unread": count}
            )

        def on_error(exc: Exception) -> None:
            self._publisher.dispatch(
                fournisseur_id,
                event_type="error",
                payload={"detail": "Notification stream interrupted"},
            )

        subscription = self._subscription_manager.subscribe(
            fournisseur_id, on_notifications, on_unread_count, on_error=on_error
        )
        with self._lock:
            current = self._streams.get(fournisseur_id)
            duplicate = current is not None and current.subscription.active
            if duplicate:
                current.connections += 1
            else:
                self._streams[fournisseur_id] = _SupplierStream(
                    subscription=subscription,
                    notifier=notifier,
                    bridge=bridge,
                    latest=latest,
                    connections=(current.connections if current is not None else 0) + 1,
                )
        if duplicate:
            # Another connection registered the stream while this one subscribed.
            subscription.unsubscribe()
            return
        logger.info("Opened notification stream for supplier %s", fournisseur_id)

    def close(self, fournisseur_id: str) -> None:
        """Release a connection, unsubscribing when it was the last one."""

        with self._lock:
            stream = self._streams.get(fournisseur_id)
            if stream is None:
                return
            stream.connections -= 1
            if stream.connections > 0:
                return
            self._streams.pop(fournisseur_id, None)
        stream.subscription.unsubscribe()
        logger.info("Closed notification stream for supplier %s", fournisseur_id)

    def update_permission(self, fournisseur_id: str, permission: str) -> list[BrowserNotification]:
        """Record the browser permission and announce what is still new."""

        stream = self._streams.get(fournisseur_id)
        if stream is None:
            return []
        stream.notifier.update_permission(permission)
        return stream.bridge.handle_update(list(stream.latest))

    def close_all(self) -> None:
        with self._lock:
            streams, self._streams = list(self._streams.values()), {}
        for stream in streams:
            stream.subscription.unsubscribe()


__all__ = ["SupplierNotificationStreams"]
