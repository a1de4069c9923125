"""Bridge between live notification updates and platform notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable

from app.domain.entities import NOTIFICATION_TYPE_ORDER, Notification
from app.infrastructure.notifications.platform import (
    PERMISSION_GRANTED,
    BrowserNotification,
    PlatformNotifier,
)
from app.infrastructure.notifications.push import PushMessagingProvider
from app.utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)

NEW_NOTIFICATION_WINDOW_SECONDS = 10
AUTO_CLOSE_SECONDS = 10
TOAST_DURATION_MS = 6000


@dataclass
class Toast:
    """Foreground message shown inside the dashboard."""

    title: str
    message: str
    type: str = "notification"
    duration_ms: int = TOAST_DURATION_MS


ToastSink = Callable[[Toast], None]


def browser_click_url(notification: Notification) -> str:
    if notification.order_id:
        return f"/orders?highlight={notification.order_id}"
    return "/notifications"


def to_browser_notification(notification: Notification) -> BrowserNotification:
    """Render ``notification`` for the platform notification API.

    Order notifications stay on screen until the supplier interacts with them.
    """

    is_order = notification.type == NOTIFICATION_TYPE_ORDER
    return BrowserNotification(
        tag=notification.id or "",
        title=notification.title,
        body=notification.message,
        url=browser_click_url(notification),
        notification_id=notification.id or "",
        order_id=notification.order_id,
        require_interaction=is_order,
        auto_close_seconds=None if is_order else AUTO_CLOSE_SECONDS,
    )


def toast_from_push_message(payload: dict[str, Any]) -> Toast:
    content = payload.get("notification") or {}
    return Toast(
        title=content.get("title") or "New Notification",
        message=content.get("body") or "You have a new notification",
    )


class NotificationDeliveryBridge:
    """Announce newly arrived unread notifications through a platform notifier.

    "Newly arrived" means unread and created less than ``window_seconds`` ago.
    A notification id is announced at most once per bridge.
    """

    def __init__(
        self,
        notifier: PlatformNotifier,
        *,
        window_seconds: int = NEW_NOTIFICATION_WINDOW_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._notifier = notifier
        self._window = timedelta(seconds=window_seconds)
        self._clock = clock
        self._announced: set[str] = set()

    @property
    def notifier(self) -> PlatformNotifier:
        return self._notifier

    def newly_arrived(
        self, notifications: Iterable[Notification], now: datetime | None = None
    ) -> list[Notification]:
        reference = ensure_utc(now) or self._clock()
        recent: list[Notification] = []
        for notification in notifications:
            created_at = ensure_utc(notification.created_at)
            if created_at is None or notification.is_read:
                continue
            if reference - created_at < self._window:
                recent.append(notification)
        return recent

    def handle_update(
        self, notifications: Iterable[Notification], now: datetime | None = None
    ) -> list[BrowserNotification]:
        """Show platform notifications for the new items of a list update."""

        recent = self.newly_arrived(notifications, now)
        self._announced &= {notification.id for notification in recent}
        if self._notifier.permission != PERMISSION_GRANTED:
            return []

        shown: list[BrowserNotification] = []
        for notification in recent:
            if not notification.id or notification.id in self._announced:
                continue
            browser_notification = to_browser_notification(notification)
            self._notifier.show(browser_notification)
            self._announced.add(notification.id)
            shown.append(browser_notification)
        if shown:
            logger.debug("Announced %d new notification(s)", len(shown))
        return shown

    def attach_foreground_messages(
        self, provider: PushMessagingProvider, sink: ToastSink
    ) -> Callable[[], None]:
        """Relay foreground push messages to ``sink`` as toasts."""

        token = provider.request_token()
        if token:
            logger.info("Push messaging token obtained")

        def handle(payload: dict[str, Any]) -> None:
            sink(toast_from_push_message(payload))

        return provider.on_foreground_message(handle)


__all__ = [
    "AUTO_CLOSE_SECONDS",
    "NEW_NOTIFICATION_WINDOW_SECONDS",
    "NotificationDeliveryBridge",
    "Toast",
    "ToastSink",
    "browser_click_url",
    "to_browser_notification",
    "toast_from_push_message",
]
