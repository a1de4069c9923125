"""Platform notification capabilities used by the delivery bridge."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass

from .publisher import RealtimeEventPublisher

logger = logging.getLogger(__name__)

PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"
PERMISSION_DEFAULT = "default"

PERMISSIONS = (PERMISSION_GRANTED, PERMISSION_DENIED, PERMISSION_DEFAULT)


@dataclass
class BrowserNotification:
    """OS-level notification as rendered by the supplier's browser."""

    tag: str
    title: str
    body: str
    url: str
    notification_id: str
    order_id: str | None = None
    icon: str = "/favicon.ico"
    badge: str = "/favicon.ico"
    require_interaction: bool = False
    auto_close_seconds: int | None = None
    silent: bool = False


class PlatformNotifier(ABC):
    """Capability to display system notifications to a supplier."""

    @property
    @abstractmethod
    def permission(self) -> str:
        """Current permission state (``granted``, ``denied`` or ``default``)."""

    @abstractmethod
    def show(self, notification: BrowserNotification) -> None:
        """Display ``notification``. Only called when permission is granted."""


class HeadlessPlatformNotifier(PlatformNotifier):
    """Notifier for environments without a display; keeps what it was asked to show."""

    def __init__(self, permission: str = PERMISSION_GRANTED) -> None:
        self._permission = permission
        self.shown: list[BrowserNotification] = []

    @property
    def permission(self) -> str:
        return self._permission

    def show(self, notification: BrowserNotification) -> None:
        self.shown.append(notification)


class BrowserPlatformNotifier(PlatformNotifier):
    """Forward notifications to the supplier's browser tabs over the websocket.

    The browser reports its Notification API permission; until it does the
    permission stays ``default`` and nothing is displayed.
    """

    def __init__(
        self,
        fournisseur_id: str,
        publisher: RealtimeEventPublisher,
    ) -> None:
        self._fournisseur_id = fournisseur_id
        self._publisher = publisher
        self._permission = PERMISSION_DEFAULT

    @property
    def permission(self) -> str:
        return self._permission

    def update_permission(self, permission: str) -> None:
        if permission not in PERMISSIONS:
            logger.debug("Ignoring unknown notification permission %r", permission)
            return
        self._permission = permission

    def show(self, notification: BrowserNotification) -> None:
        self._publisher.dispatch(
            self._fournisseur_id,
            event_type="browser-notification",
            payload=asdict(notification),
        )


__all__ = [
    "PERMISSIONS",
    "PERMISSION_DEFAULT",
    "PERMISSION_DENIED",
    "PERMISSION_GRANTED",
    "BrowserNotification",
    "BrowserPlatformNotifier",
    "HeadlessPlatformNotifier",
    "PlatformNotifier",
]
