"""Push-messaging providers surfacing foreground messages as toasts."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

logger = logging.getLogger(__name__)

ForegroundHandler = Callable[[dict[str, Any]], None]


class PushMessagingProvider(ABC):
    """Source of push tokens and of messages received while the app is focused."""

    @abstractmethod
    def request_token(self) -> str | None:
        """Return a push token for this client, or ``None`` when unavailable."""

    @abstractmethod
    def on_foreground_message(self, handler: ForegroundHandler) -> Callable[[], None]:
        """Register ``handler`` and return a function removing it."""


class NullPushMessagingProvider(PushMessagingProvider):
    """Provider used when push messaging is not configured."""

    def request_token(self) -> str | None:
        return None

    def on_foreground_message(self, handler: ForegroundHandler) -> Callable[[], None]:
        return lambda: None


class LocalPushMessagingProvider(PushMessagingProvider):
    """In-process provider; :meth:`emit` plays the role of the push service."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token
        self._handlers: list[ForegroundHandler] = []

    def request_token(self) -> str | None:
        return self._token

    def on_foreground_message(self, handler: ForegroundHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def remove() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return remove

    def emit(self, payload: dict[str, Any]) -> None:
        for handler in list(self._handlers):
            try:
                handler(payload)
            except Exception:
                logger.exception("Foreground message handler failed")


__all__ = [
    "ForegroundHandler",
    "LocalPushMessagingProvider",
    "NullPushMessagingProvider",
    "PushMessagingProvider",
]
