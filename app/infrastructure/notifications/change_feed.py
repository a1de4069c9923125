"""In-process change feed for the notification store."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, DefaultDict, Iterable

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str], None]


class NotificationChangeFeed:
    """Tell listeners which supplier partitions changed after a commit.

    Listeners receive only the recipient id; they are expected to re-read the
    partition they care about, which gives them the full current result set
    instead of a diff.
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, list[ChangeListener]] = defaultdict(list)

    def listen(self, recipient_id: str, listener: ChangeListener) -> Callable[[], None]:
        """Register ``listener`` for ``recipient_id`` and return its remover."""

        self._listeners[recipient_id].append(listener)

        def remove() -> None:
            listeners = self._listeners.get(recipient_id)
            if not listeners:
                return
            try:
                listeners.remove(listener)
            except ValueError:
                return
            if not listeners:
                self._listeners.pop(recipient_id, None)

        return remove

    def listener_count(self, recipient_id: str) -> int:
        return len(self._listeners.get(recipient_id, ()))

    def publish(self, recipient_ids: Iterable[str | None]) -> None:
        """Notify the listeners of every partition in ``recipient_ids``."""

        seen: set[str] = set()
        for recipient_id in recipient_ids:
            if not recipient_id or recipient_id in seen:
                continue
            seen.add(recipient_id)
            for listener in list(self._listeners.get(recipient_id, ())):
                try:
                    listener(recipient_id)
                except Exception:
                    logger.exception(
                        "Notification change listener failed for supplier %s", recipient_id
                    )


__all__ = ["ChangeListener", "NotificationChangeFeed"]
