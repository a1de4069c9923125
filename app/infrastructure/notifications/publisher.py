"""Utility helpers to push realtime messages to websocket subscribers."""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any

from anyio import from_thread

from .manager import NotificationConnectionManager

logger = logging.getLogger(__name__)


class RealtimeEventPublisher:
    """Schedule structured messages for the websockets of a supplier.

    Works both from inside the event loop and from worker threads started by
    anyio (sync route handlers).
    """

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    def dispatch(self, fournisseur_id: str, *, event_type: str, payload: Any) -> None:
        """Schedule a realtime ``event_type`` message for ``fournisseur_id``."""

        if not fournisseur_id:
            return

        message = {"type": event_type, "data": copy.deepcopy(payload)}
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run(self._manager.send_to_supplier, fournisseur_id, message)
            except RuntimeError:
                logger.warning(
                    "No event loop available to deliver %s to supplier %s",
                    event_type,
                    fournisseur_id,
                )
        else:
            loop.create_task(self._manager.send_to_supplier(fournisseur_id, message))


__all__ = ["RealtimeEventPublisher"]
