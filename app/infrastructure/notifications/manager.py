"""Websocket connections of supplier dashboards, grouped by supplier."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket, status

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track the open dashboard sockets of every supplier.

    A supplier may have several tabs open; every message is fanned out to all
    of them and a socket that fails to receive is dropped from the pool.
    """

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, fournisseur_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections[fournisseur_id].add(websocket)
        logger.debug(
            "Supplier %s now has %d notification socket(s)",
            fournisseur_id,
            len(self._connections[fournisseur_id]),
        )

    def disconnect(self, fournisseur_id: str, websocket: WebSocket) -> None:
        connections = self._connections.get(fournisseur_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(fournisseur_id, None)

    def connection_count(self, fournisseur_id: str) -> int:
        return len(self._connections.get(fournisseur_id, ()))

    def connected_suppliers(self) -> list[str]:
        return sorted(self._connections)

    async def send_to_supplier(self, fournisseur_id: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every socket of ``fournisseur_id``.

        Returns the number of sockets that received it.
        """

        delivered = 0
        for connection in list(self._connections.get(fournisseur_id, ())):
            try:
                await connection.send_json(message)
            except Exception as exc:
                logger.warning(
                    "Dropping notification websocket for supplier %s: %s", fournisseur_id, exc
                )
                self.disconnect(fournisseur_id, connection)
            else:
                delivered += 1
        return delivered

    async def close_all(self, code: int = status.WS_1001_GOING_AWAY) -> int:
        """Close every registered socket, used when the application shuts down."""

        pools, self._connections = self._connections, defaultdict(set)
        closed = 0
        for fournisseur_id, connections in pools.items():
            for connection in connections:
                try:
                    await connection.close(code=code)
                except Exception as exc:
                    logger.debug(
                        "Notification websocket of supplier %s already closed: %s",
                        fournisseur_id,
                        exc,
                    )
                else:
                    closed += 1
        if closed:
            logger.info("Closed %d notification websocket(s)", closed)
        return closed


__all__ = ["NotificationConnectionManager"]
