"""Entry points called by the order-management subsystem on order events."""

from __future__ import annotations

import logging
from typing import Callable

from anyio import to_thread
from sqlalchemy.orm import Session

from app.domain.entities import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    Notification,
    NotificationPreferences,
    Order,
)
from app.infrastructure.notifications.change_feed import NotificationChangeFeed
from app.infrastructure.repositories import (
    NotificationPreferencesRepository,
    NotificationRepository,
)

from .factory import new_order_notification, order_status_transition, payment_transition
from .order_emails import OrderEmailDispatcher

logger = logging.getLogger(__name__)


class OrderEventHandler:
    """Turn order events into stored notifications and supplier emails.

    Each event is filtered through the supplier preferences: the in-app toggle
    decides whether a notification is stored, the email toggle whether the
    status email goes out.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        change_feed: NotificationChangeFeed,
        email_dispatcher: OrderEmailDispatcher | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._change_feed = change_feed
        self._email_dispatcher = email_dispatcher

    async def order_created(self, order: Order) -> Notification | None:
        notification = new_order_notification(order)
        return await self._handle(order, notification, send_email=True)

    async def payment_status_changed(
        self, order: Order, old_status: str, new_status: str
    ) -> Notification | None:
        notification = payment_transition(order, old_status, new_status)
        if notification is None:
            logger.debug(
                "Payment status %s of order %s does not produce a notification",
                new_status,
                order.id,
            )
            return None
        return await self._handle(order, notification, send_email=False)

    async def order_status_changed(
        self, order: Order, old_status: str, new_status: str
    ) -> Notification | None:
        notification = order_status_transition(order, old_status, new_status)
        return await self._handle(order, notification, send_email=True)

    async def _handle(
        self, order: Order, notification: Notification, *, send_email: bool
    ) -> Notification | None:
        preferences = await to_thread.run_sync(self._load_preferences, order.fournisseur_id)

        saved: Notification | None = None
        if preferences.allows(notification.sub_type, CHANNEL_IN_APP):
            saved = await to_thread.run_sync(self._persist, notification)
        else:
            logger.info(
                "Supplier %s disabled in-app %s notifications",
                order.fournisseur_id,
                notification.sub_type,
            )

        if (
            send_email
            and self._email_dispatcher is not None
            and preferences.allows(notification.sub_type, CHANNEL_EMAIL)
        ):
            sent = await self._email_dispatcher.send_order_notification(order)
            if sent and saved is not None and saved.id:
                saved = await to_thread.run_sync(self._record_email_sent, saved)
        return saved

    def _load_preferences(self, fournisseur_id: str) -> NotificationPreferences:
        session = self._session_factory()
        try:
            return NotificationPreferencesRepository(session).get_or_create(fournisseur_id)
        finally:
            session.close()

    def _persist(self, notification: Notification) -> Notification:
        session = self._session_factory()
        try:
            return NotificationRepository(session, change_feed=self._change_feed).create(
                notification
            )
        finally:
            session.close()

    def _record_email_sent(self, notification: Notification) -> Notification:
        session = self._session_factory()
        try:
            return NotificationRepository(session, change_feed=self._change_feed).mark_email_sent(
                notification.id, recipient_id=notification.fournisseur_id
            )
        finally:
            session.close()


__all__ = ["OrderEventHandler"]
