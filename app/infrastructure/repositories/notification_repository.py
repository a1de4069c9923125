"""Persistence helpers for supplier notifications."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Iterable
from uuid import uuid4

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.domain.entities import Notification, NotificationFilter, NotificationPage
from app.infrastructure.models import NotificationModel
from app.infrastructure.notifications.change_feed import NotificationChangeFeed
from app.infrastructure.notifications.serialization import parse_payload, serialize_payload
from app.utils import ensure_utc, to_storage_datetime, utc_now

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


class NotificationStoreError(RuntimeError):
    """Raised when the notification store cannot complete an operation."""


class NotificationNotFoundError(LookupError):
    """Raised when a notification id does not exist in the expected partition."""

    def __init__(self, notification_ids: Iterable[str]) -> None:
        self.notification_ids = sorted(notification_ids)
        super().__init__(f"Notification(s) not found: {', '.join(self.notification_ids)}")


class NotificationRepository:
    """Read and write :class:`Notification` records partitioned by supplier."""

    def __init__(
        self,
        session: Session,
        *,
        change_feed: NotificationChangeFeed | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.session = session
        self._change_feed = change_feed
        self._clock = clock

    # -- creation -----------------------------------------------------------------

    def create(self, notification: Notification) -> Notification:
        with self._store_operation("create notification"):
            model = self._new_model(notification)
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        self._publish([model.fournisseur_id])
        return self._to_entity(model)

    def create_many(self, notifications: Sequence[Notification]) -> list[str]:
        """Insert ``notifications`` in a single transaction and return their ids."""

        if not notifications:
            return []
        with self._store_operation("create notifications"):
            models = [self._new_model(notification) for notification in notifications]
            self.session.add_all(models)
            self.session.commit()
        self._publish(model.fournisseur_id for model in models)
        return [model.id for model in models]

    # -- reads --------------------------------------------------------------------

    def get(self, notification_id: str, *, recipient_id: str | None = None) -> Notification | None:
        with self._store_operation("get notification"):
            model = self._get_model(notification_id, recipient_id)
        return self._to_entity(model) if model is not None else None

    def list_for_recipient(
        self,
        recipient_id: str,
        *,
        limit: int | None = DEFAULT_PAGE_SIZE,
        cursor: str | None = None,
    ) -> list[Notification]:
        """Return the newest notifications of ``recipient_id``.

        ``cursor`` is the id of the last notification of the previous page;
        results continue strictly after it in (created_at, id) descending order.
        """

        with self._store_operation("list notifications"):
            query = self._partition(recipient_id)
            if cursor is not None:
                anchor = self._get_model(cursor, recipient_id)
                if anchor is None:
                    raise NotificationNotFoundError([cursor])
                query = query.filter(
                    or_(
                        NotificationModel.created_at < anchor.created_at,
                        and_(
                            NotificationModel.created_at == anchor.created_at,
                            NotificationModel.id < anchor.id,
                        ),
                    )
                )
            query = self._newest_first(query)
            if limit is not None:
                query = query.limit(limit)
            models = query.all()
        return [self._to_entity(model) for model in models]

    def list_all_for_recipient(self, recipient_id: str) -> list[Notification]:
        return self.list_for_recipient(recipient_id, limit=None)

    def query(
        self,
        recipient_id: str,
        notification_filter: NotificationFilter | None = None,
        *,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> NotificationPage:
        """Return a filtered page of notifications and whether more exist."""

        criteria = notification_filter or NotificationFilter()
        with self._store_operation("query notifications"):
            query = self._newest_first(self._apply_filter(self._partition(recipient_id), criteria))
            if criteria.search_term:
                # substring matching happens after the partition has been fetched
                matches = [
                    model
                    for model in query.all()
                    if _matches_term(model.title, model.message, criteria.search_term)
                ]
                window = matches[offset : offset + limit + 1]
            else:
                window = query.offset(offset).limit(limit + 1).all()
        has_more = len(window) > limit
        return NotificationPage(
            notifications=[self._to_entity(model) for model in window[:limit]],
            has_more=has_more,
        )

    def search(
        self, recipient_id: str, term: str, *, type: str | None = None
    ) -> list[Notification]:
        """Case-insensitive substring search over title and message."""

        with self._store_operation("search notifications"):
            query = self._partition(recipient_id)
            if type and type != "all":
                query = query.filter(NotificationModel.type == type)
            models = self._newest_first(query).all()
        if term:
            models = [model for model in models if _matches_term(model.title, model.message, term)]
        return [self._to_entity(model) for model in models]

    def count_unread(self, recipient_id: str) -> int:
        with self._store_operation("count unread notifications"):
            return (
                self._partition(recipient_id)
                .filter(NotificationModel.is_read.is_(False))
                .count()
            )

    # -- lifecycle transitions ----------------------------------------------------

    def mark_as_read(self, notification_id: str, *, recipient_id: str | None = None) -> Notification:
        self.mark_many_as_read([notification_id], recipient_id=recipient_id)
        return self._require(notification_id, recipient_id)

    def mark_many_as_read(
        self, notification_ids: Iterable[str], *, recipient_id: str | None = None
    ) -> int:
        """Mark every id as read in one transaction.

        Unknown ids abort the whole batch. Returns how many notifications were
        previously unread.
        """

        return self._transition_many(
            notification_ids,
            recipient_id,
            "mark notifications as read",
            lambda model, now: _set_once(model, "is_read", "read_at", now),
        )

    def mark_all_as_read(self, recipient_id: str) -> int:
        with self._store_operation("mark all notifications as read"):
            now = to_storage_datetime(self._clock())
            models = (
                self._partition(recipient_id)
                .filter(NotificationModel.is_read.is_(False))
                .all()
            )
            for model in models:
                _set_once(model, "is_read", "read_at", now)
            self.session.commit()
        if models:
            self._publish([recipient_id])
        return len(models)

    def archive(self, notification_id: str, *, recipient_id: str | None = None) -> Notification:
        self.archive_many([notification_id], recipient_id=recipient_id)
        return self._require(notification_id, recipient_id)

    def archive_many(
        self, notification_ids: Iterable[str], *, recipient_id: str | None = None
    ) -> int:
        return self._transition_many(
            notification_ids,
            recipient_id,
            "archive notifications",
            lambda model, now: _set_once(model, "is_archived", "archived_at", now),
        )

    def mark_as_clicked(self, notification_id: str, *, recipient_id: str | None = None) -> Notification:
        return self._record_once(notification_id, recipient_id, "clicked", "clicked_at")

    def mark_action_taken(
        self, notification_id: str, *, recipient_id: str | None = None
    ) -> Notification:
        return self._record_once(notification_id, recipient_id, "action_taken", "action_taken_at")

    def mark_email_sent(self, notification_id: str, *, recipient_id: str | None = None) -> Notification:
        return self._record_once(notification_id, recipient_id, "email_sent", "email_sent_at")

    def mark_sms_sent(self, notification_id: str, *, recipient_id: str | None = None) -> Notification:
        return self._record_once(notification_id, recipient_id, "sms_sent", "sms_sent_at")

    # -- deletion -----------------------------------------------------------------

    def delete(self, notification_id: str, *, recipient_id: str | None = None) -> Notification:
        """Permanently remove a notification and return its last state."""

        existing = self._require(notification_id, recipient_id)
        self.delete_many([notification_id], recipient_id=recipient_id)
        return existing

    def delete_many(
        self, notification_ids: Iterable[str], *, recipient_id: str | None = None
    ) -> int:
        ids = _unique(notification_ids)
        if not ids:
            return 0
        with self._store_operation("delete notifications"):
            models = self._load_batch(ids, recipient_id)
            for model in models:
                self.session.delete(model)
            self.session.commit()
        self._publish(model.fournisseur_id for model in models)
        return len(models)

    def cleanup_older_than(self, recipient_id: str, days: int = 30) -> int:
        """Delete the notifications of ``recipient_id`` older than ``days``."""

        cutoff = to_storage_datetime(self._clock() - timedelta(days=days))
        with self._store_operation("clean up notifications"):
            deleted = (
                self._partition(recipient_id)
                .filter(NotificationModel.created_at < cutoff)
                .delete(synchronize_session=False)
            )
            self.session.commit()
        if deleted:
            self._publish([recipient_id])
        return deleted

    def cleanup_expired(self, now: datetime | None = None) -> int:
        """Delete every notification whose ``expires_at`` has passed."""

        moment = to_storage_datetime(now or self._clock())
        with self._store_operation("clean up expired notifications"):
            query = self.session.query(NotificationModel).filter(
                NotificationModel.expires_at.is_not(None),
                NotificationModel.expires_at <= moment,
            )
            recipients = {model.fournisseur_id for model in query.all()}
            deleted = query.delete(synchronize_session=False)
            self.session.commit()
        self._publish(recipients)
        return deleted

    # -- helpers ------------------------------------------------------------------

    @contextmanager
    def _store_operation(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Notification store failed to %s: %s", action, exc)
            raise NotificationStoreError(f"Failed to {action}") from exc

    def _transition_many(
        self,
        notification_ids: Iterable[str],
        recipient_id: str | None,
        action: str,
        apply: Callable[[NotificationModel, datetime], bool],
    ) -> int:
        ids = _unique(notification_ids)
        if not ids:
            return 0
        with self._store_operation(action):
            now = to_storage_datetime(self._clock())
            models = self._load_batch(ids, recipient_id)
            changed = [model for model in models if apply(model, now)]
            self.session.commit()
        self._publish(model.fournisseur_id for model in changed)
        return len(changed)

    def _record_once(
        self, notification_id: str, recipient_id: str | None, flag: str, timestamp: str
    ) -> Notification:
        with self._store_operation(f"record {flag}"):
            model = self._get_model(notification_id, recipient_id)
            if model is None:
                raise NotificationNotFoundError([notification_id])
            changed = _set_once(model, flag, timestamp, to_storage_datetime(self._clock()))
            self.session.commit()
        if changed:
            self._publish([model.fournisseur_id])
        return self._to_entity(model)

    def _load_batch(self, ids: list[str], recipient_id: str | None) -> list[NotificationModel]:
        query = self.session.query(NotificationModel).filter(NotificationModel.id.in_(ids))
        if recipient_id is not None:
            query = query.filter(NotificationModel.fournisseur_id == recipient_id)
        models = query.all()
        missing = set(ids) - {model.id for model in models}
        if missing:
            raise NotificationNotFoundError(missing)
        return models

    def _require(self, notification_id: str, recipient_id: str | None) -> Notification:
        notification = self.get(notification_id, recipient_id=recipient_id)
        if notification is None:
            raise NotificationNotFoundError([notification_id])
        return notification

    def _get_model(
        self, notification_id: str, recipient_id: str | None
    ) -> NotificationModel | None:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        if recipient_id is not None and model.fournisseur_id != recipient_id:
            return None
        return model

    def _partition(self, recipient_id: str) -> Query:
        return self.session.query(NotificationModel).filter(
            NotificationModel.fournisseur_id == recipient_id
        )

    @staticmethod
    def _newest_first(query: Query) -> Query:
        return query.order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())

    @staticmethod
    def _apply_filter(query: Query, criteria: NotificationFilter) -> Query:
        if criteria.type and criteria.type != "all":
            query = query.filter(NotificationModel.type == criteria.type)
        if criteria.sub_type:
            query = query.filter(NotificationModel.sub_type == criteria.sub_type)
        if criteria.priority and criteria.priority != "all":
            query = query.filter(NotificationModel.priority == criteria.priority)
        if criteria.is_read is not None:
            query = query.filter(NotificationModel.is_read.is_(criteria.is_read))
        if criteria.is_archived is not None:
            query = query.filter(NotificationModel.is_archived.is_(criteria.is_archived))
        if criteria.date_from is not None:
            query = query.filter(
                NotificationModel.created_at >= to_storage_datetime(criteria.date_from)
            )
        if criteria.date_to is not None:
            query = query.filter(
                NotificationModel.created_at <= to_storage_datetime(criteria.date_to)
            )
        return query

    def _publish(self, recipient_ids: Iterable[str]) -> None:
        if self._change_feed is None:
            return
        self._change_feed.publish(list(recipient_ids))

    def _new_model(self, notification: Notification) -> NotificationModel:
        now = to_storage_datetime(self._clock())
        model = NotificationModel(id=uuid4().hex, created_at=now, updated_at=now)
        model.fournisseur_id = notification.fournisseur_id
        model.fournisseur_name = notification.fournisseur_name
        model.type = notification.type
        model.sub_type = notification.sub_type or ""
        model.title = notification.title
        model.message = notification.message
        model.priority = notification.priority
        model.order_id = notification.order_id
        model.product_id = notification.product_id
        model.customer_id = notification.customer_id
        model.campaign_id = notification.campaign_id
        model.is_read = notification.is_read
        model.read_at = to_storage_datetime(notification.read_at)
        model.is_archived = notification.is_archived
        model.archived_at = to_storage_datetime(notification.archived_at)
        model.clicked = notification.clicked
        model.clicked_at = to_storage_datetime(notification.clicked_at)
        model.action_taken = notification.action_taken
        model.action_taken_at = to_storage_datetime(notification.action_taken_at)
        model.email_sent = notification.email_sent
        model.email_sent_at = to_storage_datetime(notification.email_sent_at)
        model.sms_sent = notification.sms_sent
        model.sms_sent_at = to_storage_datetime(notification.sms_sent_at)
        model.data = serialize_payload(notification.data)
        model.expires_at = to_storage_datetime(notification.expires_at)
        return model

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            fournisseur_id=model.fournisseur_id,
            fournisseur_name=model.fournisseur_name,
            type=model.type,
            sub_type=model.sub_type or "",
            title=model.title,
            message=model.message,
            priority=model.priority,
            order_id=model.order_id,
            product_id=model.product_id,
            customer_id=model.customer_id,
            campaign_id=model.campaign_id,
            is_read=bool(model.is_read),
            read_at=ensure_utc(model.read_at),
            is_archived=bool(model.is_archived),
            archived_at=ensure_utc(model.archived_at),
            clicked=bool(model.clicked),
            clicked_at=ensure_utc(model.clicked_at),
            action_taken=bool(model.action_taken),
            action_taken_at=ensure_utc(model.action_taken_at),
            email_sent=bool(model.email_sent),
            email_sent_at=ensure_utc(model.email_sent_at),
            sms_sent=bool(model.sms_sent),
            sms_sent_at=ensure_utc(model.sms_sent_at),
            data=parse_payload(model.data),
            expires_at=ensure_utc(model.expires_at),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )


def _set_once(model: NotificationModel, flag: str, timestamp: str, now: datetime) -> bool:
    """Raise ``flag`` and stamp ``timestamp`` unless it is already set."""

    if getattr(model, flag):
        return False
    setattr(model, flag, True)
    setattr(model, timestamp, now)
    model.updated_at = now
    return True


def _matches_term(title: str, message: str, term: str) -> bool:
    needle = term.lower()
    return needle in (title or "").lower() or needle in (message or "").lower()


def _unique(notification_ids: Iterable[str]) -> list[str]:
    unique: list[str] = []
    seen: set[str] = set()
    for notification_id in notification_ids:
        if not notification_id or notification_id in seen:
            continue
        seen.add(notification_id)
        unique.append(notification_id)
    return unique


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "NotificationNotFoundError",
    "NotificationRepository",
    "NotificationStoreError",
]
