"""Conversion between notification entities and JSON-friendly payloads."""

from __future__ import annotations

from dataclasses import asdict, fields
from datetime import datetime
from typing import Any, Mapping

from app.domain.entities import (
    NewOrderPayload,
    Notification,
    NotificationPayload,
    OrderItemSnapshot,
    OrderStatusPayload,
    PaymentPayload,
    ProductPayload,
    SystemPayload,
)

_PAYLOAD_TYPES: dict[str, type] = {
    NewOrderPayload.kind: NewOrderPayload,
    PaymentPayload.kind: PaymentPayload,
    OrderStatusPayload.kind: OrderStatusPayload,
    ProductPayload.kind: ProductPayload,
    SystemPayload.kind: SystemPayload,
}


def serialize_payload(payload: NotificationPayload | None) -> dict[str, Any] | None:
    """Return the tagged dictionary stored for ``payload``."""

    if payload is None:
        return None
    data = asdict(payload)
    data["kind"] = payload.kind
    _normalize_datetime_values(data)
    return data


def parse_payload(data: Mapping[str, Any] | None) -> NotificationPayload | None:
    """Rebuild the payload dataclass from its stored dictionary.

    Unknown tags and untagged dictionaries are kept as :class:`SystemPayload`
    so that no stored context is lost.
    """

    if not data:
        return None

    values = dict(data)
    kind = values.pop("kind", None)
    payload_type = _PAYLOAD_TYPES.get(kind) if isinstance(kind, str) else None
    if payload_type is None:
        return SystemPayload(extra=values)

    accepted = {item.name for item in fields(payload_type)}
    known = {key: value for key, value in values.items() if key in accepted}
    if payload_type is NewOrderPayload:
        known["items"] = [
            OrderItemSnapshot(**item) if isinstance(item, Mapping) else item
            for item in known.get("items") or []
        ]
    try:
        return payload_type(**known)
    except TypeError:
        return SystemPayload(extra=values)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the JSON representation pushed to API and websocket clients."""

    payload = {
        "id": notification.id,
        "fournisseur_id": notification.fournisseur_id,
        "fournisseur_name": notification.fournisseur_name,
        "type": notification.type,
        "sub_type": notification.sub_type,
        "title": notification.title,
        "message": notification.message,
        "priority": notification.priority,
        "order_id": notification.order_id,
        "product_id": notification.product_id,
        "customer_id": notification.customer_id,
        "campaign_id": notification.campaign_id,
        "is_read": notification.is_read,
        "read_at": notification.read_at,
        "is_archived": notification.is_archived,
        "archived_at": notification.archived_at,
        "clicked": notification.clicked,
        "clicked_at": notification.clicked_at,
        "action_taken": notification.action_taken,
        "action_taken_at": notification.action_taken_at,
        "email_sent": notification.email_sent,
        "email_sent_at": notification.email_sent_at,
        "sms_sent": notification.sms_sent,
        "sms_sent_at": notification.sms_sent_at,
        "data": serialize_payload(notification.data),
        "expires_at": notification.expires_at,
        "created_at": notification.created_at,
        "updated_at": notification.updated_at,
    }
    _normalize_datetime_values(payload)
    return payload


def _normalize_datetime_values(data: dict[str, Any] | list[Any]) -> None:
    """Convert ``datetime`` instances nested inside ``data`` into ISO strings."""

    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = value.isoformat()
            elif isinstance(value, (dict, list)):
                _normalize_datetime_values(value)
    elif isinstance(data, list):
        for index, item in enumerate(data):
            if isinstance(item, datetime):
                data[index] = item.isoformat()
            elif isinstance(item, (dict, list)):
                _normalize_datetime_values(item)


__all__ = ["parse_payload", "serialize_notification", "serialize_payload"]
