"""Per-supplier notification preferences."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, time

CHANNEL_EMAIL = "email"
CHANNEL_IN_APP = "in_app"
CHANNEL_SMS = "sms"

# Sub type of a notification mapped to the preference toggle that governs it.
SUB_TYPE_TOGGLES: dict[str, str] = {
    "new_order": "new_order_received",
    "status_changed": "order_status_changed",
    "order_cancelled": "order_cancelled",
    "order_modified": "order_modified",
    "payment_paid": "payment_received",
    "payment_failed": "payment_failed",
    "payment_pending": "payment_pending",
    "payment_refunded": "refund_processed",
    "low_inventory": "low_inventory_alert",
    "out_of_stock": "out_of_stock_alert",
    "restock_reminder": "restock_reminder",
    "review_received": "product_review_received",
    "performance_update": "product_performance_update",
    "verification_update": "account_verification_update",
    "profile_update_required": "profile_update_required",
    "campaign_update": "promotional_campaign_update",
    "sales_report_ready": "sales_report_ready",
    "maintenance": "system_maintenance",
    "policy_change": "policy_changes",
    "security_alert": "security_alerts",
}

_CHANNEL_TOGGLES = {
    CHANNEL_EMAIL: "email_notifications",
    CHANNEL_IN_APP: "in_app_notifications",
    CHANNEL_SMS: "sms_notifications",
}


@dataclass
class NotificationPreferences:
    """Toggles deciding which notifications a supplier receives and where."""

    fournisseur_id: str
    id: int | None = None

    new_order_received: bool = True
    order_status_changed: bool = True
    order_cancelled: bool = True
    order_modified: bool = True

    payment_received: bool = True
    payment_failed: bool = True
    payment_pending: bool = True
    refund_processed: bool = True

    low_inventory_alert: bool = True
    out_of_stock_alert: bool = True
    restock_reminder: bool = True

    product_review_received: bool = True
    product_performance_update: bool = True

    account_verification_update: bool = True
    profile_update_required: bool = True

    promotional_campaign_update: bool = True
    sales_report_ready: bool = True

    system_maintenance: bool = True
    policy_changes: bool = True
    security_alerts: bool = True

    email_notifications: bool = True
    in_app_notifications: bool = True
    sms_notifications: bool = False

    quiet_hours_enabled: bool = False
    quiet_hours_start: str = "22:00"
    quiet_hours_end: str = "08:00"

    instant_notifications: bool = True
    daily_digest: bool = False
    weekly_digest: bool = False

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def allows(self, sub_type: str, channel: str = CHANNEL_IN_APP) -> bool:
        """Return whether a notification of ``sub_type`` may use ``channel``.

        Sub types without a dedicated toggle are always allowed.
        """

        channel_toggle = _CHANNEL_TOGGLES.get(channel)
        if channel_toggle is None:
            raise ValueError(f"Unknown delivery channel: {channel}")
        if not getattr(self, channel_toggle):
            return False
        toggle = SUB_TYPE_TOGGLES.get(sub_type)
        if toggle is None:
            return True
        return bool(getattr(self, toggle))

    def in_quiet_hours(self, moment: datetime | time) -> bool:
        """Return whether ``moment`` falls inside the configured quiet window."""

        if not self.quiet_hours_enabled:
            return False
        current = moment.time() if isinstance(moment, datetime) else moment
        start = parse_clock(self.quiet_hours_start)
        end = parse_clock(self.quiet_hours_end)
        current = current.replace(second=0, microsecond=0, tzinfo=None)
        if start == end:
            return False
        if start < end:
            return start <= current < end
        # window wraps around midnight
        return current >= start or current < end


def parse_clock(value: str) -> time:
    """Parse a ``HH:MM`` string."""

    try:
        hours, minutes = value.split(":")
        return time(hour=int(hours), minute=int(minutes))
    except ValueError as exc:
        raise ValueError(f"Invalid time of day: {value!r}") from exc


def preference_toggle_names() -> list[str]:
    """Return the names of the editable preference fields."""

    excluded = {"fournisseur_id", "id", "created_at", "updated_at"}
    return [item.name for item in fields(NotificationPreferences) if item.name not in excluded]


__all__ = [
    "CHANNEL_EMAIL",
    "CHANNEL_IN_APP",
    "CHANNEL_SMS",
    "NotificationPreferences",
    "SUB_TYPE_TOGGLES",
    "parse_clock",
    "preference_toggle_names",
]
