"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class NotificationIdsRequest(BaseModel):
    """Payload used to apply an action to a batch of notifications."""

    ids: list[str] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[str]:
        """Return the list of identifiers without duplicates preserving order."""

        unique: list[str] = []
        seen: set[str] = set()
        for notification_id in self.ids:
            if notification_id in seen:
                continue
            seen.add(notification_id)
            unique.append(notification_id)
        return unique


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    fournisseur_id: str
    fournisseur_name: str | None = None
    type: str
    sub_type: str = ""
    title: str
    message: str
    priority: str
    order_id: str | None = None
    product_id: str | None = None
    customer_id: str | None = None
    campaign_id: str | None = None
    is_read: bool
    read_at: datetime | None = None
    is_archived: bool
    archived_at: datetime | None = None
    clicked: bool
    clicked_at: datetime | None = None
    action_taken: bool
    action_taken_at: datetime | None = None
    email_sent: bool
    email_sent_at: datetime | None = None
    sms_sent: bool
    sms_sent_at: datetime | None = None
    data: dict[str, Any] | None = None
    expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None


class NotificationListResponse(BaseModel):
    items: list[NotificationRead]
    page: int
    page_size: int
    has_more: bool


class NotificationStatsRead(BaseModel):
    total: int
    unread: int
    archived: int
    by_type: dict[str, int] = Field(default_factory=dict)
    by_priority: dict[str, int] = Field(default_factory=dict)
    recent: int
    this_week: int
    this_month: int
    click_through_rate: float
    average_read_time: float


class UnreadCountRead(BaseModel):
    unread: int


class BatchResult(BaseModel):
    """Number of notifications changed by a batch action."""

    updated: int


class NotificationOpenResponse(BaseModel):
    notification: NotificationRead
    target: str


class CleanupRequest(BaseModel):
    days: int | None = Field(default=None, gt=0, description="Age threshold in days")


class NotificationPreferencesRead(BaseModel):
    fournisseur_id: str

    new_order_received: bool
    order_status_changed: bool
    order_cancelled: bool
    order_modified: bool

    payment_received: bool
    payment_failed: bool
    payment_pending: bool
    refund_processed: bool

    low_inventory_alert: bool
    out_of_stock_alert: bool
    restock_reminder: bool

    product_review_received: bool
    product_performance_update: bool

    account_verification_update: bool
    profile_update_required: bool

    promotional_campaign_update: bool
    sales_report_ready: bool

    system_maintenance: bool
    policy_changes: bool
    security_alerts: bool

    email_notifications: bool
    in_app_notifications: bool
    sms_notifications: bool

    quiet_hours_enabled: bool
    quiet_hours_start: str
    quiet_hours_end: str

    instant_notifications: bool
    daily_digest: bool
    weekly_digest: bool

    created_at: datetime | None = None
    updated_at: datetime | None = None


class NotificationPreferencesUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    new_order_received: bool | None = None
    order_status_changed: bool | None = None
    order_cancelled: bool | None = None
    order_modified: bool | None = None

    payment_received: bool | None = None
    payment_failed: bool | None = None
    payment_pending: bool | None = None
    refund_processed: bool | None = None

    low_inventory_alert: bool | None = None
    out_of_stock_alert: bool | None = None
    restock_reminder: bool | None = None

    product_review_received: bool | None = None
    product_performance_update: bool | None = None

    account_verification_update: bool | None = None
    profile_update_required: bool | None = None

    promotional_campaign_update: bool | None = None
    sales_report_ready: bool | None = None

    system_maintenance: bool | None = None
    policy_changes: bool | None = None
    security_alerts: bool | None = None

    email_notifications: bool | None = None
    in_app_notifications: bool | None = None
    sms_notifications: bool | None = None

    quiet_hours_enabled: bool | None = None
    quiet_hours_start: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    quiet_hours_end: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")

    instant_notifications: bool | None = None
    daily_digest: bool | None = None
    weekly_digest: bool | None = None


__all__ = [
    "BatchResult",
    "CleanupRequest",
    "NotificationIdsRequest",
    "NotificationListResponse",
    "NotificationOpenResponse",
    "NotificationPreferencesRead",
    "NotificationPreferencesUpdate",
    "NotificationRead",
    "NotificationStatsRead",
    "UnreadCountRead",
]
