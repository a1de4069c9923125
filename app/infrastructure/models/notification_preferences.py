"""SQLAlchemy model for supplier notification preferences."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from app.infrastructure.database import Base


class NotificationPreferencesModel(Base):
    """One row of delivery preferences per supplier."""

    __tablename__ = "notification_preferences"

    id = Column(Integer, primary_key=True, index=True)
    fournisseur_id = Column(String(64), nullable=False, unique=True, index=True)

    new_order_received = Column(Boolean, nullable=False, default=True)
    order_status_changed = Column(Boolean, nullable=False, default=True)
    order_cancelled = Column(Boolean, nullable=False, default=True)
    order_modified = Column(Boolean, nullable=False, default=True)

    payment_received = Column(Boolean, nullable=False, default=True)
    payment_failed = Column(Boolean, nullable=False, default=True)
    payment_pending = Column(Boolean, nullable=False, default=True)
    refund_processed = Column(Boolean, nullable=False, default=True)

    low_inventory_alert = Column(Boolean, nullable=False, default=True)
    out_of_stock_alert = Column(Boolean, nullable=False, default=True)
    restock_reminder = Column(Boolean, nullable=False, default=True)

    product_review_received = Column(Boolean, nullable=False, default=True)
    product_performance_update = Column(Boolean, nullable=False, default=True)

    account_verification_update = Column(Boolean, nullable=False, default=True)
    profile_update_required = Column(Boolean, nullable=False, default=True)

    promotional_campaign_update = Column(Boolean, nullable=False, default=True)
    sales_report_ready = Column(Boolean, nullable=False, default=True)

    system_maintenance = Column(Boolean, nullable=False, default=True)
    policy_changes = Column(Boolean, nullable=False, default=True)
    security_alerts = Column(Boolean, nullable=False, default=True)

    email_notifications = Column(Boolean, nullable=False, default=True)
    in_app_notifications = Column(Boolean, nullable=False, default=True)
    sms_notifications = Column(Boolean, nullable=False, default=False)

    quiet_hours_enabled = Column(Boolean, nullable=False, default=False)
    quiet_hours_start = Column(String(5), nullable=False, default="22:00")
    quiet_hours_end = Column(String(5), nullable=False, default="08:00")

    instant_notifications = Column(Boolean, nullable=False, default=True)
    daily_digest = Column(Boolean, nullable=False, default=False)
    weekly_digest = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(), nullable=False)
    updated_at = Column(DateTime(), nullable=False)


__all__ = ["NotificationPreferencesModel"]
