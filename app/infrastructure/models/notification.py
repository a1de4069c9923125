"""SQLAlchemy model for persisted supplier notifications."""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Index, JSON, String, Text
from sqlalchemy.sql import expression

from app.infrastructure.database import Base


def _new_notification_id() -> str:
    return uuid4().hex


class NotificationModel(Base):
    """Database representation of the ``notifications`` collection."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_recipient_created", "fournisseur_id", "created_at", "id"),
        Index("ix_notifications_recipient_unread", "fournisseur_id", "is_read"),
    )

    id = Column(String(32), primary_key=True, default=_new_notification_id)
    fournisseur_id = Column(String(64), nullable=False, index=True)
    fournisseur_name = Column(String(120), nullable=True)
    type = Column(String(20), nullable=False)
    sub_type = Column(String(50), nullable=False, default="")
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String(10), nullable=False)

    order_id = Column(String(64), nullable=True)
    product_id = Column(String(64), nullable=True)
    customer_id = Column(String(64), nullable=True)
    campaign_id = Column(String(64), nullable=True)

    is_read = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    read_at = Column(DateTime(), nullable=True)
    is_archived = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    archived_at = Column(DateTime(), nullable=True)

    clicked = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    clicked_at = Column(DateTime(), nullable=True)
    action_taken = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    action_taken_at = Column(DateTime(), nullable=True)
    email_sent = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    email_sent_at = Column(DateTime(), nullable=True)
    sms_sent = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    sms_sent_at = Column(DateTime(), nullable=True)

    data = Column(JSON, nullable=True)
    expires_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False)
    updated_at = Column(DateTime(), nullable=False)


__all__ = ["NotificationModel"]
