"""Shared fixtures for the notification pipeline tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from app.domain.entities import DeliveryAddress, Notification, Order, OrderItem
from app.infrastructure.database import build_engine, build_session_factory, initialize_database
from app.infrastructure.notifications import NotificationChangeFeed

SUPPLIER_ID = "supplier-1"
OTHER_SUPPLIER_ID = "supplier-2"


class FakeClock:
    """Deterministic clock advancing by one second on every reading."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://")
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def change_feed() -> NotificationChangeFeed:
    return NotificationChangeFeed()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


def build_order(**overrides) -> Order:
    values = dict(
        id="order-0001-abcd1234",
        fournisseur_id=SUPPLIER_ID,
        fournisseur_name="Ferme du Val",
        user_id="customer-42",
        user_email="client@example.com",
        user_name="Test Customer",
        user_phone="+33 6 12 34 56 78",
        total=33.59,
        status="pending",
        payment_status="pending",
        payment_method="cash",
        delivery_address=DeliveryAddress(
            street="12 rue des Lilas",
            city="Lyon",
            postal_code="69001",
            country="France",
        ),
        items=[
            OrderItem(
                product_id="p-1",
                product_name="Tomates",
                quantity=2,
                unit_price=3.5,
                total_price=7.0,
                unit="kg",
            ),
            OrderItem(
                product_id="p-2",
                product_name="Miel",
                quantity=1,
                unit_price=26.59,
                total_price=26.59,
                unit="pot",
            ),
        ],
    )
    values.update(overrides)
    return Order(**values)


@pytest.fixture()
def make_order() -> Callable[..., Order]:
    return build_order


def build_notification(**overrides) -> Notification:
    values = dict(
        id=None,
        fournisseur_id=SUPPLIER_ID,
        type="system",
        title="Maintenance planned",
        message="The dashboard will be unavailable tonight",
        priority="medium",
    )
    values.update(overrides)
    return Notification(**values)


@pytest.fixture()
def make_notification() -> Callable[..., Notification]:
    return build_notification
