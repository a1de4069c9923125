"""FastAPI dependency utilities and the application container."""

from __future__ import annotations

from collections.abc import Callable, Generator
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.application.use_cases.notifications import (
    EmailDispatcherConfig,
    NotificationService,
    NotificationSubscriptionManager,
    OrderEmailDispatcher,
    OrderEventHandler,
    SupplierNotificationStreams,
)
from app.config import Settings, get_settings
from app.infrastructure import database
from app.infrastructure.email import SendGridEmailClient
from app.infrastructure.notifications import (
    NotificationChangeFeed,
    NotificationConnectionManager,
    RealtimeEventPublisher,
)


@dataclass
class ApplicationContainer:
    """Long-lived collaborators shared by every request of an application."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    change_feed: NotificationChangeFeed
    connections: NotificationConnectionManager
    publisher: RealtimeEventPublisher
    subscriptions: NotificationSubscriptionManager
    streams: SupplierNotificationStreams
    email_dispatcher: OrderEmailDispatcher
    order_events: OrderEventHandler


def build_container(
    settings: Settings | None = None,
    *,
    engine: Engine | None = None,
    email_client_factory: Callable[[str, str], SendGridEmailClient] = SendGridEmailClient,
) -> ApplicationContainer:
    """Wire the notification pipeline around ``engine``.

    Without an explicit engine the module level one configured from
    ``DATABASE_URL`` is used.
    """

    settings = settings or get_settings()
    if engine is None:
        engine = database.engine
        session_factory = database.SessionLocal
    else:
        session_factory = database.build_session_factory(engine)

    change_feed = NotificationChangeFeed()
    connections = NotificationConnectionManager()
    publisher = RealtimeEventPublisher(connections)
    subscriptions = NotificationSubscriptionManager(
        session_factory, change_feed, window=settings.realtime_window
    )
    streams = SupplierNotificationStreams(
        subscriptions,
        publisher,
        window_seconds=settings.new_notification_window_seconds,
    )
    email_dispatcher = OrderEmailDispatcher(
        EmailDispatcherConfig.from_settings(settings),
        client_factory=email_client_factory,
    )
    order_events = OrderEventHandler(session_factory, change_feed, email_dispatcher)
    return ApplicationContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        change_feed=change_feed,
        connections=connections,
        publisher=publisher,
        subscriptions=subscriptions,
        streams=streams,
        email_dispatcher=email_dispatcher,
        order_events=order_events,
    )


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def get_session(
    container: ApplicationContainer = Depends(get_container),
) -> Generator[Session, None, None]:
    """Yield a database session and close it afterwards."""

    session = container.session_factory()
    try:
        yield session
    finally:
        session.close()


def get_notification_service(
    session: Session = Depends(get_session),
    container: ApplicationContainer = Depends(get_container),
) -> NotificationService:
    return NotificationService(session, change_feed=container.change_feed)


def get_order_event_handler(
    container: ApplicationContainer = Depends(get_container),
) -> OrderEventHandler:
    return container.order_events


__all__ = [
    "ApplicationContainer",
    "build_container",
    "get_container",
    "get_notification_service",
    "get_order_event_handler",
    "get_session",
]
