"""Database configuration and session management."""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine backing the notification store.

    In-memory SQLite databases share a single connection so every session sees
    the same data.
    """

    if database_url.startswith("sqlite"):
        options: dict[str, object] = {
            "connect_args": {"check_same_thread": False},
        }
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return create_engine(database_url, **options)
    return create_engine(database_url, pool_pre_ping=True)


def build_session_factory(bind: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``bind``."""

    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


settings = get_settings()
engine = build_engine(settings.database_url)
SessionLocal = build_session_factory(engine)


def initialize_database(bind: Engine | None = None) -> None:
    """Ensure all ORM models have corresponding database tables."""

    from app.infrastructure import models  # noqa: F401  # ensure models are imported

    target = bind if bind is not None else engine
    Base.metadata.create_all(bind=target, checkfirst=True)
    logger.debug("Notification tables ready on %s", target.url)
