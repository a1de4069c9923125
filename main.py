import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.application.use_cases.notifications import NotificationService
from app.infrastructure.database import initialize_database
from app.interfaces.api.dependencies import ApplicationContainer, build_container
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables and the email client on startup, release resources on shutdown."""

    container: ApplicationContainer = app.state.container
    initialize_database(container.engine)
    session = container.session_factory()
    try:
        NotificationService(session, change_feed=container.change_feed).cleanup_expired()
    finally:
        session.close()
    if not container.email_dispatcher.initialize():
        logger.warning(
            "Order emails disabled: %s", container.email_dispatcher.config_status()
        )
    yield
    await container.connections.close_all()
    container.streams.close_all()
    container.engine.dispose()


def create_app(container: ApplicationContainer | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Supplier notifications", lifespan=lifespan)
    app.state.container = container or build_container()

    # Supplier dashboard served from the storefront origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
