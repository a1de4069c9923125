from fastapi import FastAPI

from .notifications import router as notifications_router
from .order_events import router as order_events_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(notifications_router)
    app.include_router(order_events_router)
