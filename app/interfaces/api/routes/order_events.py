"""Endpoints receiving order events from the order-management subsystem."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.application.use_cases.notifications import OrderEventHandler
from app.domain.entities import Notification
from app.infrastructure.repositories import NotificationStoreError
from app.interfaces.api.dependencies import get_order_event_handler
from app.interfaces.api.schemas import OrderEventResponse, OrderPayload, StatusTransitionRequest

router = APIRouter(prefix="/order-events", tags=["order-events"])


def _to_response(notification: Notification | None) -> OrderEventResponse:
    if notification is None:
        return OrderEventResponse(notification_id=None, created=False)
    return OrderEventResponse(notification_id=notification.id, created=True)


def _unavailable(exc: NotificationStoreError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Notification store unavailable",
    )


@router.post("/created", response_model=OrderEventResponse, status_code=status.HTTP_202_ACCEPTED)
async def order_created(
    payload: OrderPayload,
    handler: OrderEventHandler = Depends(get_order_event_handler),
) -> OrderEventResponse:
    """Notify the supplier about a new order."""

    try:
        notification = await handler.order_created(payload.to_entity())
    except NotificationStoreError as exc:
        raise _unavailable(exc) from exc
    return _to_response(notification)


@router.post(
    "/payment-status", response_model=OrderEventResponse, status_code=status.HTTP_202_ACCEPTED
)
async def payment_status_changed(
    payload: StatusTransitionRequest,
    handler: OrderEventHandler = Depends(get_order_event_handler),
) -> OrderEventResponse:
    """Notify the supplier about a payment status transition.

    Transitions without a dedicated message are accepted but produce nothing.
    """

    try:
        notification = await handler.payment_status_changed(
            payload.order.to_entity(), payload.old_status, payload.new_status
        )
    except NotificationStoreError as exc:
        raise _unavailable(exc) from exc
    return _to_response(notification)


@router.post("/status", response_model=OrderEventResponse, status_code=status.HTTP_202_ACCEPTED)
async def order_status_changed(
    payload: StatusTransitionRequest,
    handler: OrderEventHandler = Depends(get_order_event_handler),
) -> OrderEventResponse:
    try:
        notification = await handler.order_status_changed(
            payload.order.to_entity(), payload.old_status, payload.new_status
        )
    except NotificationStoreError as exc:
        raise _unavailable(exc) from exc
    return _to_response(notification)
