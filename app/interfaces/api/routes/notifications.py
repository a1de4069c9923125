"""Endpoints and websocket handler for supplier notifications."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any

from anyio import to_thread
from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from app.application.use_cases.notifications import NotificationService
from app.domain.entities import SORT_KEYS, SORT_NEWEST, Notification, NotificationFilter
from app.infrastructure.notifications import serialize_notification
from app.infrastructure.repositories import NotificationNotFoundError, NotificationStoreError
from app.interfaces.api.dependencies import (
    ApplicationContainer,
    get_container,
    get_notification_service,
)
from app.interfaces.api.schemas import (
    BatchResult,
    CleanupRequest,
    NotificationIdsRequest,
    NotificationListResponse,
    NotificationOpenResponse,
    NotificationPreferencesRead,
    NotificationPreferencesUpdate,
    NotificationRead,
    NotificationStatsRead,
    UnreadCountRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/suppliers/{fournisseur_id}/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(serialize_notification(notification))


def _store_error_to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, NotificationNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, NotificationStoreError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification store unavailable",
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/", response_model=NotificationListResponse)
def list_notifications(
    fournisseur_id: str,
    type: str | None = Query(default=None),
    sub_type: str | None = Query(default=None),
    priority: str | None = Query(default=None),
    is_read: bool | None = Query(default=None),
    is_archived: bool | None = Query(default=None),
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
    search: str | None = Query(default=None),
    sort_by: str = Query(default=SORT_NEWEST),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    """Return one page of the supplier notifications."""

    if sort_by not in SORT_KEYS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"sort_by must be one of: {', '.join(SORT_KEYS)}",
        )
    criteria = NotificationFilter(
        type=type,
        sub_type=sub_type,
        priority=priority,
        is_read=is_read,
        is_archived=is_archived,
        date_from=date_from,
        date_to=date_to,
        search_term=search,
    )
    try:
        result = service.view(
            fournisseur_id, criteria, sort_by=sort_by, page=page, page_size=page_size
        )
    except NotificationStoreError as exc:
        raise _store_error_to_http(exc) from exc
    return NotificationListResponse(
        items=[_notification_to_schema(item) for item in result.notifications],
        page=page,
        page_size=page_size,
        has_more=result.has_more,
    )


@router.get("/stats", response_model=NotificationStatsRead)
def notification_stats(
    fournisseur_id: str,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationStatsRead:
    try:
        stats = service.stats(fournisseur_id)
    except NotificationStoreError as exc:
        raise _store_error_to_http(exc) from exc
    return NotificationStatsRead(**asdict(stats))


@router.get("/search", response_model=list[NotificationRead])
def search_notifications(
    fournisseur_id: str,
    q: str = Query(..., min_length=1),
    type: str | None = Query(default=None),
    service: NotificationService = Depends(get_notification_service),
) -> list[NotificationRead]:
    try:
        notifications = service.search(fournisseur_id, q, type=type)
    except NotificationStoreError as exc:
        raise _store_error_to_http(exc) from exc
    return [_notification_to_schema(item) for item in notifications]


@router.get("/unread-count", response_model=UnreadCountRead)
def unread_count(
    fournisseur_id: str,
    service: NotificationService = Depends(get_notification_service),
) -> UnreadCountRead:
    try:
        return UnreadCountRead(unread=service.unread_count(fournisseur_id))
    except NotificationStoreError as exc:
        raise _store_error_to_http(exc) from exc


@router.post("/read", response_model=BatchResult)
def mark_many_as_read(
    fournisseur_id: str,
    payload: NotificationIdsRequest,
    service: NotificationService = Depends(get_notification_service),
) -> BatchResult:
    """Mark a batch of notifications as read; nothing changes if one is missing."""

    try:
        updated = service.mark_many_as_read(fournisseur_id, payload.unique_ids())
    except (NotificationNotFoundError, NotificationStoreError) as exc:
        raise _store_error_to_http(exc) from exc
    return BatchResult(updated=updated)


@router.post("/read-all", response_model=BatchResult)
def mark_all_as_read(
    fournisseur_id: str,
    service: NotificationService = Depends(get_notification_service),
) -> BatchResult:
    try:
        updated = service.mark_all_as_read(fournisseur_id)
    except NotificationStoreError as exc:
        raise _store_error_to_http(exc) from exc
    return BatchResult(updated=updated)


@router.post("/archive", response_model=BatchResult)
def archive_many(
    fournisseur_id: str,
    payload: NotificationIdsRequest,
    service: NotificationService = Depends(get_notification_service),
) -> BatchResult:
    try:
        updated = service.archive_many(fournisseur_id, payload.unique_ids())
    except (NotificationNotFoundError, NotificationStoreError) as exc:
        raise _store_error_to_http(exc) from exc
    return BatchResult(updated=updated)


@router.post("/delete", response_model=BatchResult)
def delete_many(
    fournisseur_id: str,
    payload: NotificationIdsRequest,
    service: NotificationService = Depends(get_notification_service),
) -> BatchResult:
    try:
        deleted = service.delete_many(fournisseur_id, payload.unique_ids())
    except (NotificationNotFoundError, NotificationStoreError) as exc:
        raise _store_error_to_http(exc) from exc
    return BatchResult(updated=deleted)


@router.post("/cleanup", response_model=BatchResult)
def cleanup_notifications(
    fournisseur_id: str,
    payload: CleanupRequest | None = None,
    service: NotificationService = Depends(get_notification_service),
    container: ApplicationContainer = Depends(get_container),
) -> BatchResult:
    """Delete the supplier notifications older than the retention period."""

    days = (payload.days if payload else None) or container.settings.notification_retention_days
    try:
        deleted = service.cleanup(fournisseur_id, days)
    except NotificationStoreError as exc:
        raise _store_error_to_http(exc) from exc
    return BatchResult(updated=deleted)


@router.get("/preferences", response_model=NotificationPreferencesRead)
def get_preferences(
    fournisseur_id: str,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationPreferencesRead:
    try:
        preferences = service.preferences.get_or_create(fournisseur_id)
    except NotificationStoreError as exc:
        raise _store_error_to_http(exc) from exc
    return NotificationPreferencesRead(**asdict(preferences))


@router.put("/preferences", response_model=NotificationPreferencesRead)
def update_preferences(
    fournisseur_id: str,
    payload: NotificationPreferencesUpdate,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationPreferencesRead:
    changes = payload.model_dump(exclude_none=True)
    try:
        preferences = service.preferences.update(fournisseur_id, changes)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except NotificationStoreError as exc:
        raise _store_error_to_http(exc) from exc
    return NotificationPreferencesRead(**asdict(preferences))


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_as_read(
    fournisseur_id: str,
    notification_id: str,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationRead:
    try:
        notification = service.mark_as_read(fournisseur_id, notification_id)
    except (NotificationNotFoundError, NotificationStoreError) as exc:
        raise _store_error_to_http(exc) from exc
    return _notification_to_schema(notification)


@router.post("/{notification_id}/archive", response_model=NotificationRead)
def archive(
    fournisseur_id: str,
    notification_id: str,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationRead:
    try:
        notification = service.archive(fournisseur_id, notification_id)
    except (NotificationNotFoundError, NotificationStoreError) as exc:
        raise _store_error_to_http(exc) from exc
    return _notification_to_schema(notification)


@router.post("/{notification_id}/click", response_model=NotificationOpenResponse)
def open_notification(
    fournisseur_id: str,
    notification_id: str,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationOpenResponse:
    """Record the click, mark the notification read and return where to go."""

    try:
        notification, target = service.open_notification(fournisseur_id, notification_id)
    except (NotificationNotFoundError, NotificationStoreError) as exc:
        raise _store_error_to_http(exc) from exc
    return NotificationOpenResponse(
        notification=_notification_to_schema(notification), target=target
    )


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    fournisseur_id: str,
    notification_id: str,
    service: NotificationService = Depends(get_notification_service),
) -> None:
    try:
        service.delete(fournisseur_id, notification_id)
    except (NotificationNotFoundError, NotificationStoreError) as exc:
        raise _store_error_to_http(exc) from exc


def _acknowledge(container: ApplicationContainer, fournisseur_id: str, ids: list[str]) -> int:
    session = container.session_factory()
    try:
        service = NotificationService(session, change_feed=container.change_feed)
        return service.mark_many_as_read(fournisseur_id, ids)
    finally:
        session.close()


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket, fournisseur_id: str) -> None:
    """Websocket endpoint that streams notifications to a supplier dashboard."""

    container: ApplicationContainer = websocket.app.state.container
    await container.connections.connect(fournisseur_id, websocket)
    try:
        await to_thread.run_sync(container.streams.open, fournisseur_id)
    except Exception as exc:
        logger.error("Could not open notification stream for %s: %s", fournisseur_id, exc)
        container.connections.disconnect(fournisseur_id, websocket)
        await websocket.close(code=1011)
        return

    try:
        while True:
            try:
                message: Any = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except Exception:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    try:
                        await to_thread.run_sync(
                            _acknowledge, container, fournisseur_id, [str(i) for i in ids]
                        )
                    except (NotificationNotFoundError, NotificationStoreError) as exc:
                        await websocket.send_json({"type": "error", "data": {"detail": str(exc)}})
                continue

            if message_type == "permission":
                permission = message.get("permission")
                if isinstance(permission, str):
                    container.streams.update_permission(fournisseur_id, permission)
                continue
    except WebSocketDisconnect:
        pass
    finally:
        container.connections.disconnect(fournisseur_id, websocket)
        await to_thread.run_sync(container.streams.close, fournisseur_id)
