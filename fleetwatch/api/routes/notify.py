"""Agent-raised alert endpoints and the pending-notification queue.

Agents call ``POST /alerts/notify`` to persist an alert; urgent alerts for
the default human target are also queued for the external dispatcher,
which reads and clears ``/alerts/notify/pending``.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
import structlog

from fleetwatch.alerts.config import AlertStoreConfig
from fleetwatch.alerts.notifications import NotificationQueue, should_notify
from fleetwatch.alerts.store import AlertPersistenceError, AlertStore
from fleetwatch.api.auth import verify_api_key
from fleetwatch.api.dependencies import get_alert_store, get_notification_queue, get_store_config
from fleetwatch.api.models import (
    AlertItem,
    ClearNotificationsResponse,
    ErrorResponse,
    NotifyRequest,
    NotifyResponse,
    PendingNotificationsResponse,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/alerts/notify",
    response_model=NotifyResponse,
    status_code=status.HTTP_201_CREATED,
    responses={500: {"model": ErrorResponse, "description": "Alert store write failed"}},
    summary="Raise an alert from an agent",
)
async def notify(
    body: NotifyRequest,
    api_key: str = Depends(verify_api_key),
    store: AlertStore = Depends(get_alert_store),
    queue: NotificationQueue = Depends(get_notification_queue),
    config: AlertStoreConfig = Depends(get_store_config),
) -> NotifyResponse:
    try:
        alert = await store.create_alert(
            agent=body.agent,
            message=body.message,
            priority=body.priority,
            details=body.details,
            task_id=body.task_id,
            task_title=body.task_title,
            target_agent=body.target_agent,
        )
    except AlertPersistenceError as e:
        logger.error("Failed to create alert", agent=body.agent, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create alert: {e}",
        )

    queued = False
    if should_notify(alert, config):
        queued = await queue.enqueue(alert)

    logger.info("Agent alert created", alert_id=alert.alert_id, priority=alert.priority, queued=queued)

    if alert.priority == "urgent":
        message = f"Alert created and queued for {config.notify_channel} dispatch"
        if not queued:
            message = "Alert created; notification was not queued"
    else:
        message = "Alert created"

    return NotifyResponse(
        alert=AlertItem.from_alert(alert),
        notification_queued=queued,
        message=message,
    )


@router.get(
    "/alerts/notify/pending",
    response_model=PendingNotificationsResponse,
    summary="List queued notifications",
)
async def list_pending(
    api_key: str = Depends(verify_api_key),
    queue: NotificationQueue = Depends(get_notification_queue),
) -> PendingNotificationsResponse:
    pending = await queue.pending()
    return PendingNotificationsResponse(pending=pending, count=len(pending))


@router.delete(
    "/alerts/notify/pending",
    response_model=ClearNotificationsResponse,
    responses={500: {"model": ErrorResponse, "description": "Queue write failed"}},
    summary="Clear dispatched notifications",
)
async def clear_pending(
    ids: str | None = Query(default=None, description="Comma-separated notification ids; omit to clear all"),
    api_key: str = Depends(verify_api_key),
    queue: NotificationQueue = Depends(get_notification_queue),
) -> ClearNotificationsResponse:
    wanted = [i.strip() for i in (ids or "").split(",") if i.strip()]
    try:
        cleared, remaining = await queue.clear(wanted or None)
    except OSError as e:
        logger.error("Failed to clear notifications", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to clear notifications: {e}",
        )
    return ClearNotificationsResponse(cleared=cleared, remaining=remaining)
