"""Alert endpoints: ranked list, persisted lookup, resolve/update, delete/dismiss."""

import time

from fastapi import APIRouter, Depends, HTTPException, Query, status
import structlog

from fleetwatch.alerts.schemas import to_epoch_ms
from fleetwatch.alerts.service import AlertMonitor
from fleetwatch.alerts.store import AlertNotFoundError, AlertPersistenceError, AlertStore
from fleetwatch.api.auth import verify_api_key
from fleetwatch.api.dependencies import get_alert_monitor, get_alert_store
from fleetwatch.api.models import (
    AlertItem,
    AlertMutationResponse,
    AlertResponse,
    AlertsResponse,
    AlertUpdateRequest,
    ErrorResponse,
)

logger = structlog.get_logger(__name__)
router = APIRouter()

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Alert not found"}}
_WRITE_FAILED = {500: {"model": ErrorResponse, "description": "Alert store write failed"}}


def _persistence_failure(action: str, alert_id: str, e: AlertPersistenceError) -> HTTPException:
    logger.error(f"Failed to {action} alert", alert_id=alert_id, error=str(e))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action} alert: {e}",
    )


@router.get(
    "/alerts",
    response_model=AlertsResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid API key"}},
    summary="List alerts",
    description=(
        "Analyse current agent sessions and return candidate alerts ordered "
        "by severity, then most recent first. Dismissed auto-alert patterns "
        "are suppressed. Analysis failures yield an empty list, never an error."
    ),
)
async def list_alerts(
    include_persisted: bool = Query(
        default=False,
        description="Also include unresolved persisted alerts",
    ),
    api_key: str = Depends(verify_api_key),
    monitor: AlertMonitor = Depends(get_alert_monitor),
) -> AlertsResponse:
    start_time = time.perf_counter()

    summary = await monitor.list_alerts(include_persisted=include_persisted)

    latency_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Alerts listed",
        total=summary.total,
        critical=summary.critical_count,
        high=summary.high_count,
        latency_ms=round(latency_ms, 2),
    )

    return AlertsResponse(
        alerts=[AlertItem.from_alert(a) for a in summary.alerts],
        total=summary.total,
        critical_count=summary.critical_count,
        high_count=summary.high_count,
        timestamp=to_epoch_ms(summary.timestamp),
        latency_ms=round(latency_ms, 2),
    )


@router.get(
    "/alerts/{alert_id}",
    response_model=AlertResponse,
    responses=_NOT_FOUND,
    summary="Get persisted alert",
)
async def get_alert(
    alert_id: str,
    api_key: str = Depends(verify_api_key),
    store: AlertStore = Depends(get_alert_store),
) -> AlertResponse:
    try:
        alert = await store.get_alert(alert_id)
    except AlertNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")
    return AlertResponse(alert=AlertItem.from_alert(alert))


@router.patch(
    "/alerts/{alert_id}",
    response_model=AlertMutationResponse,
    response_model_exclude_none=True,
    responses={**_NOT_FOUND, **_WRITE_FAILED},
    summary="Update or resolve alert",
    description=(
        "Resolving an auto-generated alert id records a dismissal pattern so "
        "alerts of that session and kind stop surfacing. Other ids must exist "
        "in the store; only supplied fields change."
    ),
)
async def update_alert(
    alert_id: str,
    body: AlertUpdateRequest,
    api_key: str = Depends(verify_api_key),
    store: AlertStore = Depends(get_alert_store),
) -> AlertMutationResponse:
    changes = {}
    if "details" in body.model_fields_set:
        changes["details"] = body.details

    try:
        result = await store.update_alert(
            alert_id,
            resolved=body.resolved,
            priority=body.priority,
            resolved_by=body.resolved_by,
            **changes,
        )
    except AlertNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")
    except AlertPersistenceError as e:
        raise _persistence_failure("update", alert_id, e)

    if result.dismissed:
        logger.info("Auto-alert pattern dismissed", alert_id=alert_id, pattern=result.dismissed_pattern)
        return AlertMutationResponse(dismissed_pattern=result.dismissed_pattern)

    logger.info("Alert updated", alert_id=alert_id, resolved=result.alert.resolved)
    return AlertMutationResponse(alert=AlertItem.from_alert(result.alert))


@router.delete(
    "/alerts/{alert_id}",
    response_model=AlertMutationResponse,
    response_model_exclude_none=True,
    responses={**_NOT_FOUND, **_WRITE_FAILED},
    summary="Delete alert or dismiss auto-alert pattern",
)
async def delete_alert(
    alert_id: str,
    api_key: str = Depends(verify_api_key),
    store: AlertStore = Depends(get_alert_store),
) -> AlertMutationResponse:
    try:
        result = await store.delete_alert(alert_id)
    except AlertNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")
    except AlertPersistenceError as e:
        raise _persistence_failure("delete", alert_id, e)

    if result.dismissed:
        logger.info("Auto-alert pattern dismissed", alert_id=alert_id, pattern=result.dismissed_pattern)
        return AlertMutationResponse(dismissed_pattern=result.dismissed_pattern)

    logger.info("Alert deleted", alert_id=alert_id)
    return AlertMutationResponse(removed=AlertItem.from_alert(result.alert))
