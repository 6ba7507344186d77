"""Shared fixtures for API tests."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from fleetwatch.alerts.config import AlertStoreConfig
from fleetwatch.alerts.notifications import NotificationQueue
from fleetwatch.alerts.ranking import AlertSummary
from fleetwatch.alerts.schemas import AgentRef, Alert
from fleetwatch.alerts.service import AlertMonitor
from fleetwatch.alerts.store import AlertStore
from fleetwatch.api.app import create_app
from fleetwatch.api.auth import verify_api_key
from fleetwatch.api.dependencies import (
    get_alert_monitor,
    get_alert_store,
    get_notification_queue,
    get_store_config,
)

TS = datetime(2026, 2, 7, 12, 0, 0, tzinfo=timezone.utc)
TS_MS = 1_770_465_600_000


def _make_alert(
    alert_id: str = "alert-1a2b3c4d-1770465600000",
    kind: str = "help_needed",
    severity: str = "medium",
    **kwargs,
) -> Alert:
    """Helper to create an Alert with sensible defaults."""
    return Alert(
        alert_id=alert_id,
        kind=kind,
        severity=severity,
        agent=kwargs.pop(
            "agent", AgentRef(agent_id="builder", agent_name="builder"),
        ),
        message=kwargs.pop("message", "Which branch should I target?"),
        timestamp=kwargs.pop("timestamp", TS),
        **kwargs,
    )


@pytest.fixture
def mock_store():
    """Mock AlertStore."""
    return AsyncMock(spec=AlertStore)


@pytest.fixture
def mock_monitor():
    """Mock AlertMonitor returning an empty list."""
    monitor = AsyncMock(spec=AlertMonitor)
    monitor.list_alerts.return_value = AlertSummary(timestamp=TS)
    return monitor


@pytest.fixture
def mock_queue():
    """Mock NotificationQueue."""
    queue = AsyncMock(spec=NotificationQueue)
    queue.enqueue.return_value = True
    queue.pending.return_value = []
    return queue


@pytest.fixture
def store_config():
    return AlertStoreConfig(default_target_agent="ryan", notify_channel="whatsapp")


@pytest.fixture
def client(mock_store, mock_monitor, mock_queue, store_config):
    """FastAPI TestClient with all alert dependencies overridden."""
    app = create_app()

    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[get_alert_store] = lambda: mock_store
    app.dependency_overrides[get_alert_monitor] = lambda: mock_monitor
    app.dependency_overrides[get_notification_queue] = lambda: mock_queue
    app.dependency_overrides[get_store_config] = lambda: store_config

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
