"""
Dependency injection for FastAPI endpoints.
"""

from fleetwatch.alerts.config import AlertStoreConfig
from fleetwatch.alerts.notifications import NotificationQueue
from fleetwatch.alerts.service import AlertMonitor
from fleetwatch.alerts.store import AlertStore
from fleetwatch.analysis.config import AnalysisConfig
from fleetwatch.config.settings import get_settings
from fleetwatch.sessions.directory import SessionDirectory
from fleetwatch.sessions.transcripts import TranscriptReader

# Global service instances (initialized on first request)
_alert_store: AlertStore | None = None
_alert_monitor: AlertMonitor | None = None
_notification_queue: NotificationQueue | None = None
_store_config: AlertStoreConfig | None = None


def get_store_config() -> AlertStoreConfig:
    """Get alert store configuration."""
    global _store_config

    if _store_config is None:
        _store_config = AlertStoreConfig()

    return _store_config


def get_alert_store() -> AlertStore:
    """
    Get alert store instance.

    The backing file path comes from settings at construction time.
    """
    global _alert_store

    if _alert_store is None:
        settings = get_settings()
        _alert_store = AlertStore(settings.alerts_path, config=get_store_config())

    return _alert_store


def get_alert_monitor() -> AlertMonitor:
    """Get the alert monitor wired to the configured sessions directory."""
    global _alert_monitor

    if _alert_monitor is None:
        settings = get_settings()
        _alert_monitor = AlertMonitor(
            config=AnalysisConfig(),
            directory=SessionDirectory(settings.sessions_dir),
            transcripts=TranscriptReader(settings.sessions_dir),
            store=get_alert_store(),
        )

    return _alert_monitor


def get_notification_queue() -> NotificationQueue:
    """Get the pending-notification queue."""
    global _notification_queue

    if _notification_queue is None:
        settings = get_settings()
        _notification_queue = NotificationQueue(
            settings.pending_notifications_path, config=get_store_config(),
        )

    return _notification_queue


def reset_dependencies() -> None:
    """Drop cached instances (settings changes, tests)."""
    global _alert_store, _alert_monitor, _notification_queue, _store_config

    _alert_store = None
    _alert_monitor = None
    _notification_queue = None
    _store_config = None
