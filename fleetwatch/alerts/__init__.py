"""Alert synthesis, ranking, and persistence for agent sessions.

Components:
- Alert / AgentRef: Canonical alert record with derived legacy fields
- AlertKind / AlertSeverity / AlertPriority: Literal types for type safety
- VALID_ALERT_KINDS / VALID_SEVERITIES / VALID_PRIORITIES: Frozensets for runtime validation
- auto_alert_id / dismissal_pattern / pattern_for_alert_id: Auto-alert identity
- synthesize_session_alerts: Stateless trigger evaluation for one session
- rank_alerts / AlertSummary: Severity-then-recency ordering with counts
- AlertStore: Whole-document persisted store with pattern dismissal
- NotificationQueue: Pending notifications for urgent agent-raised alerts
- AlertMonitor: Orchestrator for the per-request analysis pipeline
"""

from fleetwatch.alerts.config import AlertStoreConfig
from fleetwatch.alerts.identity import (
    auto_alert_id,
    dismissal_pattern,
    is_auto_alert_id,
    parse_auto_alert_id,
    pattern_for_alert_id,
)
from fleetwatch.alerts.notifications import NotificationQueue
from fleetwatch.alerts.ranking import AlertSummary, rank_alerts, summarize_alerts
from fleetwatch.alerts.schemas import (
    SEVERITY_RANK,
    VALID_ALERT_KINDS,
    VALID_PRIORITIES,
    VALID_SEVERITIES,
    AgentRef,
    Alert,
    AlertKind,
    AlertPriority,
    AlertSeverity,
)
from fleetwatch.alerts.service import AlertMonitor
from fleetwatch.alerts.store import (
    AlertNotFoundError,
    AlertPersistenceError,
    AlertStore,
    AlertStoreError,
    StoreResult,
)
from fleetwatch.alerts.triggers import synthesize_session_alerts

__all__ = [
    "AgentRef",
    "Alert",
    "AlertKind",
    "AlertMonitor",
    "AlertNotFoundError",
    "AlertPersistenceError",
    "AlertPriority",
    "AlertSeverity",
    "AlertStore",
    "AlertStoreConfig",
    "AlertStoreError",
    "AlertSummary",
    "NotificationQueue",
    "SEVERITY_RANK",
    "StoreResult",
    "VALID_ALERT_KINDS",
    "VALID_PRIORITIES",
    "VALID_SEVERITIES",
    "auto_alert_id",
    "dismissal_pattern",
    "is_auto_alert_id",
    "parse_auto_alert_id",
    "pattern_for_alert_id",
    "rank_alerts",
    "summarize_alerts",
    "synthesize_session_alerts",
]
