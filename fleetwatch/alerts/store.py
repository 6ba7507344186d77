"""Persisted alert store.

Owns operator-acknowledged and agent-raised alerts plus the set of
dismissed auto-alert patterns, held in one JSON document:

    {"schemaVersion": 1, "alerts": [...], "dismissedPatterns": [...],
     "lastUpdated": <epoch ms>}

Every operation is a whole-document read-modify-write. Read failures
degrade to an empty store; write failures raise ``AlertPersistenceError``.
Concurrent writers are not coordinated: the last write wins.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from fleetwatch.alerts.config import AlertStoreConfig
from fleetwatch.alerts.identity import pattern_for_alert_id
from fleetwatch.alerts.schemas import (
    VALID_PRIORITIES,
    AgentRef,
    Alert,
    from_epoch_ms,
    new_alert_id,
    to_epoch_ms,
    utc_now,
)
from fleetwatch.observability.metrics import MetricsCollector, get_metrics
from fleetwatch.storage.documents import JsonDocument

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_UNSET: Any = object()


class AlertStoreError(Exception):
    """Base exception for alert store errors."""


class AlertNotFoundError(AlertStoreError):
    """Raised when an operation addresses an alert id absent from the store."""

    def __init__(self, alert_id: str):
        super().__init__(f"Alert not found: {alert_id}")
        self.alert_id = alert_id


class AlertPersistenceError(AlertStoreError):
    """Raised when the store document cannot be written."""


@dataclass
class AlertsDocument:
    """In-memory form of the persisted store.

    Attributes:
        alerts: Persisted alerts in insertion order.
        dismissed_patterns: Dismissal patterns, unique, in insertion order.
        last_updated: Time of the last successful mutation.
        unreadable: Stored records that do not map to an Alert, written
            back unchanged so a save never drops them.
    """

    alerts: list[Alert] = field(default_factory=list)
    dismissed_patterns: list[str] = field(default_factory=list)
    last_updated: datetime | None = None
    unreadable: list[Any] = field(default_factory=list)

    def find(self, alert_id: str) -> Alert | None:
        for alert in self.alerts:
            if alert.alert_id == alert_id:
                return alert
        return None

    def dismiss(self, pattern: str) -> bool:
        """Add a pattern. Returns False if it was already dismissed."""
        if pattern in self.dismissed_patterns:
            return False
        self.dismissed_patterns.append(pattern)
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "schemaVersion": SCHEMA_VERSION,
            "alerts": [a.to_dict() for a in self.alerts] + list(self.unreadable),
            "dismissedPatterns": list(self.dismissed_patterns),
            "lastUpdated": to_epoch_ms(self.last_updated) if self.last_updated else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AlertsDocument":
        """Decode a stored document, setting aside records that do not map to an Alert."""
        raw_alerts = data.get("alerts")
        if not isinstance(raw_alerts, list):
            raw_alerts = []

        alerts: list[Alert] = []
        unreadable: list[Any] = []
        for raw in raw_alerts:
            if not isinstance(raw, dict):
                unreadable.append(raw)
                continue
            try:
                alerts.append(Alert.from_dict(raw))
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning("Skipping unreadable stored alert %r: %s", raw.get("id"), e)
                unreadable.append(raw)

        raw_patterns = data.get("dismissedPatterns")
        if not isinstance(raw_patterns, list):
            raw_patterns = []
        patterns = [p for p in raw_patterns if isinstance(p, str)]

        try:
            last_updated = from_epoch_ms(data.get("lastUpdated"))
        except (ValueError, OverflowError, OSError):
            last_updated = None

        return cls(
            alerts=alerts,
            dismissed_patterns=list(dict.fromkeys(patterns)),
            last_updated=last_updated,
            unreadable=unreadable,
        )


@dataclass
class StoreResult:
    """Outcome of an update or delete.

    Exactly one of ``alert`` (the updated or removed record) and
    ``dismissed_pattern`` is set.
    """

    alert: Alert | None = None
    dismissed_pattern: str | None = None

    @property
    def dismissed(self) -> bool:
        return self.dismissed_pattern is not None


class AlertStore:
    """File-backed alert store.

    Provides get, update, delete and create operations for persisted
    alerts and pattern dismissal for auto-generated ones.
    """

    def __init__(
        self,
        path: Path,
        config: AlertStoreConfig | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._document = JsonDocument(path)
        self._config = config or AlertStoreConfig()
        self._metrics = metrics or get_metrics()

    @property
    def path(self) -> Path:
        return self._document.path

    async def load(self) -> AlertsDocument:
        """Read the whole store. Missing or unreadable files yield an empty store."""
        try:
            data = await self._document.read()
        except (OSError, ValueError) as e:
            logger.warning("Alert store unreadable at %s, using empty store: %s", self.path, e)
            return AlertsDocument()

        if data is None:
            return AlertsDocument()
        if not isinstance(data, dict):
            logger.warning("Alert store at %s is not an object, using empty store", self.path)
            return AlertsDocument()
        return AlertsDocument.from_dict(data)

    async def save(self, document: AlertsDocument, operation: str = "save") -> None:
        """Stamp ``last_updated`` and replace the whole store.

        Raises:
            AlertPersistenceError: If the write fails.
        """
        document.last_updated = utc_now()
        try:
            await self._document.write(document.to_dict())
        except OSError as e:
            logger.error("Failed to write alert store %s: %s", self.path, e)
            self._metrics.record_store_mutation(operation, "failed")
            raise AlertPersistenceError(f"Failed to write alert store: {e}") from e

    async def _dismiss(
        self, document: AlertsDocument, pattern: str, operation: str,
    ) -> StoreResult:
        if document.dismiss(pattern):
            await self.save(document, operation)
            logger.info("Dismissed auto-alert pattern %s", pattern)
        self._metrics.record_store_mutation(operation, "dismissed")
        return StoreResult(dismissed_pattern=pattern)

    # ── Queries ──────────────────────────────────────────

    async def get_alert(self, alert_id: str) -> Alert:
        """Look up a persisted alert by exact id.

        Raises:
            AlertNotFoundError: If no alert has this id.
        """
        document = await self.load()
        alert = document.find(alert_id)
        if alert is None:
            raise AlertNotFoundError(alert_id)
        return alert

    async def list_alerts(self, *, resolved: bool | None = None) -> list[Alert]:
        """Persisted alerts, optionally filtered by resolution state."""
        document = await self.load()
        if resolved is None:
            return list(document.alerts)
        return [a for a in document.alerts if a.resolved is resolved]

    async def dismissed_patterns(self) -> frozenset[str]:
        document = await self.load()
        return frozenset(document.dismissed_patterns)

    # ── Mutations ────────────────────────────────────────

    async def update_alert(
        self,
        alert_id: str,
        *,
        resolved: bool | None = None,
        priority: str | None = None,
        details: str | None = _UNSET,
        resolved_by: str | None = None,
    ) -> StoreResult:
        """Resolve, reprioritise or annotate an alert.

        Resolving an auto-generated id records its dismissal pattern
        instead of touching ``alerts``. Otherwise only the supplied fields
        change. A priority outside the legacy enum is ignored.

        Args:
            alert_id: Alert to update.
            resolved: New resolution state.
            priority: Legacy priority (info, needs-input, blocked, urgent).
            details: New details; pass None to clear.
            resolved_by: Who resolved it (defaults to the configured stamp).

        Returns:
            StoreResult with the updated alert or the dismissed pattern.

        Raises:
            AlertNotFoundError: If a non-auto id is absent.
            AlertPersistenceError: If the write fails.
        """
        document = await self.load()

        pattern = pattern_for_alert_id(alert_id)
        if pattern is not None and resolved is True:
            return await self._dismiss(document, pattern, "update")

        alert = document.find(alert_id)
        if alert is None:
            self._metrics.record_store_mutation("update", "not_found")
            raise AlertNotFoundError(alert_id)

        if resolved is True:
            alert.resolve(by=resolved_by or self._config.default_resolved_by)
        elif resolved is False:
            alert.reopen()

        if priority is not None:
            if priority in VALID_PRIORITIES:
                alert.set_priority(priority)
            else:
                logger.debug("Ignoring invalid priority %r for %s", priority, alert_id)

        if details is not _UNSET:
            alert.details = details

        await self.save(document, "update")
        self._metrics.record_store_mutation("update", "updated")
        return StoreResult(alert=alert)

    async def delete_alert(self, alert_id: str) -> StoreResult:
        """Remove a persisted alert, or dismiss an auto-generated id's pattern.

        Raises:
            AlertNotFoundError: If a non-auto id is absent.
            AlertPersistenceError: If the write fails.
        """
        document = await self.load()

        pattern = pattern_for_alert_id(alert_id)
        if pattern is not None:
            return await self._dismiss(document, pattern, "delete")

        alert = document.find(alert_id)
        if alert is None:
            self._metrics.record_store_mutation("delete", "not_found")
            raise AlertNotFoundError(alert_id)

        document.alerts.remove(alert)
        await self.save(document, "delete")
        self._metrics.record_store_mutation("delete", "removed")
        return StoreResult(alert=alert)

    async def create_alert(
        self,
        *,
        agent: str,
        message: str,
        priority: str | None = None,
        details: str | None = None,
        task_id: str | None = None,
        task_title: str | None = None,
        target_agent: str | None = None,
        session_id: str | None = None,
        kind: str = "help_needed",
    ) -> Alert:
        """Persist an agent-raised alert.

        Args:
            agent: Name or id of the raising agent.
            message: Human-readable message.
            priority: Legacy priority; anything outside the enum becomes info.

        Returns:
            The persisted Alert.

        Raises:
            AlertPersistenceError: If the write fails.
        """
        now = utc_now()
        alert = Alert(
            alert_id=new_alert_id(now),
            kind=kind,
            severity="low",
            agent=AgentRef(agent_id=agent, agent_name=agent, session_id=session_id),
            message=message,
            details=details,
            timestamp=now,
            task_id=task_id,
            task_title=task_title,
            target_agent=target_agent or self._config.default_target_agent,
        )
        alert.set_priority(priority if priority in VALID_PRIORITIES else "info")

        document = await self.load()
        document.alerts.append(alert)
        await self.save(document, "create")
        self._metrics.record_store_mutation("create", "created")
        return alert
