"""Alert ranking.

Orders merged alerts by severity rank (critical first), then by timestamp
descending. ``sorted`` is stable, so alerts with equal severity and
timestamp keep their input order.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from fleetwatch.alerts.schemas import Alert, to_epoch_ms, utc_now


def rank_key(alert: Alert) -> tuple[int, float]:
    return (alert.severity_rank, -alert.timestamp.timestamp())


def rank_alerts(alerts: list[Alert]) -> list[Alert]:
    """Return alerts in presentation order (input is not mutated)."""
    return sorted(alerts, key=rank_key)


@dataclass
class AlertSummary:
    """Ranked alert list with aggregate counts.

    Attributes:
        alerts: Alerts in presentation order.
        timestamp: When the list was computed.
    """

    alerts: list[Alert] = field(default_factory=list)
    timestamp: datetime = field(default_factory=utc_now)

    @property
    def total(self) -> int:
        return len(self.alerts)

    @property
    def critical_count(self) -> int:
        return sum(1 for a in self.alerts if a.severity == "critical")

    @property
    def high_count(self) -> int:
        return sum(1 for a in self.alerts if a.severity == "high")

    def to_dict(self) -> dict[str, Any]:
        return {
            "alerts": [a.to_dict() for a in self.alerts],
            "total": self.total,
            "criticalCount": self.critical_count,
            "highCount": self.high_count,
            "timestamp": to_epoch_ms(self.timestamp),
        }


def summarize_alerts(alerts: list[Alert], now: datetime | None = None) -> AlertSummary:
    """Rank alerts and wrap them with counts."""
    return AlertSummary(alerts=rank_alerts(alerts), timestamp=now or utc_now())
