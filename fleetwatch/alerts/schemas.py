"""Schema definitions for alert records.

An ``Alert`` is either a transient candidate synthesised from session
activity or a record persisted in the alert store. The canonical record
carries ``kind`` and ``severity``; the legacy ``priority`` and
``acknowledged`` fields are derived from it through a fixed translation
table and are never stored independently.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

AlertKind = Literal[
    "error",
    "stuck",
    "help_needed",
    "long_running",
    "high_token_usage",
    "aborted_run",
]

VALID_ALERT_KINDS: frozenset[str] = frozenset({
    "error",
    "stuck",
    "help_needed",
    "long_running",
    "high_token_usage",
    "aborted_run",
})

AlertSeverity = Literal["critical", "high", "medium", "low"]

VALID_SEVERITIES: frozenset[str] = frozenset({
    "critical",
    "high",
    "medium",
    "low",
})

SEVERITY_RANK: dict[str, int] = {
    "critical": 0,
    "high": 1,
    "medium": 2,
    "low": 3,
}

AlertPriority = Literal["info", "needs-input", "blocked", "urgent"]

VALID_PRIORITIES: frozenset[str] = frozenset({
    "info",
    "needs-input",
    "blocked",
    "urgent",
})

# Legacy priority <-> canonical severity
SEVERITY_TO_PRIORITY: dict[str, str] = {
    "critical": "urgent",
    "high": "blocked",
    "medium": "needs-input",
    "low": "info",
}
PRIORITY_TO_SEVERITY: dict[str, str] = {p: s for s, p in SEVERITY_TO_PRIORITY.items()}

# Kind assumed for persisted records that predate ``kind``
DEFAULT_PERSISTED_KIND = "help_needed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def from_epoch_ms(value: Any) -> datetime | None:
    """Accept epoch milliseconds or an ISO-8601 string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValueError(f"Unsupported timestamp {value!r}")


def new_alert_id(now: datetime | None = None) -> str:
    """Opaque id for producer-created persisted alerts."""
    now = now or utc_now()
    return f"alert-{uuid.uuid4().hex[:8]}-{to_epoch_ms(now)}"


@dataclass(frozen=True)
class AgentRef:
    """Identifies the agent session an alert came from."""

    agent_id: str
    agent_name: str
    session_id: str | None = None


@dataclass
class Alert:
    """An operator-facing alert.

    Attributes:
        kind: What condition was detected.
        severity: Urgency level (critical, high, medium, low).
        agent: Source agent session.
        message: Short human-readable summary.
        alert_id: Stable identity (auto-generated or opaque).
        details: Optional longer context.
        timestamp: Creation time.
        resolved: Whether an operator has resolved the alert.
        resolved_at: Set iff resolved.
        resolved_by: Set iff resolved.
        generation: Synthesis stamp (epoch ms) of auto-generated alerts.
        task_id: Related task for agent-raised alerts.
        task_title: Display title of the related task.
        target_agent: Who the agent-raised alert is addressed to.
    """

    kind: str
    severity: str
    agent: AgentRef
    message: str
    alert_id: str = field(default_factory=new_alert_id)
    details: str | None = None
    timestamp: datetime = field(default_factory=utc_now)
    resolved: bool = False
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    generation: int | None = None
    task_id: str | None = None
    task_title: str | None = None
    target_agent: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in VALID_ALERT_KINDS:
            raise ValueError(
                f"Invalid kind {self.kind!r}. "
                f"Must be one of: {sorted(VALID_ALERT_KINDS)}"
            )
        if self.severity not in VALID_SEVERITIES:
            raise ValueError(
                f"Invalid severity {self.severity!r}. "
                f"Must be one of: {sorted(VALID_SEVERITIES)}"
            )
        stamped = (self.resolved_at is not None, self.resolved_by is not None)
        if self.resolved and stamped != (True, True):
            raise ValueError("Resolved alerts require resolved_at and resolved_by")
        if not self.resolved and stamped != (False, False):
            raise ValueError("Unresolved alerts cannot carry resolved_at/resolved_by")

    @property
    def priority(self) -> str:
        """Legacy priority derived from severity."""
        return SEVERITY_TO_PRIORITY[self.severity]

    @property
    def acknowledged(self) -> bool:
        """Legacy alias of ``resolved``."""
        return self.resolved

    @property
    def severity_rank(self) -> int:
        return SEVERITY_RANK[self.severity]

    def resolve(self, by: str, at: datetime | None = None) -> None:
        """Mark resolved, stamping ``resolved_at`` and ``resolved_by`` together."""
        self.resolved = True
        self.resolved_at = at or utc_now()
        self.resolved_by = by

    def reopen(self) -> None:
        """Clear the resolution and both stamps."""
        self.resolved = False
        self.resolved_at = None
        self.resolved_by = None

    def set_priority(self, priority: str) -> None:
        """Apply a legacy priority by translating it to severity."""
        self.severity = PRIORITY_TO_SEVERITY[priority]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary.

        Emits the canonical fields plus the derived legacy fields
        (``type``, ``priority``, ``acknowledged``, ``agent``). Optional
        fields are omitted when unset.
        """
        data: dict[str, Any] = {
            "id": self.alert_id,
            "kind": self.kind,
            "type": self.kind,
            "severity": self.severity,
            "priority": self.priority,
            "agentId": self.agent.agent_id,
            "agentName": self.agent.agent_name,
            "agent": self.agent.agent_id,
            "sessionId": self.agent.session_id,
            "message": self.message,
            "details": self.details,
            "timestamp": to_epoch_ms(self.timestamp),
            "resolved": self.resolved,
            "acknowledged": self.acknowledged,
            "resolvedAt": to_epoch_ms(self.resolved_at) if self.resolved_at else None,
            "resolvedBy": self.resolved_by,
            "generation": self.generation,
            "taskId": self.task_id,
            "taskTitle": self.task_title,
            "targetAgent": self.target_agent,
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Alert":
        """Create an Alert from either representation.

        Legacy records may carry only ``priority`` (mapped to severity),
        ``type`` instead of ``kind``, ``agent`` instead of
        ``agentId``/``agentName``, and ``acknowledged`` instead of
        ``resolved``.

        Args:
            data: Dictionary with alert fields.

        Returns:
            Alert instance.

        Raises:
            ValueError: If the record cannot be mapped onto a valid Alert.
            KeyError: If ``id`` or ``message`` is missing.
        """
        kind = data.get("kind") or data.get("type") or DEFAULT_PERSISTED_KIND

        severity = data.get("severity")
        if severity not in VALID_SEVERITIES:
            severity = PRIORITY_TO_SEVERITY.get(data.get("priority") or "info", "low")

        agent_id = data.get("agentId") or data.get("agent") or "unknown"
        agent_name = data.get("agentName") or data.get("agent") or agent_id

        timestamp = from_epoch_ms(data.get("timestamp")) or utc_now()

        resolved = bool(data.get("resolved", data.get("acknowledged", False)))
        resolved_at = None
        resolved_by = None
        if resolved:
            resolved_at = from_epoch_ms(data.get("resolvedAt")) or timestamp
            resolved_by = data.get("resolvedBy") or "unknown"

        return cls(
            alert_id=data["id"],
            kind=kind,
            severity=severity,
            agent=AgentRef(
                agent_id=agent_id,
                agent_name=agent_name,
                session_id=data.get("sessionId"),
            ),
            message=data["message"],
            details=data.get("details"),
            timestamp=timestamp,
            resolved=resolved,
            resolved_at=resolved_at,
            resolved_by=resolved_by,
            generation=data.get("generation"),
            task_id=data.get("taskId"),
            task_title=data.get("taskTitle"),
            target_agent=data.get("targetAgent"),
        )
