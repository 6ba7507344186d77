"""
Pydantic models for API request/response validation.

Wire names are camelCase (``criticalCount``, ``resolvedBy``) to stay
compatible with existing dashboard consumers; Python attributes are
snake_case via an alias generator.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fleetwatch.alerts.schemas import Alert


class CamelModel(BaseModel):
    """Base model serialising to camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str = Field(..., description="Error message")
    error_type: str | None = Field(default=None, description="Error category")


# Alert models


class AlertItem(CamelModel):
    """Single alert record (canonical plus derived legacy fields)."""

    id: str = Field(..., description="Alert identifier")
    kind: str = Field(..., description="error, stuck, help_needed, long_running, high_token_usage, aborted_run")
    type: str = Field(..., description="Legacy alias of kind")
    severity: str = Field(..., description="critical, high, medium, low")
    priority: str = Field(..., description="Legacy priority derived from severity")
    agent_id: str = Field(..., description="Source agent session key")
    agent_name: str = Field(..., description="Display name of the source agent")
    agent: str = Field(..., description="Legacy alias of agentId")
    session_id: str | None = Field(default=None, description="Source session id")
    message: str = Field(..., description="Short human-readable summary")
    details: str | None = Field(default=None, description="Longer context")
    timestamp: int = Field(..., description="Creation time (epoch ms)")
    resolved: bool = Field(default=False, description="Whether an operator resolved it")
    acknowledged: bool = Field(default=False, description="Legacy alias of resolved")
    resolved_at: int | None = Field(default=None, description="Resolution time (epoch ms)")
    resolved_by: str | None = Field(default=None, description="Who resolved it")
    generation: int | None = Field(default=None, description="Synthesis stamp of auto alerts")
    task_id: str | None = Field(default=None, description="Related task")
    task_title: str | None = Field(default=None, description="Related task title")
    target_agent: str | None = Field(default=None, description="Addressee of agent-raised alerts")

    @classmethod
    def from_alert(cls, alert: Alert) -> "AlertItem":
        return cls.model_validate(alert.to_dict())


class AlertsResponse(CamelModel):
    """Response model for the ranked alert list."""

    alerts: list[AlertItem] = Field(..., description="Alerts in presentation order")
    total: int = Field(..., description="Number of alerts returned")
    critical_count: int = Field(..., description="Alerts with critical severity")
    high_count: int = Field(..., description="Alerts with high severity")
    timestamp: int = Field(..., description="When the list was computed (epoch ms)")
    latency_ms: float = Field(..., description="Processing latency in milliseconds")


class AlertResponse(CamelModel):
    """Response model for a single persisted alert."""

    alert: AlertItem


class AlertUpdateRequest(CamelModel):
    """Request model for PATCH /alerts/{id}. Omitted fields are untouched."""

    resolved: bool | None = Field(default=None, description="New resolution state")
    priority: str | None = Field(
        default=None,
        description="info, needs-input, blocked, urgent (other values are ignored)",
    )
    details: str | None = Field(default=None, description="New details (null clears)")
    resolved_by: str | None = Field(default=None, description="Who is resolving")


class AlertMutationResponse(CamelModel):
    """Response model for PATCH and DELETE.

    ``alert`` is the updated record (PATCH), ``removed`` the deleted one
    (DELETE), ``dismissed_pattern`` the suppression rule recorded for an
    auto-generated id.
    """

    success: bool = True
    alert: AlertItem | None = None
    removed: AlertItem | None = None
    dismissed_pattern: str | None = None


class NotifyRequest(CamelModel):
    """Request model for agent-raised alerts."""

    agent: str = Field(..., min_length=1, description="Raising agent")
    message: str = Field(..., min_length=1, description="What the agent needs")
    priority: str | None = Field(default=None, description="info, needs-input, blocked, urgent")
    details: str | None = None
    task_id: str | None = None
    task_title: str | None = None
    target_agent: str | None = None


class NotifyResponse(CamelModel):
    """Response model for agent-raised alerts."""

    success: bool = True
    alert: AlertItem
    notification_queued: bool
    message: str


class PendingNotificationsResponse(CamelModel):
    """Queued notifications awaiting dispatch."""

    pending: list[dict[str, Any]]
    count: int


class ClearNotificationsResponse(CamelModel):
    """Result of clearing dispatched notifications."""

    success: bool = True
    cleared: int
    remaining: int


# Health models


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    status: str = Field(..., description="healthy, degraded, or unhealthy")
    details: dict[str, Any] | None = Field(default=None, description="Additional details")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall service status")
    version: str = Field(..., description="Service version")
    components: dict[str, ComponentHealth] = Field(default_factory=dict)
