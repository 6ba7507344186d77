"""Alert store and notification configuration.

All settings can be overridden via ``ALERTS_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AlertStoreConfig(BaseSettings):
    """Configuration for persisted alerts and urgent-alert notifications."""

    model_config = SettingsConfigDict(
        env_prefix="ALERTS_",
        case_sensitive=False,
        extra="ignore",
    )

    default_resolved_by: str = Field(
        default="human",
        min_length=1,
        description="resolvedBy stamp when a resolve request names no one",
    )

    default_target_agent: str = Field(
        default="ryan",
        min_length=1,
        description="Recipient of agent-raised alerts that name no target",
    )

    notify_channel: str = Field(
        default="whatsapp",
        description="Channel label written into queued notifications",
    )
    notify_to: str | None = Field(
        default=None,
        description="Channel address for queued notifications (None = dispatcher default)",
    )
